"""
Journal submission flow.

Validated request -> coins -> entry stored (one per user per UTC day) ->
streak, pet happiness and level resolved -> user stats saved.
"""
import logging
from datetime import datetime
from typing import Callable

from database import naive_utc, now_utc
from errors import UserNotFound
from game_logic import (
    StreakState,
    calculate_coins,
    calculate_level,
    calculate_streak_bonus,
    to_utc_date,
    update_pet_happiness,
    update_pet_health,
    update_streak,
)
from repositories import JournalRepository, UserRepository
from schemas import EntrySummary, JournalEntry, JournalEntryCreate, JournalSubmitResponse, UserStats

log = logging.getLogger(__name__)


def count_words(content: str) -> int:
    return len(content.split())


def day_key(moment: datetime) -> str:
    return to_utc_date(moment).isoformat()


class JournalService:
    def __init__(self, users: UserRepository, journals: JournalRepository, clock: Callable[[], datetime] = now_utc):
        self.users = users
        self.journals = journals
        self.clock = clock

    def submit(self, user_id: str, payload: JournalEntryCreate) -> JournalSubmitResponse:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound()

        now = self.clock()
        word_count = count_words(payload.content)
        coins_earned = calculate_coins(word_count, len(payload.content))

        entry = JournalEntry(
            user_id=user_id,
            content=payload.content,
            mood=payload.mood,
            confidence=payload.confidence,
            ai_analysis=payload.ai_analysis,
            fine_emotions=payload.fine_emotions,
            word_count=word_count,
            coins_earned=coins_earned,
            date=naive_utc(now),
            day=day_key(now),
        )
        # raises AlreadyJournaledToday before any stats change
        entry_id = self.journals.insert(entry)

        prior = StreakState(user.get("current_streak", 0), user.get("max_streak", 0))
        streak = update_streak(prior, user.get("last_journal_date"), now)
        streak_bonus = calculate_streak_bonus(streak.current_streak)
        happiness = update_pet_happiness(
            payload.mood,
            streak.current_streak,
            user.get("pet_data", {}).get("happiness", 50),
        )
        # decay for the days away is settled before last_active_at moves to now
        health = update_pet_health(
            user.get("last_active_at") or user.get("created_at"),
            user.get("pet_data", {}).get("health", 100),
            now,
        )

        updated = self.users.apply_journal(user_id, coins_earned + streak_bonus, streak, happiness, health, now)
        if updated is None:
            raise UserNotFound()

        previous_level = updated.get("level", 1)
        level = max(calculate_level(updated["total_coins"]), previous_level)
        leveled_up = level > previous_level
        if leveled_up:
            self.users.raise_level(user_id, level)
            log.info("User %s reached level %d", user_id, level)

        log.info(
            "Journal entry %s saved for user %s (+%d coins, streak %d)",
            entry_id, user_id, coins_earned + streak_bonus, streak.current_streak,
        )

        return JournalSubmitResponse(
            message="Journal entry saved successfully!",
            entry=EntrySummary(
                id=entry_id,
                mood=entry.mood,
                word_count=word_count,
                coins_earned=coins_earned,
                date=now,
            ),
            user_stats=UserStats(
                total_coins=updated["total_coins"],
                current_streak=streak.current_streak,
                max_streak=streak.max_streak,
                level=level,
                pet_happiness=happiness,
                leveled_up=leveled_up,
                streak_bonus=streak_bonus,
            ),
        )
