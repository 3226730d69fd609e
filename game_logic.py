"""
Gamification rules for MindPal: coins, streaks, pet stats and levels.

Every function here is pure. Callers pass in "today" explicitly so the
rules never read the clock themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Optional, Union

BASE_COINS = 10
MAX_COINS_PER_ENTRY = 60
COINS_PER_LEVEL = 100

PET_STAT_MIN = 0
PET_STAT_MAX = 100
PET_HEALTH_FLOOR = 10
PET_HEALTH_LOSS_PER_DAY = 5

MOOD_HAPPINESS_EFFECTS: Dict[str, int] = {
    "happy": 8,
    "excited": 10,
    "energetic": 6,
    "content": 5,
    "calm": 3,
    "sad": -3,
    "anxious": -5,
    "angry": -8,
    "irritated": -6,
    "frustrated": -4,
}

DateLike = Union[date, datetime]


# ----------------------
# Coins
# ----------------------

def calculate_coins(word_count: int, char_count: int) -> int:
    """Coins for one journal entry, between 10 and 60."""
    coins = BASE_COINS

    # word tiers: highest applicable tier only
    if word_count >= 100:
        coins += 20
    elif word_count >= 50:
        coins += 10
    elif word_count >= 25:
        coins += 5

    # character bonuses stack
    if char_count >= 500:
        coins += 10
    if char_count >= 1000:
        coins += 20

    return min(coins, MAX_COINS_PER_ENTRY)


def calculate_streak_bonus(current_streak: int) -> int:
    if current_streak >= 30:
        return 20
    if current_streak >= 14:
        return 15
    if current_streak >= 7:
        return 10
    if current_streak >= 3:
        return 5
    return 0


# ----------------------
# Streaks
# ----------------------

@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    max_streak: int = 0


def to_utc_date(value: DateLike) -> date:
    """Calendar day of a date/datetime in UTC. Naive datetimes are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def day_gap(last_journal_date: Optional[DateLike], today: DateLike) -> Optional[int]:
    """Whole calendar days between the last entry and today, None if never journaled."""
    if last_journal_date is None:
        return None
    return (to_utc_date(today) - to_utc_date(last_journal_date)).days


def advance_streak(prior: StreakState, gap: Optional[int]) -> StreakState:
    """Resolve the streak after journaling `gap` days after the previous entry."""
    if gap is None:
        return StreakState(current_streak=1, max_streak=max(prior.max_streak, 1))

    if gap <= 0:
        # same day (or clock skew): nothing to advance
        return prior

    if gap == 1:
        current = prior.current_streak + 1
        return StreakState(current_streak=current, max_streak=max(prior.max_streak, current))

    return StreakState(current_streak=1, max_streak=max(prior.max_streak, 1))


def update_streak(prior: StreakState, last_journal_date: Optional[DateLike], today: DateLike) -> StreakState:
    return advance_streak(prior, day_gap(last_journal_date, today))


def has_journaled_today(last_journal_date: Optional[DateLike], today: DateLike) -> bool:
    return day_gap(last_journal_date, today) == 0


# ----------------------
# Pet
# ----------------------

def _clamp(value: int, low: int = PET_STAT_MIN, high: int = PET_STAT_MAX) -> int:
    return max(low, min(high, value))


def update_pet_happiness(mood: str, current_streak: int, current_happiness: int) -> int:
    """New pet happiness after an entry with `mood`, clamped to [0, 100].

    Moods outside the table contribute nothing; the streak bonus still applies.
    """
    change = MOOD_HAPPINESS_EFFECTS.get(mood, 0)

    if current_streak >= 7:
        change += 5
    elif current_streak >= 3:
        change += 2

    return _clamp(current_happiness + change)


def update_pet_health(last_active_date: Optional[DateLike], current_health: int, today: DateLike) -> int:
    """Pet loses 5 health per inactive day but never drops below 10 from decay."""
    gap = day_gap(last_active_date, today)
    if not gap or gap < 0 or current_health <= PET_HEALTH_FLOOR:
        return current_health

    loss = min(gap * PET_HEALTH_LOSS_PER_DAY, current_health - PET_HEALTH_FLOOR)
    return max(PET_HEALTH_FLOOR, current_health - loss)


# ----------------------
# Levels
# ----------------------

def calculate_level(total_coins: int) -> int:
    return total_coins // COINS_PER_LEVEL + 1


def get_coins_for_next_level(total_coins: int) -> int:
    return calculate_level(total_coins) * COINS_PER_LEVEL - total_coins
