from datetime import date, datetime, timedelta, timezone

import pytest

from game_logic import (
    MOOD_HAPPINESS_EFFECTS,
    StreakState,
    advance_streak,
    calculate_coins,
    calculate_level,
    calculate_streak_bonus,
    day_gap,
    get_coins_for_next_level,
    has_journaled_today,
    update_pet_happiness,
    update_pet_health,
    update_streak,
)

TODAY = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "words,chars,expected",
    [
        (0, 0, 10),
        (24, 0, 10),
        (25, 0, 15),
        (50, 0, 20),
        (100, 0, 30),
        (0, 500, 20),
        (0, 1000, 40),
        (50, 500, 30),
        (100, 1000, 60),
        (5000, 50000, 60),
    ],
)
def test_calculate_coins(words, chars, expected):
    assert calculate_coins(words, chars) == expected


def test_coins_always_between_10_and_60():
    for words in range(0, 300, 7):
        for chars in range(0, 3000, 97):
            assert 10 <= calculate_coins(words, chars) <= 60


def test_streak_bonus_tiers():
    assert [calculate_streak_bonus(s) for s in (0, 2, 3, 7, 14, 30, 100)] == [0, 0, 5, 10, 15, 20, 20]


@pytest.mark.parametrize(
    "coins,level",
    [(0, 1), (99, 1), (100, 2), (250, 3), (1000, 11)],
)
def test_calculate_level(coins, level):
    assert calculate_level(coins) == level


def test_coins_for_next_level():
    assert get_coins_for_next_level(0) == 100
    assert get_coins_for_next_level(99) == 1
    assert get_coins_for_next_level(100) == 100
    assert get_coins_for_next_level(250) == 50


def test_pet_happiness_clamped_high():
    assert update_pet_happiness("excited", 10, 95) == 100


def test_pet_happiness_clamped_low():
    assert update_pet_happiness("angry", 0, 5) == 0


def test_pet_happiness_streak_bonus_tiers():
    assert update_pet_happiness("calm", 2, 50) == 53
    assert update_pet_happiness("calm", 3, 50) == 55
    assert update_pet_happiness("calm", 7, 50) == 58


def test_pet_happiness_unknown_mood_only_gets_streak_bonus():
    assert update_pet_happiness("bewildered", 7, 50) == 55


def test_pet_happiness_stays_in_bounds():
    for mood in MOOD_HAPPINESS_EFFECTS:
        for streak in (0, 3, 7, 40):
            for happiness in (0, 1, 50, 99, 100):
                assert 0 <= update_pet_happiness(mood, streak, happiness) <= 100


def test_first_entry_seeds_streak():
    assert advance_streak(StreakState(), None) == StreakState(1, 1)


def test_consecutive_day_increments_streak():
    assert advance_streak(StreakState(4, 6), 1) == StreakState(5, 6)
    assert advance_streak(StreakState(6, 6), 1) == StreakState(7, 7)


def test_same_day_leaves_streak_alone():
    prior = StreakState(3, 5)
    assert advance_streak(prior, 0) is prior
    assert advance_streak(prior, -1) is prior


def test_missed_day_resets_streak_but_keeps_max():
    assert advance_streak(StreakState(9, 9), 2) == StreakState(1, 9)
    assert advance_streak(StreakState(0, 0), 10) == StreakState(1, 1)


def test_day_gap_uses_calendar_days():
    late_yesterday = datetime(2024, 3, 9, 23, 50, tzinfo=timezone.utc)
    early_today = datetime(2024, 3, 10, 0, 5, tzinfo=timezone.utc)
    assert day_gap(late_yesterday, early_today) == 1
    assert day_gap(None, TODAY) is None
    assert day_gap(date(2024, 3, 1), TODAY) == 9


def test_day_gap_treats_naive_datetimes_as_utc():
    assert day_gap(datetime(2024, 3, 9, 8, 0), TODAY) == 1


def test_update_streak_composes_gap_and_advance():
    prior = StreakState(2, 4)
    assert update_streak(prior, TODAY - timedelta(days=1), TODAY) == StreakState(3, 4)
    assert update_streak(prior, TODAY - timedelta(days=3), TODAY) == StreakState(1, 4)


def test_has_journaled_today():
    assert has_journaled_today(TODAY.replace(hour=1), TODAY)
    assert not has_journaled_today(TODAY - timedelta(days=1), TODAY)
    assert not has_journaled_today(None, TODAY)


def test_pet_health_decays_per_inactive_day():
    assert update_pet_health(TODAY - timedelta(days=3), 100, TODAY) == 85


def test_pet_health_never_decays_below_floor():
    assert update_pet_health(TODAY - timedelta(days=60), 100, TODAY) == 10
    assert update_pet_health(TODAY - timedelta(days=5), 8, TODAY) == 8


def test_pet_health_unchanged_when_active_today_or_never():
    assert update_pet_health(TODAY, 70, TODAY) == 70
    assert update_pet_health(None, 70, TODAY) == 70
