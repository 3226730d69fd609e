import logging
from datetime import datetime, timedelta, timezone

from mood_analytics import (
    CONSISTENT_CHRONICLER,
    EMOTIONAL_EXPLORER,
    RESILIENT_SPIRIT,
    SUNSHINE_SOUL,
    analyze_moods,
    map_to_sentiment,
)

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def entries_for(*moods):
    return [{"mood": mood, "date": START + timedelta(days=i)} for i, mood in enumerate(moods)]


def test_empty_input():
    analytics = analyze_moods([])
    assert analytics.total_entries == 0
    assert analytics.positive_percentage == 0
    assert analytics.negative_percentage == 0
    assert analytics.neutral_percentage == 0
    assert analytics.dominant_mood == "neutral"
    assert analytics.rewards == []
    assert analytics.recent_trend == "stable"


def test_ten_happy_entries():
    analytics = analyze_moods(entries_for(*["happy"] * 10))
    assert analytics.positive_percentage == 100
    assert analytics.dominant_mood == "happy"
    assert SUNSHINE_SOUL in analytics.rewards
    assert CONSISTENT_CHRONICLER in analytics.rewards
    assert RESILIENT_SPIRIT in analytics.rewards
    assert EMOTIONAL_EXPLORER not in analytics.rewards


def test_all_rewards_can_apply_together():
    moods = ["happy", "excited", "calm", "content", "energetic"] * 2
    titles = [r.title for r in analyze_moods(entries_for(*moods)).rewards]
    assert titles == ["Sunshine Soul", "Resilient Spirit", "Consistent Chronicler", "Emotional Explorer"]


def test_moods_are_normalised_before_counting():
    analytics = analyze_moods(entries_for("Happy", " happy ", "HAPPY", "sad"))
    assert analytics.mood_counts == {"happy": 3, "sad": 1}
    assert analytics.positive_percentage == 75
    assert analytics.negative_percentage == 25


def test_percentages_round_half_up():
    analytics = analyze_moods(entries_for("happy", "sad", "neutral"))
    assert (analytics.positive_percentage, analytics.negative_percentage, analytics.neutral_percentage) == (33, 33, 33)

    analytics = analyze_moods(entries_for(*["happy"] * 7, "sad"))
    assert analytics.positive_percentage == 88  # 87.5
    assert analytics.negative_percentage == 13  # 12.5


def test_dominant_mood_ties_go_to_first_seen():
    assert analyze_moods(entries_for("calm", "sad", "sad", "calm")).dominant_mood == "calm"


def test_missing_mood_counts_as_neutral():
    analytics = analyze_moods([{"mood": None, "date": START}, {"date": START}])
    assert analytics.mood_counts == {"neutral": 2}
    assert analytics.neutral_percentage == 100


def test_sentiment_mapping():
    assert map_to_sentiment("anxious") == "negative"
    assert map_to_sentiment("nostalgic") == "neutral"
    assert map_to_sentiment("very happy") == "positive"
    assert map_to_sentiment("a bit sad") == "negative"


def test_unknown_mood_defaults_to_neutral_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="mood_analytics"):
        assert map_to_sentiment("blorp") == "neutral"
    assert "blorp" in caplog.text


def test_trend_improving():
    moods = ["sad", "angry", "anxious", "happy", "calm", "excited"]
    assert analyze_moods(entries_for(*moods)).recent_trend == "improving"


def test_trend_declining():
    moods = ["happy", "calm", "excited", "sad", "angry", "anxious"]
    assert analyze_moods(entries_for(*moods)).recent_trend == "declining"


def test_trend_stable_within_threshold():
    moods = ["happy", "neutral", "sad", "happy", "neutral", "sad"]
    assert analyze_moods(entries_for(*moods)).recent_trend == "stable"


def test_trend_needs_six_entries():
    assert analyze_moods(entries_for("sad", "sad", "happy", "happy", "happy")).recent_trend == "stable"


def test_trend_orders_by_date_without_mutating_input():
    entries = entries_for("sad", "sad", "sad", "happy", "happy", "happy")
    shuffled = [entries[4], entries[0], entries[5], entries[2], entries[3], entries[1]]
    snapshot = list(shuffled)

    assert analyze_moods(shuffled).recent_trend == "improving"
    assert shuffled == snapshot


def test_trend_accepts_iso_date_strings():
    entries = [
        {"mood": mood, "date": (START + timedelta(days=i)).isoformat()}
        for i, mood in enumerate(["happy"] * 3 + ["sad"] * 3)
    ]
    assert analyze_moods(entries).recent_trend == "declining"


def test_fine_emotions_averaged_and_top_five():
    entries = [
        {"mood": "happy", "date": START, "fine_emotions": [
            {"label": "joy", "score": 0.9},
            {"label": "surprise", "score": 0.2},
            {"label": "fear", "score": 0.1},
        ]},
        {"mood": "calm", "date": START, "fine_emotions": [
            {"label": "joy", "score": 0.5},
            {"label": "neutral", "score": 0.6},
            {"label": "sadness", "score": 0.3},
            {"label": "anger", "score": 0.05},
        ]},
    ]
    top = analyze_moods(entries).top_fine_emotions
    assert [e.label for e in top] == ["joy", "neutral", "sadness", "surprise", "fear"]
    assert abs(top[0].score - 0.7) < 1e-9


def test_analysis_is_repeatable():
    entries = entries_for("happy", "sad", "calm", "angry", "excited", "content", "happy")
    assert analyze_moods(entries).to_dict() == analyze_moods(entries).to_dict()


def test_accepts_generators():
    analytics = analyze_moods(e for e in entries_for("happy", "sad"))
    assert analytics.total_entries == 2


def test_energetic_is_not_in_the_keyword_tables(caplog):
    with caplog.at_level(logging.WARNING, logger="mood_analytics"):
        assert map_to_sentiment("energetic") == "neutral"
    assert "energetic" in caplog.text

    analytics = analyze_moods(entries_for("energetic", "happy"))
    assert (analytics.positive_percentage, analytics.neutral_percentage) == (50, 50)
