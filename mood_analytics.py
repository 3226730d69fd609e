"""
Mood analytics over a user's journal entries.

`analyze_moods` buckets each entry's mood into positive / negative / neutral,
works out percentages, the dominant mood, the strongest fine-grained emotions,
the rewards the user qualifies for and the recent trend. Nothing is stored;
the result is recomputed whenever it is asked for.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Literal, Mapping, Tuple

log = logging.getLogger(__name__)

Sentiment = Literal["positive", "negative", "neutral"]
Trend = Literal["improving", "declining", "stable"]

POSITIVE_EMOTIONS: Tuple[str, ...] = (
    "joy", "happy", "happiness", "excited", "excitement", "love", "loved",
    "grateful", "gratitude", "proud", "pride", "confident", "confidence",
    "optimistic", "optimism", "peaceful", "peace", "content", "contentment",
    "satisfied", "satisfaction", "pleased", "pleasure", "delighted", "delight",
    "cheerful", "enthusiastic", "hopeful", "hope", "inspired", "inspiration",
    "amused", "amusement", "relief", "relieved", "calm", "serene", "blissful",
)

NEGATIVE_EMOTIONS: Tuple[str, ...] = (
    "sadness", "sad", "anger", "angry", "fear", "scared", "afraid", "fearful",
    "disgust", "disgusted", "disappointed", "disappointment", "frustrated",
    "frustration", "anxious", "anxiety", "worried", "worry", "stressed",
    "stress", "depressed", "depression", "lonely", "loneliness", "guilt",
    "guilty", "shame", "ashamed", "jealous", "jealousy", "envious", "envy",
    "bitter", "resentful", "resentment", "irritated", "irritation", "annoyed",
    "overwhelmed", "exhausted", "tired", "hurt", "pain", "grief", "regret",
    "remorse", "despair", "hopeless", "helpless", "confused", "confusion",
)

NEUTRAL_EMOTIONS: Tuple[str, ...] = (
    "neutral", "surprise", "surprised", "curious", "curiosity", "contemplative",
    "thoughtful", "pensive", "reflective", "uncertain", "mixed", "complex",
    "conflicted", "indifferent", "detached", "focused", "determined",
    "serious", "solemn", "nostalgic", "nostalgia", "melancholic", "melancholy",
)

_BUCKETS: Tuple[Tuple[Sentiment, Tuple[str, ...]], ...] = (
    ("positive", POSITIVE_EMOTIONS),
    ("negative", NEGATIVE_EMOTIONS),
    ("neutral", NEUTRAL_EMOTIONS),
)

TOP_FINE_EMOTIONS = 5
TREND_WINDOW = 3
TREND_THRESHOLD = 0.1


@dataclass(frozen=True)
class MoodReward:
    type: str
    title: str
    description: str
    emoji: str
    coin_reward: int


@dataclass(frozen=True)
class EmotionScore:
    label: str
    score: float


@dataclass
class MoodAnalytics:
    total_entries: int = 0
    mood_counts: Dict[str, int] = field(default_factory=dict)
    dominant_mood: str = "neutral"
    positive_percentage: int = 0
    negative_percentage: int = 0
    neutral_percentage: int = 0
    top_fine_emotions: List[EmotionScore] = field(default_factory=list)
    rewards: List[MoodReward] = field(default_factory=list)
    recent_trend: Trend = "stable"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


SUNSHINE_SOUL = MoodReward(
    type="positivity",
    title="Sunshine Soul",
    description="Maintained a mostly positive outlook",
    emoji="🌞",
    coin_reward=50,
)
RESILIENT_SPIRIT = MoodReward(
    type="resilience",
    title="Resilient Spirit",
    description="Kept negative moods low over time",
    emoji="🛡️",
    coin_reward=40,
)
CONSISTENT_CHRONICLER = MoodReward(
    type="consistency",
    title="Consistent Chronicler",
    description="Maintained regular journaling habits",
    emoji="📖",
    coin_reward=30,
)
EMOTIONAL_EXPLORER = MoodReward(
    type="diversity",
    title="Emotional Explorer",
    description="Experienced a wide range of emotions",
    emoji="🎭",
    coin_reward=25,
)


def normalize_mood(mood: Any) -> str:
    return str(mood or "").strip().lower() or "neutral"


def map_to_sentiment(mood: str) -> Sentiment:
    """Bucket a free-form mood label.

    Exact keyword matches win; otherwise the first bucket whose keyword appears
    inside the label is used ("very happy" -> positive). Labels matching
    nothing fall back to neutral.
    """
    mood_lower = normalize_mood(mood)

    for bucket, words in _BUCKETS:
        if mood_lower in words:
            return bucket

    for bucket, words in _BUCKETS:
        if any(word in mood_lower for word in words):
            return bucket

    log.warning("Unknown emotion %r, defaulting to neutral", mood)
    return "neutral"


def _percent(count: int, total: int) -> int:
    if not total:
        return 0
    # round half up
    return int(count * 100 / total + 0.5)


def _entry_time(entry: Mapping[str, Any]) -> datetime:
    value = entry.get("date") or entry.get("created_at")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        return datetime.min.replace(tzinfo=timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _sentiment_score(moods: Iterable[str]) -> float:
    score = 0.0
    for mood in moods:
        bucket = map_to_sentiment(mood)
        if bucket == "positive":
            score += 1
        elif bucket == "neutral":
            score += 0.5
    return score / TREND_WINDOW


def _fine_emotions(entry: Mapping[str, Any]) -> List[EmotionScore]:
    emotions = []
    for item in entry.get("fine_emotions") or []:
        if isinstance(item, EmotionScore):
            emotions.append(item)
        else:
            emotions.append(EmotionScore(label=str(item["label"]), score=float(item["score"])))
    return emotions


def _recent_trend(entries: List[Mapping[str, Any]]) -> Trend:
    if len(entries) < 2 * TREND_WINDOW:
        return "stable"

    ordered = sorted(entries, key=_entry_time)
    last = ordered[-TREND_WINDOW:]
    previous = ordered[-2 * TREND_WINDOW:-TREND_WINDOW]

    difference = (
        _sentiment_score(e.get("mood") for e in last)
        - _sentiment_score(e.get("mood") for e in previous)
    )
    if difference > TREND_THRESHOLD:
        return "improving"
    if difference < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def _rewards(analytics: MoodAnalytics) -> List[MoodReward]:
    rewards = []
    if analytics.positive_percentage >= 70:
        rewards.append(SUNSHINE_SOUL)
    if analytics.negative_percentage <= 20 and analytics.total_entries >= 5:
        rewards.append(RESILIENT_SPIRIT)
    if analytics.total_entries >= 10:
        rewards.append(CONSISTENT_CHRONICLER)
    if len(analytics.mood_counts) >= 5:
        rewards.append(EMOTIONAL_EXPLORER)
    return rewards


def analyze_moods(entries: Iterable[Mapping[str, Any]]) -> MoodAnalytics:
    """Aggregate journal entries (mappings with `mood`, `date`, optional `fine_emotions`)."""
    entries = list(entries)
    total = len(entries)
    log.debug("Analyzing %d journal entries", total)

    mood_counts: Dict[str, int] = {}
    sentiment_counts = {"positive": 0, "negative": 0, "neutral": 0}
    fine_scores: Dict[str, List[float]] = {}

    for entry in entries:
        mood = normalize_mood(entry.get("mood"))
        mood_counts[mood] = mood_counts.get(mood, 0) + 1
        sentiment_counts[map_to_sentiment(mood)] += 1

        for emotion in _fine_emotions(entry):
            fine_scores.setdefault(emotion.label, []).append(emotion.score)

    dominant_mood, max_count = "neutral", 0
    for mood, count in mood_counts.items():
        if count > max_count:
            dominant_mood, max_count = mood, count

    averaged = [
        EmotionScore(label=label, score=sum(scores) / len(scores))
        for label, scores in fine_scores.items()
    ]
    averaged.sort(key=lambda e: e.score, reverse=True)

    analytics = MoodAnalytics(
        total_entries=total,
        mood_counts=mood_counts,
        dominant_mood=dominant_mood,
        positive_percentage=_percent(sentiment_counts["positive"], total),
        negative_percentage=_percent(sentiment_counts["negative"], total),
        neutral_percentage=_percent(sentiment_counts["neutral"], total),
        top_fine_emotions=averaged[:TOP_FINE_EMOTIONS],
        recent_trend=_recent_trend(entries),
    )
    analytics.rewards = _rewards(analytics)
    return analytics
