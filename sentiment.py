"""Local mood detection for journal text (VADER polarity plus keyword cues)."""

import re

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

analyzer = SentimentIntensityAnalyzer()

MIN_TEXT_LENGTH = 10

# keyword cues per journal mood, checked against the words of the entry
MOOD_KEYWORDS = {
    "happy": {"happy", "glad", "joy", "joyful", "good", "great", "wonderful", "smile"},
    "excited": {"excited", "thrilled", "amazing", "awesome", "pumped", "eager"},
    "energetic": {"energetic", "energized", "productive", "motivated", "active", "workout"},
    "content": {"content", "grateful", "thankful", "satisfied", "fine", "okay"},
    "calm": {"calm", "peaceful", "relaxed", "quiet", "serene", "rested"},
    "sad": {"sad", "down", "lonely", "cry", "cried", "miss", "depressed", "empty"},
    "anxious": {"anxious", "worried", "nervous", "scared", "afraid", "panic", "stress", "stressed"},
    "angry": {"angry", "furious", "mad", "rage", "hate"},
    "irritated": {"irritated", "annoyed", "bothered", "irritating", "annoying"},
    "frustrated": {"frustrated", "stuck", "blocked", "frustrating", "pointless"},
}

POSITIVE_MOODS = ("happy", "excited", "energetic", "content", "calm")
NEGATIVE_MOODS = ("sad", "anxious", "angry", "irritated", "frustrated")


class TextTooShort(ValueError):
    pass


def _keyword_hits(text: str) -> dict:
    words = set(re.findall(r"[a-z']+", text.lower()))
    return {mood: len(words & cues) for mood, cues in MOOD_KEYWORDS.items()}


def analyze_text(text: str) -> dict:
    """
    Detect a journal mood from free text.

    Returns {"mood", "confidence", "compound", "fine_emotions"} where mood is
    one of the ten journal moods and fine_emotions lists keyword-matched moods
    with normalised scores (strongest first).
    """
    text = (text or "").strip()
    if len(text) < MIN_TEXT_LENGTH:
        raise TextTooShort(f"Text must be at least {MIN_TEXT_LENGTH} characters")

    compound = analyzer.polarity_scores(text)["compound"]
    hits = _keyword_hits(text)

    if compound >= 0.05:
        candidates = POSITIVE_MOODS
    elif compound <= -0.05:
        candidates = NEGATIVE_MOODS
    else:
        candidates = POSITIVE_MOODS + NEGATIVE_MOODS

    # max() keeps the first mood on ties, so order of candidates matters
    mood = max(candidates, key=lambda m: hits[m])
    if hits[mood] == 0:
        if compound >= 0.5:
            mood = "excited"
        elif compound >= 0.05:
            mood = "happy"
        elif compound <= -0.5:
            mood = "sad"
        elif compound <= -0.05:
            mood = "frustrated"
        else:
            mood = "calm"

    total_hits = sum(hits.values())
    fine_emotions = sorted(
        (
            {"label": m, "score": round(count / total_hits, 3)}
            for m, count in hits.items()
            if count
        ),
        key=lambda e: e["score"],
        reverse=True,
    )

    return {
        "mood": mood,
        "confidence": round(min(1.0, 0.5 + abs(compound) / 2), 3),
        "compound": compound,
        "fine_emotions": fine_emotions,
    }
