"""
MindPal Database Schemas

Each Pydantic model in the first half maps to a MongoDB collection (lowercased
class name) and uses snake_case field names as stored. The API models below
them describe request/response bodies; those speak camelCase on the wire.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Optional, Literal
from datetime import datetime

Mood = Literal[
    "happy", "excited", "energetic", "content", "calm",
    "sad", "anxious", "angry", "irritated", "frustrated",
]

# -----------------
# Core User Profile
# -----------------
class PetData(BaseModel):
    name: str = Field("Buddy", min_length=1, max_length=20)
    breed: str = "golden_retriever"
    happiness: int = Field(50, ge=0, le=100)
    health: int = Field(100, ge=0, le=100)
    items: List[str] = Field(default_factory=list)


class User(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password_hash: str
    total_coins: int = Field(0, ge=0)
    current_streak: int = Field(0, ge=0)
    max_streak: int = Field(0, ge=0)
    last_journal_date: Optional[datetime] = None
    last_active_at: Optional[datetime] = None
    level: int = Field(1, ge=1)
    pet_data: PetData = Field(default_factory=PetData)

# --------------
# Journal Entries
# --------------
class EmotionScore(BaseModel):
    label: str
    score: float = Field(..., ge=0, le=1)


class JournalEntry(BaseModel):
    user_id: str
    content: str = Field(..., min_length=10, max_length=5000)
    mood: Mood
    confidence: Optional[float] = Field(None, ge=0, le=1)
    ai_analysis: Optional[str] = Field(None, max_length=1000)
    fine_emotions: List[EmotionScore] = Field(default_factory=list)
    word_count: int = Field(..., ge=1)
    coins_earned: int = Field(..., ge=0, le=60)
    date: datetime
    day: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="UTC calendar day YYYY-MM-DD")

# -----
# Forum
# -----
class Author(BaseModel):
    id: str
    name: str


class ForumReply(BaseModel):
    id: str
    content: str = Field(..., min_length=1, max_length=2000)
    author: Author
    likes: int = Field(0, ge=0)
    created_at: datetime


class ForumTopic(BaseModel):
    title: str = Field(..., min_length=1, max_length=160)
    content: str = Field(..., min_length=1, max_length=5000)
    author: Author
    category: str = "General"
    likes: int = Field(0, ge=0)
    replies: List[ForumReply] = Field(default_factory=list)


# ======================================================================
# API models
# ======================================================================

class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- auth ----
class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=6)
    pet_name: Optional[str] = Field(None, min_length=1, max_length=20)


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


class PetDataOut(ApiModel):
    name: str
    breed: str
    happiness: int
    health: int
    items: List[str]


class UserOut(ApiModel):
    id: str
    username: str
    email: EmailStr
    total_coins: int
    current_streak: int
    max_streak: int
    level: int
    coins_for_next_level: int
    last_journal_date: Optional[datetime] = None
    pet_data: PetDataOut


class AuthResponse(ApiModel):
    message: str
    token: str
    user: UserOut


class LeaderboardRow(ApiModel):
    rank: int
    username: str
    pet_name: str
    total_coins: int
    current_streak: int
    level: int


class LeaderboardResponse(ApiModel):
    type: Literal["coins", "streak"]
    leaderboard: List[LeaderboardRow]


# ---- journal ----
class JournalEntryCreate(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    content: str = Field(..., min_length=10, max_length=5000)
    mood: Mood
    confidence: Optional[float] = Field(None, ge=0, le=1)
    ai_analysis: Optional[str] = Field(None, max_length=1000)
    fine_emotions: List[EmotionScore] = Field(default_factory=list)


class EntrySummary(ApiModel):
    id: str
    mood: Mood
    word_count: int
    coins_earned: int
    date: datetime


class UserStats(ApiModel):
    total_coins: int
    current_streak: int
    max_streak: int
    level: int
    pet_happiness: int
    leveled_up: bool
    streak_bonus: int = 0


class JournalSubmitResponse(ApiModel):
    message: str
    entry: EntrySummary
    user_stats: UserStats


class JournalEntryOut(ApiModel):
    id: str
    user_id: str
    content: Optional[str] = None
    mood: Mood
    confidence: Optional[float] = None
    ai_analysis: Optional[str] = None
    fine_emotions: List[EmotionScore] = Field(default_factory=list)
    word_count: int
    coins_earned: int
    date: datetime
    day: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MoodPointOut(ApiModel):
    id: str
    mood: Mood
    date: datetime


class AnalyzeRequest(ApiModel):
    content: str = Field(..., max_length=5000)


class AnalyzeResponse(ApiModel):
    mood: Mood
    confidence: float
    compound: float
    fine_emotions: List[EmotionScore]


class PaginationOut(ApiModel):
    current_page: int
    total_pages: int
    total_entries: int
    has_next: bool
    has_prev: bool


class FineEmotionOut(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    label: str
    score: float


class MoodRewardOut(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    type: str
    title: str
    description: str
    emoji: str
    coin_reward: int


class MoodAnalyticsOut(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    total_entries: int
    mood_counts: Dict[str, int]
    dominant_mood: str
    positive_percentage: int
    negative_percentage: int
    neutral_percentage: int
    top_fine_emotions: List[FineEmotionOut]
    rewards: List[MoodRewardOut]
    recent_trend: Literal["improving", "declining", "stable"]


# ---- forum ----
class TopicCreate(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=160)
    content: str = Field(..., min_length=1, max_length=5000)
    category: str = Field("General", max_length=40)


class ReplyCreate(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=2000)


class ForumReplyOut(ApiModel):
    id: str
    content: str
    author: Author
    likes: int = 0
    created_at: datetime


class ForumTopicOut(ApiModel):
    id: str
    title: str
    content: str
    author: Author
    category: str
    likes: int = 0
    replies: List[ForumReplyOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LikeRequest(ApiModel):
    type: Literal["topic", "reply"]
    id: str
    topic_id: Optional[str] = None


# ---- shop ----
class ShopItem(ApiModel):
    id: str
    name: str
    emoji: str
    category: Literal["hat", "outfit", "accessory", "background"]
    price: int = Field(..., gt=0)
    rarity: Literal["uncommon", "rare", "epic", "legendary"]


class PurchaseRequest(ApiModel):
    item_id: str


class PurchaseResponse(ApiModel):
    item: ShopItem
    total_coins: int
    items: List[str]
