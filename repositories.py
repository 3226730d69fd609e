"""
Storage access for users, journal entries and forum topics.

Each repository wraps one MongoDB collection and is built with the database
it should use, so the API (and the tests) decide which store backs it.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_documents, naive_utc, now_utc
from errors import (
    AlreadyJournaledToday,
    ReplyNotFound,
    TopicNotFound,
    UserAlreadyExists,
)
from game_logic import StreakState, update_pet_health
from schemas import Author, ForumReply, ForumTopic, JournalEntry, PetData, User


def to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[dict]) -> Optional[dict]:
    """Copy of a Mongo document with `_id` exposed as a string `id`."""
    if doc is None:
        return None
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = str(doc["_id"])
    return out


# ----------------------
# Users
# ----------------------
class UserRepository:
    collection_name = "user"

    def __init__(self, database: Database):
        self.db = database
        self.collection = database[self.collection_name]

    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        pet_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        existing = self.collection.find_one({"$or": [{"email": email}, {"username": username}]})
        if existing:
            raise UserAlreadyExists(
                "Email already registered" if existing["email"] == email else "Username already taken"
            )

        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            last_active_at=now or now_utc(),
            pet_data=PetData(name=pet_name or "Buddy"),
        )
        try:
            user_id = create_document(self.db, self.collection_name, user)
        except DuplicateKeyError:
            raise UserAlreadyExists("Email or username already registered")
        return self.get(user_id)

    def get(self, user_id: str) -> Optional[dict]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def find_by_login(self, username_or_email: str) -> Optional[dict]:
        return self.collection.find_one(
            {"$or": [{"username": username_or_email}, {"email": username_or_email.lower()}]}
        )

    def apply_journal(
        self,
        user_id: str,
        coins: int,
        streak: StreakState,
        pet_happiness: int,
        pet_health: int,
        journal_date: datetime,
    ) -> Optional[dict]:
        """Credit coins and store the resolved streak/pet state. Returns the updated user."""
        return self.collection.find_one_and_update(
            {"_id": to_object_id(user_id)},
            {
                "$inc": {"total_coins": coins},
                "$set": {
                    "current_streak": streak.current_streak,
                    "max_streak": streak.max_streak,
                    "last_journal_date": journal_date,
                    "last_active_at": journal_date,
                    "pet_data.happiness": pet_happiness,
                    "pet_data.health": pet_health,
                    "updated_at": now_utc(),
                },
            },
            return_document=ReturnDocument.AFTER,
        )

    def raise_level(self, user_id: str, level: int) -> None:
        # levels never go down, even when coins are spent
        self.collection.update_one(
            {"_id": to_object_id(user_id), "level": {"$lt": level}},
            {"$set": {"level": level}},
        )

    def touch_activity(self, user: dict, now: datetime) -> dict:
        """Apply pet health decay for the days since the user was last active."""
        last_active = user.get("last_active_at") or user.get("created_at")
        health = user.get("pet_data", {}).get("health", 100)
        new_health = update_pet_health(last_active, health, now)

        updated = self.collection.find_one_and_update(
            {"_id": user["_id"]},
            {"$set": {"pet_data.health": new_health, "last_active_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        return updated or user

    def spend_coins(self, user_id: str, price: int, item_id: str) -> Optional[dict]:
        """Atomically buy `item_id`; None when the user can't afford it or owns it already."""
        return self.collection.find_one_and_update(
            {
                "_id": to_object_id(user_id),
                "total_coins": {"$gte": price},
                "pet_data.items": {"$nin": [item_id]},
            },
            {
                "$inc": {"total_coins": -price},
                "$push": {"pet_data.items": item_id},
                "$set": {"updated_at": now_utc()},
            },
            return_document=ReturnDocument.AFTER,
        )

    def leaderboard(self, sort_field: str, limit: int) -> List[dict]:
        return get_documents(
            self.db,
            self.collection_name,
            sort=[(sort_field, DESCENDING), ("created_at", 1)],
            limit=limit,
            projection={"password_hash": 0},
        )


# ----------------------
# Journal entries
# ----------------------
class JournalRepository:
    collection_name = "journalentry"

    def __init__(self, database: Database):
        self.db = database
        self.collection = database[self.collection_name]

    def insert(self, entry: JournalEntry) -> str:
        """Store an entry; the (user_id, day) unique index rejects a second one for the day."""
        try:
            return create_document(self.db, self.collection_name, entry)
        except DuplicateKeyError:
            raise AlreadyJournaledToday()

    def get(self, user_id: str, entry_id: str) -> Optional[dict]:
        oid = to_object_id(entry_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid, "user_id": user_id})

    def for_day(self, user_id: str, day: str) -> Optional[dict]:
        return self.collection.find_one({"user_id": user_id, "day": day})

    def page(self, user_id: str, page: int, limit: int) -> List[dict]:
        return get_documents(
            self.db,
            self.collection_name,
            {"user_id": user_id},
            sort=[("date", DESCENDING)],
            skip=(page - 1) * limit,
            limit=limit,
            projection={"content": 0},
        )

    def count(self, user_id: str, since: Optional[datetime] = None) -> int:
        query = {"user_id": user_id}
        if since is not None:
            query["date"] = {"$gte": naive_utc(since)}
        return self.collection.count_documents(query)

    def mood_distribution(self, user_id: str) -> List[dict]:
        pipeline = [
            {"$match": {"user_id": user_id}},
            {"$group": {"_id": "$mood", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ]
        return [{"mood": row["_id"], "count": row["count"]} for row in self.collection.aggregate(pipeline)]

    def recent(self, user_id: str, limit: int) -> List[dict]:
        return get_documents(
            self.db,
            self.collection_name,
            {"user_id": user_id},
            sort=[("date", DESCENDING)],
            limit=limit,
            projection={"mood": 1, "date": 1},
        )

    def all_for_user(self, user_id: str) -> List[dict]:
        return get_documents(
            self.db,
            self.collection_name,
            {"user_id": user_id},
            sort=[("date", 1)],
            projection={"mood": 1, "date": 1, "fine_emotions": 1},
        )


# ----------------------
# Forum
# ----------------------
class ForumRepository:
    collection_name = "forumtopic"

    def __init__(self, database: Database):
        self.db = database
        self.collection = database[self.collection_name]

    def list_topics(self, limit: int = 100) -> List[dict]:
        return [serialize(doc) for doc in get_documents(self.db, self.collection_name, limit=limit)]

    def get_topic(self, topic_id: str) -> dict:
        oid = to_object_id(topic_id)
        doc = self.collection.find_one({"_id": oid}) if oid else None
        if doc is None:
            raise TopicNotFound()
        return serialize(doc)

    def create_topic(self, author: Author, title: str, content: str, category: str) -> dict:
        topic = ForumTopic(title=title, content=content, author=author, category=category)
        topic_id = create_document(self.db, self.collection_name, topic)
        return self.get_topic(topic_id)

    def add_reply(self, topic_id: str, author: Author, content: str) -> dict:
        reply = ForumReply(id=uuid.uuid4().hex, content=content, author=author, created_at=now_utc())
        result = self.collection.update_one(
            {"_id": to_object_id(topic_id)},
            {"$push": {"replies": reply.model_dump()}, "$set": {"updated_at": now_utc()}},
        )
        if result.matched_count == 0:
            raise TopicNotFound()
        return reply.model_dump()

    def like_topic(self, topic_id: str) -> int:
        oid = to_object_id(topic_id)
        doc = None
        if oid is not None:
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$inc": {"likes": 1}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise TopicNotFound()
        return doc["likes"]

    def like_reply(self, reply_id: str, topic_id: Optional[str] = None) -> dict:
        """Returns {"topic_id", "likes"} for the liked reply."""
        query = {"replies.id": reply_id}
        if topic_id:
            query["_id"] = to_object_id(topic_id)
        doc = self.collection.find_one_and_update(
            query,
            {"$inc": {"replies.$.likes": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise ReplyNotFound()
        reply = next(r for r in doc["replies"] if r["id"] == reply_id)
        return {"topic_id": str(doc["_id"]), "likes": reply["likes"]}
