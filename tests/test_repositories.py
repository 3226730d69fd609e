from datetime import datetime, timezone

import pytest

from errors import AlreadyJournaledToday, ReplyNotFound, TopicNotFound, UserAlreadyExists
from repositories import ForumRepository, JournalRepository, UserRepository
from schemas import Author, JournalEntry

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_entry(user_id, day="2024-03-10", mood="happy"):
    return JournalEntry(
        user_id=user_id,
        content="A perfectly ordinary day at the park.",
        mood=mood,
        word_count=7,
        coins_earned=10,
        date=NOW.replace(tzinfo=None),
        day=day,
    )


def test_second_entry_for_same_day_is_rejected_by_the_store(mongo_db):
    journals = JournalRepository(mongo_db)
    journals.insert(make_entry("u1"))

    with pytest.raises(AlreadyJournaledToday):
        journals.insert(make_entry("u1", mood="sad"))

    journals.insert(make_entry("u1", day="2024-03-11"))
    journals.insert(make_entry("u2"))
    assert journals.count("u1") == 2


def test_duplicate_username_rejected(mongo_db):
    users = UserRepository(mongo_db)
    users.create("sunny", "sunny@example.com", "hash")
    with pytest.raises(UserAlreadyExists, match="Username already taken"):
        users.create("sunny", "other@example.com", "hash")
    with pytest.raises(UserAlreadyExists, match="Email already registered"):
        users.create("other", "sunny@example.com", "hash")


def test_new_user_defaults(mongo_db):
    user = UserRepository(mongo_db).create("sunny", "sunny@example.com", "hash", pet_name="Mochi", now=NOW)
    assert user["total_coins"] == 0
    assert user["level"] == 1
    assert user["pet_data"] == {
        "name": "Mochi",
        "breed": "golden_retriever",
        "happiness": 50,
        "health": 100,
        "items": [],
    }


def test_spend_coins_is_conditional(mongo_db):
    users = UserRepository(mongo_db)
    user = users.create("sunny", "sunny@example.com", "hash")
    user_id = str(user["_id"])
    mongo_db["user"].update_one({"_id": user["_id"]}, {"$set": {"total_coins": 50}})

    assert users.spend_coins(user_id, 60, "hat1") is None
    bought = users.spend_coins(user_id, 35, "acc1")
    assert bought["total_coins"] == 15
    assert bought["pet_data"]["items"] == ["acc1"]
    assert users.spend_coins(user_id, 10, "acc1") is None


def test_raise_level_never_lowers(mongo_db):
    users = UserRepository(mongo_db)
    user = users.create("sunny", "sunny@example.com", "hash")
    users.raise_level(str(user["_id"]), 3)
    users.raise_level(str(user["_id"]), 2)
    assert users.get(str(user["_id"]))["level"] == 3


def test_forum_replies_and_likes(mongo_db):
    forum = ForumRepository(mongo_db)
    author = Author(id="u1", name="sunny")
    topic = forum.create_topic(author, "Sleep tips", "What helps you wind down?", "Help")

    reply = forum.add_reply(topic["id"], author, "Reading before bed.")
    assert forum.like_topic(topic["id"]) == 1
    assert forum.like_reply(reply["id"]) == {"topic_id": topic["id"], "likes": 1}
    assert forum.like_reply(reply["id"], topic["id"])["likes"] == 2

    stored = forum.get_topic(topic["id"])
    assert stored["likes"] == 1
    assert stored["replies"][0]["likes"] == 2


def test_forum_missing_ids(mongo_db):
    forum = ForumRepository(mongo_db)
    author = Author(id="u1", name="sunny")
    with pytest.raises(TopicNotFound):
        forum.get_topic("not-an-id")
    with pytest.raises(TopicNotFound):
        forum.add_reply("65f000000000000000000000", author, "hello")
    with pytest.raises(TopicNotFound):
        forum.like_topic("65f000000000000000000000")
    with pytest.raises(ReplyNotFound):
        forum.like_reply("nope")
