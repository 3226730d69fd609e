"""
Database Helper Functions

MongoDB helpers shared by the repositories. The client is created once from
DATABASE_URL / DATABASE_NAME; when either is missing `db` stays None and the
API answers 503 for anything that needs storage.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import DATABASE_NAME, DATABASE_URL

log = logging.getLogger(__name__)

_client = None
db: Optional[Database] = None

if DATABASE_URL and DATABASE_NAME:
    _client = MongoClient(DATABASE_URL)
    db = _client[DATABASE_NAME]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def naive_utc(moment: datetime) -> datetime:
    """UTC datetime without tzinfo, the form MongoDB hands back."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a single document, stamping created_at/updated_at. Returns the new id."""
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()

    data_dict.setdefault("created_at", now_utc())
    data_dict["updated_at"] = now_utc()

    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(
    database: Database,
    collection_name: str,
    filter_dict: Optional[dict] = None,
    limit: Optional[int] = None,
    sort: Optional[list] = None,
    skip: int = 0,
    projection: Optional[dict] = None,
) -> list:
    """Find documents matching filter_dict; newest first unless sort is given."""
    cursor = database[collection_name].find(filter_dict or {}, projection)
    cursor = cursor.sort(sort or [("created_at", DESCENDING)])
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes(database: Database) -> None:
    """Create the indexes the API relies on. Safe to call repeatedly."""
    # One journal entry per user per calendar day, enforced by the store
    database["journalentry"].create_index(
        [("user_id", ASCENDING), ("day", ASCENDING)],
        unique=True,
        name="user_day_unique",
    )
    database["journalentry"].create_index([("user_id", ASCENDING), ("date", DESCENDING)])
    database["user"].create_index("email", unique=True)
    database["user"].create_index("username", unique=True)
    database["user"].create_index([("total_coins", DESCENDING)])
    database["user"].create_index([("current_streak", DESCENDING)])
    database["forumtopic"].create_index([("created_at", DESCENDING)])
    log.info("MongoDB indexes ensured on %s", database.name)
