"""
MongoDB access for the VideoTube backend.

The client is created once per process from DATABASE_URL / DATABASE_NAME.
MongoClient connects lazily, so importing this module never blocks on the
network. Handlers reach the database through the `get_db` dependency, which
tests override with an in-memory database.

Collections (lowercase of the schema class name):
- user, video, comment, like, tweet, playlist, subscription
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import settings

logger = logging.getLogger("videotube.db")

USERS = "user"
VIDEOS = "video"
COMMENTS = "comment"
LIKES = "like"
TWEETS = "tweet"
PLAYLISTS = "playlist"
SUBSCRIPTIONS = "subscription"

_client: Optional[MongoClient] = None
db: Optional[Database] = None

if settings.DATABASE_URL and settings.DATABASE_NAME:
    _client = MongoClient(settings.DATABASE_URL, tz_aware=True)
    db = _client[settings.DATABASE_NAME]


def utcnow() -> datetime:
    # Mongo stores milliseconds only
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def get_db() -> Database:
    """FastAPI dependency returning the configured database."""
    if db is None:
        raise HTTPException(status_code=500, detail="Database is not configured")
    return db


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> dict:
    """Insert a document stamped with created_at/updated_at and return it with its `_id`."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(exclude_none=True)
    else:
        doc = dict(data)
    now = utcnow()
    doc["created_at"] = now
    doc["updated_at"] = now
    doc["_id"] = database[collection_name].insert_one(doc).inserted_id
    return doc


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None,
                  limit: Optional[int] = None, sort: Optional[list] = None, projection: Optional[dict] = None) -> list:
    cursor = database[collection_name].find(filter_dict or {}, projection)
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes(database: Database) -> None:
    """Create the indexes the API relies on. Idempotent."""
    database[USERS].create_index([("username", ASCENDING)], unique=True)
    database[USERS].create_index([("email", ASCENDING)], unique=True)
    database[VIDEOS].create_index([("owner", ASCENDING), ("created_at", DESCENDING)])
    database[COMMENTS].create_index([("video", ASCENDING), ("created_at", DESCENDING)])
    database[TWEETS].create_index([("owner", ASCENDING), ("created_at", DESCENDING)])
    database[PLAYLISTS].create_index([("owner", ASCENDING), ("created_at", DESCENDING)])
    # missing target fields index as null, so one like per (user, target)
    database[LIKES].create_index(
        [("liked_by", ASCENDING), ("video", ASCENDING), ("comment", ASCENDING), ("tweet", ASCENDING)],
        unique=True,
    )
    database[SUBSCRIPTIONS].create_index([("subscriber", ASCENDING), ("channel", ASCENDING)], unique=True)
    database[SUBSCRIPTIONS].create_index([("channel", ASCENDING)])
    logger.info("indexes ensured on %s", database.name)
