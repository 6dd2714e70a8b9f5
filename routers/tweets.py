"""Short text posts ("tweets")."""

from fastapi import APIRouter, Depends, Query
from pymongo import ReturnDocument
from pymongo.database import Database

import pipelines
from auth import get_current_user
from database import LIKES, TWEETS, USERS, create_document, get_db, utcnow
from schemas import ContentRequest, Tweet
from utils import api_response, find_or_404, objid, paginate, require_owner

router = APIRouter(prefix="/tweets", tags=["tweets"])

OWNER_FIELDS = {"username": 1, "avatar": 1}


def _with_owner(db: Database, tweet: dict) -> dict:
    tweet["owner"] = db[USERS].find_one({"_id": tweet["owner"]}, OWNER_FIELDS)
    return tweet


@router.post("")
def create_tweet(payload: ContentRequest, current_user: dict = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    tweet = create_document(db, TWEETS, Tweet(content=payload.content, owner=current_user["_id"]))
    return api_response(201, _with_owner(db, tweet), "Tweet created successfully")


@router.get("/user/{user_id}")
def get_user_tweets(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_db),
):
    uid = objid(user_id, "user ID")
    find_or_404(db[USERS], uid, "User", {"_id": 1})
    result = paginate(
        db[TWEETS],
        pipelines.user_tweets(uid),
        {"owner": uid},
        page,
        limit,
        docs_label="tweets",
        total_label="total_tweets",
    )
    return api_response(200, result, "User tweets fetched successfully")


@router.patch("/{tweet_id}")
def update_tweet(tweet_id: str, payload: ContentRequest, current_user: dict = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    tid = objid(tweet_id, "tweet ID")
    tweet = find_or_404(db[TWEETS], tid, "Tweet")
    require_owner(tweet, current_user, "update", "tweet")
    updated = db[TWEETS].find_one_and_update(
        {"_id": tid},
        {"$set": {"content": payload.content, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return api_response(200, _with_owner(db, updated), "Tweet updated successfully")


@router.delete("/{tweet_id}")
def delete_tweet(tweet_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    tid = objid(tweet_id, "tweet ID")
    tweet = find_or_404(db[TWEETS], tid, "Tweet")
    require_owner(tweet, current_user, "delete", "tweet")
    db[TWEETS].delete_one({"_id": tid})
    db[LIKES].delete_many({"tweet": tid})
    return api_response(200, {}, "Tweet deleted successfully")
