"""Channel subscriptions."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import pipelines
from auth import get_current_user
from database import SUBSCRIPTIONS, USERS, create_document, get_db
from schemas import Subscription
from utils import api_response, find_or_404, objid, paginate

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("/c/{channel_id}")
def toggle_subscription(channel_id: str, current_user: dict = Depends(get_current_user),
                        db: Database = Depends(get_db)):
    cid = objid(channel_id, "channel ID")
    if cid == current_user["_id"]:
        raise HTTPException(status_code=400, detail="You cannot subscribe to yourself")
    find_or_404(db[USERS], cid, "Channel", {"_id": 1})

    removed = db[SUBSCRIPTIONS].delete_one({"subscriber": current_user["_id"], "channel": cid})
    if removed.deleted_count:
        return api_response(200, None, "Unsubscribed successfully")
    try:
        subscription = create_document(db, SUBSCRIPTIONS, Subscription(subscriber=current_user["_id"], channel=cid))
    except DuplicateKeyError:
        subscription = db[SUBSCRIPTIONS].find_one({"subscriber": current_user["_id"], "channel": cid})
    return api_response(201, subscription, "Subscribed successfully")


@router.get("/c/{channel_id}")
def get_channel_subscribers(
    channel_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_db),
):
    cid = objid(channel_id, "channel ID")
    find_or_404(db[USERS], cid, "Channel", {"_id": 1})
    result = paginate(
        db[SUBSCRIPTIONS],
        pipelines.channel_subscribers(cid),
        {"channel": cid},
        page,
        limit,
        docs_label="subscribers",
        total_label="total_subscribers",
    )
    return api_response(200, result, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
def get_subscribed_channels(
    subscriber_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_db),
):
    sid = objid(subscriber_id, "subscriber ID")
    find_or_404(db[USERS], sid, "User", {"_id": 1})
    result = paginate(
        db[SUBSCRIPTIONS],
        pipelines.subscribed_channels(sid),
        {"subscriber": sid},
        page,
        limit,
        docs_label="subscriptions",
        total_label="total_subscriptions",
    )
    return api_response(200, result, "Subscribed channels fetched successfully")
