"""Creator dashboard: channel statistics and the owner's video list."""

import math
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

import pipelines
from auth import get_current_user
from database import COMMENTS, LIKES, SUBSCRIPTIONS, TWEETS, VIDEOS, get_documents, get_db
from utils import api_response, paginate, sort_direction

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

ChannelVideoSortField = Literal[
    "created_at", "updated_at", "views", "duration", "title", "likes_count", "comments_count"
]


@router.get("/stats")
def get_channel_stats(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    uid = current_user["_id"]

    totals = list(db[VIDEOS].aggregate(pipelines.channel_video_totals(uid)))
    total_videos = totals[0]["total_videos"] if totals else 0
    total_views = totals[0]["total_views"] if totals else 0

    likes = list(db[VIDEOS].aggregate(pipelines.channel_video_likes(uid)))
    total_likes_on_videos = likes[0]["total_likes"] if likes else 0

    tweet_ids = [t["_id"] for t in db[TWEETS].find({"owner": uid}, {"_id": 1})]
    comment_ids = [c["_id"] for c in db[COMMENTS].find({"owner": uid}, {"_id": 1})]
    total_likes_on_content = db[LIKES].count_documents(
        {"$or": [{"tweet": {"$in": tweet_ids}}, {"comment": {"$in": comment_ids}}]}
    ) if tweet_ids or comment_ids else 0

    stats = {
        "total_subscribers": db[SUBSCRIPTIONS].count_documents({"channel": uid}),
        "total_videos": total_videos,
        "total_views": total_views,
        "total_likes_on_videos": total_likes_on_videos,
        "total_likes_on_content": total_likes_on_content,
        "recent_videos": get_documents(
            db, VIDEOS, {"owner": uid}, limit=5, sort=[("created_at", -1), ("_id", -1)],
            projection={"title": 1, "views": 1, "created_at": 1},
        ),
        "average_views_per_video": math.floor(total_views / total_videos + 0.5) if total_videos else 0,
    }
    return api_response(200, stats, "Channel stats fetched successfully")


@router.get("/videos")
def get_channel_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: ChannelVideoSortField = "created_at",
    sort_type: Literal["asc", "desc"] = "desc",
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    result = paginate(
        db[VIDEOS],
        pipelines.channel_videos(current_user["_id"], sort_by, sort_direction(sort_type)),
        {"owner": current_user["_id"]},
        page,
        limit,
        docs_label="videos",
        total_label="total_videos",
    )
    return api_response(200, result, "Channel videos fetched successfully")
