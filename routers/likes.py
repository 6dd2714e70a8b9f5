"""Like toggles for videos, comments and tweets, and the liked-videos list."""

import logging

from bson import ObjectId
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import pipelines
from auth import get_current_user
from database import COMMENTS, LIKES, TWEETS, VIDEOS, create_document, get_db
from schemas import Like
from utils import api_response, find_or_404, objid, paginate, visible_video_or_404

router = APIRouter(prefix="/likes", tags=["likes"])
logger = logging.getLogger("videotube.api")


def toggle_like(db: Database, target_field: str, target_id: ObjectId, user_id: ObjectId) -> bool:
    """Flip the like of `user_id` on a target and return whether it is now liked.

    The delete runs first so an existing like is removed in one round trip.
    If two requests race to insert, the unique index rejects the second and
    the target simply stays liked.
    """
    removed = db[LIKES].delete_one({target_field: target_id, "liked_by": user_id})
    if removed.deleted_count:
        return False
    try:
        create_document(db, LIKES, Like(liked_by=user_id, **{target_field: target_id}))
    except DuplicateKeyError:
        logger.info("concurrent like on %s %s by %s", target_field, target_id, user_id)
    return True


def _toggle_response(is_liked: bool, label: str):
    if is_liked:
        return api_response(201, {"is_liked": True}, f"{label} liked successfully")
    return api_response(200, {"is_liked": False}, f"{label} unliked successfully")


@router.post("/toggle/v/{video_id}")
def toggle_video_like(video_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    visible_video_or_404(db[VIDEOS], vid, current_user)
    return _toggle_response(toggle_like(db, "video", vid, current_user["_id"]), "Video")


@router.post("/toggle/c/{comment_id}")
def toggle_comment_like(comment_id: str, current_user: dict = Depends(get_current_user),
                        db: Database = Depends(get_db)):
    cid = objid(comment_id, "comment ID")
    comment = find_or_404(db[COMMENTS], cid, "Comment", {"video": 1})
    visible_video_or_404(db[VIDEOS], comment["video"], current_user)
    return _toggle_response(toggle_like(db, "comment", cid, current_user["_id"]), "Comment")


@router.post("/toggle/t/{tweet_id}")
def toggle_tweet_like(tweet_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    tid = objid(tweet_id, "tweet ID")
    find_or_404(db[TWEETS], tid, "Tweet", {"_id": 1})
    return _toggle_response(toggle_like(db, "tweet", tid, current_user["_id"]), "Tweet")


@router.get("/videos")
def get_liked_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    uid = current_user["_id"]
    liked = [like["video"] for like in db[LIKES].find({"liked_by": uid, "video": {"$exists": True}}, {"video": 1})]
    # videos unpublished since they were liked drop out of the list
    hidden = [v["_id"] for v in db[VIDEOS].find(
        {"_id": {"$in": liked}, "is_published": False, "owner": {"$ne": uid}}, {"_id": 1}
    )]
    match = {"liked_by": uid, "video": {"$exists": True, "$nin": hidden}}
    result = paginate(
        db[LIKES],
        pipelines.liked_videos(match),
        match,
        page,
        limit,
        docs_label="liked_videos",
        total_label="total_liked_videos",
    )
    return api_response(200, result, "Liked videos fetched successfully")
