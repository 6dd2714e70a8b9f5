"""Video metadata endpoints: feed, publish, detail, edit, delete and publish toggle."""

import logging
import re
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import ReturnDocument
from pymongo.database import Database

import pipelines
from auth import get_current_user, get_optional_user
from database import COMMENTS, LIKES, PLAYLISTS, USERS, VIDEOS, create_document, get_db, utcnow
from schemas import PublishVideoRequest, UpdateVideoRequest, Video
from utils import (
    api_response,
    find_or_404,
    objid,
    paginate,
    require_owner,
    sort_direction,
    visible_video_or_404,
)

router = APIRouter(prefix="/videos", tags=["videos"])
logger = logging.getLogger("videotube.api")

VideoSortField = Literal["created_at", "updated_at", "views", "duration", "title"]


@router.get("")
def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: Optional[str] = None,
    sort_by: VideoSortField = "created_at",
    sort_type: Literal["asc", "desc"] = "desc",
    user_id: Optional[str] = None,
    db: Database = Depends(get_db),
):
    match = {"is_published": True}
    if user_id:
        match["owner"] = objid(user_id, "user ID")
    if query and query.strip():
        regex = {"$regex": re.escape(query.strip()), "$options": "i"}
        match["$or"] = [{"title": regex}, {"description": regex}]

    result = paginate(
        db[VIDEOS],
        pipelines.video_feed(match, sort_by, sort_direction(sort_type)),
        match,
        page,
        limit,
        docs_label="videos",
        total_label="total_videos",
    )
    return api_response(200, result, "Videos fetched successfully")


@router.post("")
def publish_video(payload: PublishVideoRequest, current_user: dict = Depends(get_current_user),
                  db: Database = Depends(get_db)):
    video = create_document(db, VIDEOS, Video(owner=current_user["_id"], **payload.model_dump()))
    logger.info("user %s published video %s", current_user["_id"], video["_id"])
    return api_response(201, video, "Video published successfully")


@router.get("/{video_id}")
def get_video(video_id: str, viewer: Optional[dict] = Depends(get_optional_user), db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    visible_video_or_404(db[VIDEOS], vid, viewer)

    db[VIDEOS].update_one({"_id": vid}, {"$inc": {"views": 1}})
    if viewer is not None:
        # re-watching moves the video to the end of the history
        db[USERS].update_one({"_id": viewer["_id"]}, {"$pull": {"watch_history": vid}})
        db[USERS].update_one({"_id": viewer["_id"]}, {"$push": {"watch_history": vid}})

    detail = list(db[VIDEOS].aggregate(pipelines.video_detail(vid)))
    if not detail:
        raise HTTPException(status_code=404, detail="Video not found")
    payload = detail[0]
    payload["is_liked"] = viewer is not None and db[LIKES].find_one(
        {"video": vid, "liked_by": viewer["_id"]}
    ) is not None
    return api_response(200, payload, "Video fetched successfully")


@router.patch("/toggle/publish/{video_id}")
def toggle_publish_status(video_id: str, current_user: dict = Depends(get_current_user),
                          db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    video = find_or_404(db[VIDEOS], vid, "Video")
    require_owner(video, current_user, "modify", "video")
    updated = db[VIDEOS].find_one_and_update(
        {"_id": vid},
        {"$set": {"is_published": not video.get("is_published", False), "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return api_response(200, {"is_published": updated["is_published"]}, "Publish status toggled successfully")


@router.patch("/{video_id}")
def update_video(video_id: str, payload: UpdateVideoRequest, current_user: dict = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    video = find_or_404(db[VIDEOS], vid, "Video")
    require_owner(video, current_user, "update", "video")
    changes = payload.model_dump(exclude_none=True)
    changes["updated_at"] = utcnow()
    updated = db[VIDEOS].find_one_and_update({"_id": vid}, {"$set": changes}, return_document=ReturnDocument.AFTER)
    return api_response(200, updated, "Video updated successfully")


@router.delete("/{video_id}")
def delete_video(video_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    video = find_or_404(db[VIDEOS], vid, "Video")
    require_owner(video, current_user, "delete", "video")

    comment_ids = [c["_id"] for c in db[COMMENTS].find({"video": vid}, {"_id": 1})]
    db[LIKES].delete_many({"$or": [{"video": vid}, {"comment": {"$in": comment_ids}}]})
    db[COMMENTS].delete_many({"video": vid})
    db[PLAYLISTS].update_many({"videos": vid}, {"$pull": {"videos": vid}})
    db[VIDEOS].delete_one({"_id": vid})
    logger.info("user %s deleted video %s", current_user["_id"], vid)
    return api_response(200, {}, "Video deleted successfully")
