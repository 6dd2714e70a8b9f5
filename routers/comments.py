"""Comments on videos."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo import ReturnDocument
from pymongo.database import Database

import pipelines
from auth import get_current_user, get_optional_user
from database import COMMENTS, LIKES, USERS, VIDEOS, create_document, get_db, utcnow
from schemas import Comment, ContentRequest
from utils import api_response, find_or_404, objid, paginate, require_owner, visible_video_or_404

router = APIRouter(prefix="/comments", tags=["comments"])

OWNER_FIELDS = {"username": 1, "full_name": 1, "avatar": 1}


def _with_owner(db: Database, comment: dict) -> dict:
    comment["owner"] = db[USERS].find_one({"_id": comment["owner"]}, OWNER_FIELDS)
    return comment


@router.get("/{video_id}")
def get_video_comments(
    video_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    viewer: Optional[dict] = Depends(get_optional_user),
    db: Database = Depends(get_db),
):
    vid = objid(video_id, "video ID")
    visible_video_or_404(db[VIDEOS], vid, viewer)
    result = paginate(
        db[COMMENTS],
        pipelines.video_comments(vid),
        {"video": vid},
        page,
        limit,
        docs_label="comments",
        total_label="total_comments",
    )
    return api_response(200, result, "Comments fetched successfully")


@router.post("/{video_id}")
def add_comment(video_id: str, payload: ContentRequest, current_user: dict = Depends(get_current_user),
                db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    visible_video_or_404(db[VIDEOS], vid, current_user)
    comment = create_document(db, COMMENTS, Comment(content=payload.content, video=vid, owner=current_user["_id"]))
    return api_response(201, _with_owner(db, comment), "Comment added successfully")


@router.patch("/c/{comment_id}")
def update_comment(comment_id: str, payload: ContentRequest, current_user: dict = Depends(get_current_user),
                   db: Database = Depends(get_db)):
    cid = objid(comment_id, "comment ID")
    comment = find_or_404(db[COMMENTS], cid, "Comment")
    require_owner(comment, current_user, "update", "comment")
    updated = db[COMMENTS].find_one_and_update(
        {"_id": cid},
        {"$set": {"content": payload.content, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return api_response(200, _with_owner(db, updated), "Comment updated successfully")


@router.delete("/c/{comment_id}")
def delete_comment(comment_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    cid = objid(comment_id, "comment ID")
    comment = find_or_404(db[COMMENTS], cid, "Comment")
    require_owner(comment, current_user, "delete", "comment")
    db[COMMENTS].delete_one({"_id": cid})
    db[LIKES].delete_many({"comment": cid})
    return api_response(200, {}, "Comment deleted successfully")
