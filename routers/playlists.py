"""User playlists."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo import ReturnDocument
from pymongo.database import Database

import pipelines
from auth import get_current_user, get_optional_user
from database import PLAYLISTS, USERS, VIDEOS, create_document, get_db, utcnow
from schemas import Playlist, PlaylistRequest, UpdatePlaylistRequest
from utils import api_response, find_or_404, objid, paginate, require_owner, visible_video_or_404

router = APIRouter(prefix="/playlist", tags=["playlists"])


def _owned_playlist(db: Database, playlist_id: str, current_user: dict, action: str) -> dict:
    playlist = find_or_404(db[PLAYLISTS], objid(playlist_id, "playlist ID"), "Playlist")
    require_owner(playlist, current_user, action, "playlist")
    return playlist


@router.post("")
def create_playlist(payload: PlaylistRequest, current_user: dict = Depends(get_current_user),
                    db: Database = Depends(get_db)):
    playlist = create_document(
        db, PLAYLISTS, Playlist(name=payload.name, description=payload.description, owner=current_user["_id"])
    )
    playlist["owner"] = db[USERS].find_one({"_id": current_user["_id"]}, {"username": 1, "full_name": 1, "avatar": 1})
    return api_response(201, playlist, "Playlist created successfully")


@router.get("/user/{user_id}")
def get_user_playlists(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_db),
):
    uid = objid(user_id, "user ID")
    result = paginate(
        db[PLAYLISTS],
        pipelines.user_playlists(uid),
        {"owner": uid},
        page,
        limit,
        docs_label="playlists",
        total_label="total_playlists",
    )
    return api_response(200, result, "User playlists fetched successfully")


@router.get("/{playlist_id}")
def get_playlist_by_id(playlist_id: str, viewer: Optional[dict] = Depends(get_optional_user),
                       db: Database = Depends(get_db)):
    pid = objid(playlist_id, "playlist ID")
    found = list(db[PLAYLISTS].aggregate(pipelines.playlist_header(pid)))
    if not found:
        raise HTTPException(status_code=404, detail="Playlist not found")
    playlist = found[0]

    members = pipelines.playlist_videos(playlist.get("videos", []), viewer["_id"] if viewer else None)
    by_id = {v["_id"]: v for v in db[VIDEOS].aggregate(members)}
    videos = [by_id[vid] for vid in playlist.get("videos", []) if vid in by_id]
    playlist["videos"] = videos
    playlist["total_videos"] = len(videos)
    playlist["total_duration"] = sum(v.get("duration", 0) for v in videos)
    return api_response(200, playlist, "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
def add_video_to_playlist(video_id: str, playlist_id: str, current_user: dict = Depends(get_current_user),
                          db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    playlist = _owned_playlist(db, playlist_id, current_user, "modify")
    visible_video_or_404(db[VIDEOS], vid, current_user)
    if vid in playlist.get("videos", []):
        raise HTTPException(status_code=400, detail="Video already exists in playlist")
    updated = db[PLAYLISTS].find_one_and_update(
        {"_id": playlist["_id"]},
        {"$push": {"videos": vid}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return api_response(200, updated, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
def remove_video_from_playlist(video_id: str, playlist_id: str, current_user: dict = Depends(get_current_user),
                               db: Database = Depends(get_db)):
    vid = objid(video_id, "video ID")
    playlist = _owned_playlist(db, playlist_id, current_user, "modify")
    if vid not in playlist.get("videos", []):
        raise HTTPException(status_code=404, detail="Video not found in playlist")
    updated = db[PLAYLISTS].find_one_and_update(
        {"_id": playlist["_id"]},
        {"$pull": {"videos": vid}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return api_response(200, updated, "Video removed from playlist successfully")


@router.patch("/{playlist_id}")
def update_playlist(playlist_id: str, payload: UpdatePlaylistRequest, current_user: dict = Depends(get_current_user),
                    db: Database = Depends(get_db)):
    playlist = _owned_playlist(db, playlist_id, current_user, "update")
    changes = payload.model_dump(exclude_none=True)
    changes["updated_at"] = utcnow()
    updated = db[PLAYLISTS].find_one_and_update(
        {"_id": playlist["_id"]}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    return api_response(200, updated, "Playlist updated successfully")


@router.delete("/{playlist_id}")
def delete_playlist(playlist_id: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    playlist = _owned_playlist(db, playlist_id, current_user, "delete")
    db[PLAYLISTS].delete_one({"_id": playlist["_id"]})
    return api_response(200, {}, "Playlist deleted successfully")
