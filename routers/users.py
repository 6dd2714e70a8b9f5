"""Account, session and channel-profile endpoints."""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import pipelines
from auth import (
    ACCESS_COOKIE,
    PUBLIC_USER_PROJECTION,
    REFRESH_COOKIE,
    decode_token,
    get_current_user,
    hash_password,
    issue_tokens,
    verify_password,
)
from config import settings
from database import USERS, VIDEOS, create_document, get_db, utcnow
from schemas import (
    AvatarRequest,
    ChangePasswordRequest,
    CoverImageRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    UpdateAccountRequest,
    User,
)
from utils import api_response, objid

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger("videotube.api")


def _set_auth_cookies(response: JSONResponse, access_token: str, refresh_token: str) -> JSONResponse:
    for name, value in ((ACCESS_COOKIE, access_token), (REFRESH_COOKIE, refresh_token)):
        response.set_cookie(name, value, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")
    return response


def _public_user(db: Database, user_id) -> dict:
    return db[USERS].find_one({"_id": user_id}, PUBLIC_USER_PROJECTION)


@router.post("/register")
def register(payload: RegisterRequest, db: Database = Depends(get_db)):
    if db[USERS].find_one({"$or": [{"email": payload.email}, {"username": payload.username}]}):
        raise HTTPException(status_code=409, detail="User with email or username already exists")

    user = User(
        username=payload.username,
        email=payload.email,
        full_name=payload.full_name,
        avatar=payload.avatar,
        cover_image=(payload.cover_image or "").strip(),
        password_hash=hash_password(payload.password),
    )
    try:
        created = create_document(db, USERS, user)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="User with email or username already exists")
    logger.info("registered user %s", created["_id"])
    return api_response(201, _public_user(db, created["_id"]), "User registered successfully")


@router.post("/login")
def login(payload: LoginRequest, db: Database = Depends(get_db)):
    if not payload.email and not payload.username:
        raise HTTPException(status_code=400, detail="Username or email is required")

    clauses = []
    if payload.email:
        clauses.append({"email": payload.email})
    if payload.username:
        clauses.append({"username": payload.username})
    user = db[USERS].find_one({"$or": clauses})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    access_token, refresh_token = issue_tokens(db, user)
    data = {
        "user": _public_user(db, user["_id"]),
        "access_token": access_token,
        "refresh_token": refresh_token,
    }
    return _set_auth_cookies(api_response(200, data, "User logged in successfully"), access_token, refresh_token)


@router.post("/logout")
def logout(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    db[USERS].update_one({"_id": current_user["_id"]}, {"$unset": {"refresh_token": 1}})
    response = api_response(200, {}, "User logged out")
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax")
    return response


@router.post("/refresh-token")
def refresh_access_token(request: Request, payload: RefreshRequest = Body(default=None),
                         db: Database = Depends(get_db)):
    incoming = request.cookies.get(REFRESH_COOKIE) or (payload.refresh_token if payload else None)
    if not incoming:
        raise HTTPException(status_code=401, detail="Unauthorized request")

    decoded = decode_token(incoming, settings.REFRESH_TOKEN_SECRET, "refresh")
    user_id = decoded.get("user_id")
    user = db[USERS].find_one({"_id": objid(user_id, "refresh token")}) if user_id else None
    if not user:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if user.get("refresh_token") != incoming:
        logger.warning("stale refresh token presented for user %s", user["_id"])
        raise HTTPException(status_code=401, detail="Refresh token is expired or used")

    access_token, refresh_token = issue_tokens(db, user)
    data = {"access_token": access_token, "refresh_token": refresh_token}
    return _set_auth_cookies(api_response(200, data, "Access token refreshed"), access_token, refresh_token)


@router.post("/change-password")
def change_password(payload: ChangePasswordRequest, current_user: dict = Depends(get_current_user),
                    db: Database = Depends(get_db)):
    user = db[USERS].find_one({"_id": current_user["_id"]})
    if not verify_password(payload.old_password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Old password is incorrect")
    db[USERS].update_one(
        {"_id": user["_id"]},
        {"$set": {"password_hash": hash_password(payload.new_password), "updated_at": utcnow()}},
    )
    return api_response(200, {}, "Password changed successfully")


@router.get("/current-user")
def current_user_details(current_user: dict = Depends(get_current_user)):
    return api_response(200, current_user, "User details fetched successfully")


@router.patch("/update-account")
def update_account(payload: UpdateAccountRequest, current_user: dict = Depends(get_current_user),
                   db: Database = Depends(get_db)):
    changes = payload.model_dump(exclude_none=True)
    if "email" in changes and db[USERS].find_one({"email": changes["email"], "_id": {"$ne": current_user["_id"]}}):
        raise HTTPException(status_code=409, detail="Email already in use")
    changes["updated_at"] = utcnow()
    try:
        db[USERS].update_one({"_id": current_user["_id"]}, {"$set": changes})
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="Email already in use")
    return api_response(200, _public_user(db, current_user["_id"]), "Account details updated successfully")


@router.patch("/avatar")
def update_avatar(payload: AvatarRequest, current_user: dict = Depends(get_current_user),
                  db: Database = Depends(get_db)):
    db[USERS].update_one({"_id": current_user["_id"]}, {"$set": {"avatar": payload.avatar, "updated_at": utcnow()}})
    return api_response(200, _public_user(db, current_user["_id"]), "Avatar image updated successfully")


@router.patch("/cover-image")
def update_cover_image(payload: CoverImageRequest, current_user: dict = Depends(get_current_user),
                       db: Database = Depends(get_db)):
    db[USERS].update_one(
        {"_id": current_user["_id"]},
        {"$set": {"cover_image": payload.cover_image, "updated_at": utcnow()}},
    )
    return api_response(200, _public_user(db, current_user["_id"]), "Cover image updated successfully")


@router.get("/c/{username}")
def channel_profile(username: str, current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    if not username.strip():
        raise HTTPException(status_code=400, detail="Username is missing")
    channel = list(db[USERS].aggregate(pipelines.channel_profile(username.strip(), current_user["_id"])))
    if not channel:
        raise HTTPException(status_code=404, detail="Channel does not exist")
    return api_response(200, channel[0], "User channel fetched successfully")


@router.get("/history")
def watch_history(current_user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    history = current_user.get("watch_history", [])
    videos = {v["_id"]: v for v in db[VIDEOS].aggregate(pipelines.watch_history(history, current_user["_id"]))}
    # most recent watch is appended last
    ordered = [videos[vid] for vid in reversed(history) if vid in videos]
    return api_response(200, ordered, "Watch history fetched successfully")
