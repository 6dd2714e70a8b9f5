"""Password hashing, JWT issue/verify and the authentication dependencies.

Access tokens are short lived and carry the public identity of the user.
Refresh tokens carry only the user id plus a random `jti`, and the most
recent one is stored on the user document so it can be rotated and revoked.
Handlers get the authenticated user from `get_current_user`, which accepts
the `access_token` cookie or an `Authorization: Bearer` header.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from bson import ObjectId
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from pymongo.database import Database

from config import settings
from database import USERS, get_db

JWT_ALGORITHM = "HS256"
ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"
PUBLIC_USER_PROJECTION = {"password_hash": 0, "refresh_token": 0}

logger = logging.getLogger("videotube.auth")
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def generate_access_token(user: dict) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": str(user["_id"]),
        "email": user.get("email"),
        "username": user.get("username"),
        "full_name": user.get("full_name"),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRY_MINUTES),
    }
    return jwt.encode(payload, settings.ACCESS_TOKEN_SECRET, algorithm=JWT_ALGORITHM)


def generate_refresh_token(user: dict) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": str(user["_id"]),
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRY_DAYS),
    }
    return jwt.encode(payload, settings.REFRESH_TOKEN_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: str, kind: str) -> dict:
    """Decode and verify a JWT, raising HTTPException(401) on any failure."""
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail=f"{kind} token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail=f"Invalid {kind} token")


def issue_tokens(db: Database, user: dict) -> tuple:
    """Create a fresh token pair and persist the refresh token on the user."""
    access_token = generate_access_token(user)
    refresh_token = generate_refresh_token(user)
    db[USERS].update_one({"_id": user["_id"]}, {"$set": {"refresh_token": refresh_token}})
    logger.info("issued token pair for user %s", user["_id"])
    return access_token, refresh_token


def _token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(ACCESS_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials
    return token


def _load_user(db: Database, token: str) -> dict:
    payload = decode_token(token, settings.ACCESS_TOKEN_SECRET, "access")
    user_id = payload.get("user_id")
    if not user_id or not ObjectId.is_valid(user_id):
        raise HTTPException(status_code=401, detail="Invalid access token")
    user = db[USERS].find_one({"_id": ObjectId(user_id)}, PUBLIC_USER_PROJECTION)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid access token")
    return user


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Database = Depends(get_db),
) -> dict:
    """FastAPI dependency returning the authenticated user document (without secrets)."""
    token = _token_from_request(request, credentials)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized request")
    return _load_user(db, token)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: Database = Depends(get_db),
) -> Optional[dict]:
    """Like `get_current_user` but anonymous requests yield None.

    A stale or invalid token counts as anonymous.
    """
    token = _token_from_request(request, credentials)
    if not token:
        return None
    try:
        return _load_user(db, token)
    except HTTPException as exc:
        logger.info("ignoring unusable token on public route: %s", exc.detail)
        return None
