"""Liveness endpoint."""

import logging

from fastapi import APIRouter
from pymongo.errors import PyMongoError

import database
from utils import api_response

router = APIRouter(prefix="/healthcheck", tags=["healthcheck"])
logger = logging.getLogger("videotube.db")


@router.get("")
def healthcheck():
    db_ok = False
    if database.db is not None:
        try:
            database.db.command("ping")
            db_ok = True
        except PyMongoError as exc:
            logger.warning("database ping failed: %s", exc)
    return api_response(200, {"status": "ok", "database": db_ok}, "Health check passed")
