from fastapi import APIRouter

from . import comments, dashboard, healthcheck, likes, playlists, subscriptions, tweets, users, videos

api_router = APIRouter(prefix="/api/v1")
for _module in (healthcheck, users, videos, comments, likes, subscriptions, playlists, tweets, dashboard):
    api_router.include_router(_module.router)
