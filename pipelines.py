"""
Aggregation pipeline builders.

Each function returns a list of stages and performs no I/O, so handlers
compose them with `utils.paginate` and tests can inspect them directly.
Joined user documents go through `join_user`, which strips private fields.
"""

from typing import List, Optional

from bson import ObjectId

from database import COMMENTS, LIKES, SUBSCRIPTIONS, USERS, VIDEOS

NEWEST_FIRST = {"created_at": -1, "_id": -1}
HIDDEN_USER_FIELDS = ("password_hash", "refresh_token", "watch_history", "email")


def join_user(local_field: str, as_field: Optional[str] = None) -> List[dict]:
    """$lookup a user by id into `as_field`, unwound to a single sub-document."""
    as_field = as_field or local_field
    return [
        {"$lookup": {"from": USERS, "localField": local_field, "foreignField": "_id", "as": as_field}},
        {"$unwind": {"path": f"${as_field}", "preserveNullAndEmptyArrays": True}},
        {"$project": {f"{as_field}.{f}": 0 for f in HIDDEN_USER_FIELDS}},
    ]


def visible_videos(viewer_id: Optional[ObjectId]) -> dict:
    """Match published videos, plus the viewer's own drafts."""
    published = {"is_published": True}
    if viewer_id is None:
        return published
    return {"$or": [published, {"owner": viewer_id}]}


def count_joined(from_collection: str, foreign_field: str, count_field: str) -> List[dict]:
    """Count documents of `from_collection` whose `foreign_field` points at this document."""
    tmp = f"_{count_field}"
    return [
        {"$lookup": {"from": from_collection, "localField": "_id", "foreignField": foreign_field, "as": tmp}},
        {"$addFields": {count_field: {"$size": f"${tmp}"}}},
        {"$project": {tmp: 0}},
    ]


# -------------------- Users --------------------
def channel_profile(username: str, viewer_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"username": username.lower()}},
        {"$lookup": {"from": SUBSCRIPTIONS, "localField": "_id", "foreignField": "channel", "as": "subscribers"}},
        {"$lookup": {"from": SUBSCRIPTIONS, "localField": "_id", "foreignField": "subscriber", "as": "subscribed_to"}},
        {"$addFields": {
            "subscribers_count": {"$size": "$subscribers"},
            "channels_subscribed_to_count": {"$size": "$subscribed_to"},
            "is_subscribed": {
                "$cond": {"if": {"$in": [viewer_id, "$subscribers.subscriber"]}, "then": True, "else": False},
            },
        }},
        {"$project": {
            "full_name": 1,
            "username": 1,
            "subscribers_count": 1,
            "channels_subscribed_to_count": 1,
            "is_subscribed": 1,
            "avatar": 1,
            "cover_image": 1,
            "email": 1,
        }},
    ]


def watch_history(video_ids: List[ObjectId], viewer_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"_id": {"$in": video_ids}, **visible_videos(viewer_id)}},
        *join_user("owner"),
    ]


# -------------------- Videos --------------------
def video_feed(match: dict, sort_by: str, direction: int) -> List[dict]:
    return [
        {"$match": match},
        *join_user("owner"),
        {"$sort": {sort_by: direction, "_id": direction}},
    ]


def video_detail(video_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"_id": video_id}},
        *join_user("owner"),
        *count_joined(LIKES, "video", "likes_count"),
        *count_joined(COMMENTS, "video", "comments_count"),
    ]


# -------------------- Comments --------------------
def video_comments(video_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"video": video_id}},
        *join_user("owner"),
        *count_joined(LIKES, "comment", "likes_count"),
        {"$sort": NEWEST_FIRST},
    ]


# -------------------- Likes --------------------
def liked_videos(match: dict) -> List[dict]:
    return [
        {"$match": match},
        {"$lookup": {"from": VIDEOS, "localField": "video", "foreignField": "_id", "as": "video"}},
        {"$unwind": "$video"},
        *join_user("video.owner", "owner"),
        {"$addFields": {"video.owner": "$owner"}},
        {"$project": {"owner": 0, "liked_by": 0}},
        {"$sort": NEWEST_FIRST},
    ]


# -------------------- Subscriptions --------------------
def channel_subscribers(channel_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"channel": channel_id}},
        *join_user("subscriber"),
        {"$sort": NEWEST_FIRST},
    ]


def subscribed_channels(subscriber_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"subscriber": subscriber_id}},
        {"$lookup": {"from": SUBSCRIPTIONS, "localField": "channel", "foreignField": "channel",
                     "as": "channel_subscribers"}},
        *join_user("channel"),
        {"$addFields": {"channel.subscribers_count": {"$size": "$channel_subscribers"}}},
        {"$project": {"channel_subscribers": 0}},
        {"$sort": NEWEST_FIRST},
    ]


# -------------------- Playlists --------------------
def user_playlists(user_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"owner": user_id}},
        *join_user("owner"),
        {"$lookup": {"from": VIDEOS, "localField": "videos", "foreignField": "_id", "as": "video_docs"}},
        {"$addFields": {
            "total_videos": {"$size": "$videos"},
            "total_duration": {"$sum": "$video_docs.duration"},
        }},
        {"$project": {"video_docs": 0}},
        {"$sort": NEWEST_FIRST},
    ]


def playlist_header(playlist_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"_id": playlist_id}},
        *join_user("owner"),
    ]


def playlist_videos(video_ids: List[ObjectId], viewer_id: Optional[ObjectId]) -> List[dict]:
    return [
        {"$match": {"_id": {"$in": video_ids}, **visible_videos(viewer_id)}},
        *join_user("owner"),
    ]


# -------------------- Tweets --------------------
def user_tweets(user_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"owner": user_id}},
        *join_user("owner"),
        *count_joined(LIKES, "tweet", "likes_count"),
        {"$sort": NEWEST_FIRST},
    ]


# -------------------- Dashboard --------------------
def channel_video_totals(owner_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"owner": owner_id}},
        {"$group": {"_id": None, "total_videos": {"$sum": 1}, "total_views": {"$sum": "$views"}}},
    ]


def channel_video_likes(owner_id: ObjectId) -> List[dict]:
    return [
        {"$match": {"owner": owner_id}},
        *count_joined(LIKES, "video", "likes_count"),
        {"$group": {"_id": None, "total_likes": {"$sum": "$likes_count"}}},
    ]


def channel_videos(owner_id: ObjectId, sort_by: str, direction: int) -> List[dict]:
    return [
        {"$match": {"owner": owner_id}},
        *count_joined(LIKES, "video", "likes_count"),
        *count_joined(COMMENTS, "video", "comments_count"),
        {"$sort": {sort_by: direction, "_id": direction}},
    ]
