"""Response envelope, id parsing, serialisation and pagination helpers."""

import math
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from pymongo.collection import Collection


def objid(id_str: str, label: str = "id") -> ObjectId:
    if not ObjectId.is_valid(id_str):
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return ObjectId(id_str)


def to_str_id(doc: Any) -> Any:
    """Make a Mongo document JSON-ready.

    `_id` becomes `id`, ObjectIds become strings and datetimes ISO-8601,
    recursively through nested documents and lists. User secrets are
    excluded by the queries that load users, not here.
    """
    if isinstance(doc, dict):
        d = {}
        for k, v in doc.items():
            d["id" if k == "_id" else k] = to_str_id(v)
        return d
    if isinstance(doc, list):
        return [to_str_id(v) for v in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    return doc


def api_response(status_code: int, data: Any, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "data": to_str_id(data),
            "message": message,
            "success": status_code < 400,
        },
    )


def sort_direction(sort_type: str) -> int:
    return 1 if sort_type == "asc" else -1


def paginate(collection: Collection, pipeline: list, count_filter: dict, page: int, limit: int,
             docs_label: str = "docs", total_label: str = "total_docs") -> dict:
    """Run `pipeline` for one page and describe the page.

    The total is counted on `count_filter` so it does not depend on the
    page slice. Labels mirror the aggregate-paginate response shape.
    """
    total = collection.count_documents(count_filter)
    skip = (page - 1) * limit
    docs = list(collection.aggregate([*pipeline, {"$skip": skip}, {"$limit": limit}]))
    total_pages = math.ceil(total / limit) if total else 0
    has_prev = page > 1
    has_next = page < total_pages
    return {
        docs_label: docs,
        total_label: total,
        "limit": limit,
        "page": page,
        "total_pages": total_pages,
        "paging_counter": skip + 1,
        "has_prev_page": has_prev,
        "has_next_page": has_next,
        "prev_page": page - 1 if has_prev else None,
        "next_page": page + 1 if has_next else None,
    }


def require_owner(doc: dict, user: dict, action: str, resource: str) -> None:
    if doc.get("owner") != user["_id"]:
        raise HTTPException(status_code=403, detail=f"You are not authorized to {action} this {resource}")


def find_or_404(collection: Collection, doc_id: ObjectId, resource: str, projection: Optional[dict] = None) -> dict:
    doc = collection.find_one({"_id": doc_id}, projection)
    if not doc:
        raise HTTPException(status_code=404, detail=f"{resource} not found")
    return doc


def visible_video_or_404(collection: Collection, video_id: ObjectId, viewer: Optional[dict]) -> dict:
    """Fetch a video's owner and publish flag; drafts are 404 to everyone but their owner."""
    video = find_or_404(collection, video_id, "Video", {"owner": 1, "is_published": 1})
    if not video.get("is_published", False) and (viewer is None or video.get("owner") != viewer["_id"]):
        raise HTTPException(status_code=404, detail="Video not found")
    return video
