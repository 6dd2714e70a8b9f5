import json
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import database
from config import settings
from routers import api_router

logger = logging.getLogger("videotube.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if database.db is not None:
        database.ensure_indexes(database.db)
    else:
        logger.warning("DATABASE_URL/DATABASE_NAME not set; API calls needing the database will fail")
    yield


app = FastAPI(title="VideoTube API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
                },
                ensure_ascii=True,
            ),
        )
        response = _error(500, "Something went wrong")
    response.headers["X-Request-ID"] = req_id
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            },
            ensure_ascii=True,
        ),
    )
    return response


# -------------------- Error envelope --------------------
def _error(status_code: int, message: str, errors=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "data": None,
            "message": message,
            "success": False,
            "errors": errors or [],
        },
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = [{"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")} for e in exc.errors()]
    message = errors[0]["msg"] if errors else "Invalid request"
    return _error(400, message, errors=errors)


app.include_router(api_router)


# -------------------- Basic Routes --------------------
@app.get("/")
def read_root():
    return {"message": "VideoTube backend is running"}


@app.get("/test")
def test_database():
    info = {
        "backend": "running",
        "database_connected": False,
        "collections": []
    }
    try:
        if database.db is not None:
            info["collections"] = database.db.list_collection_names()
            info["database_connected"] = True
    except Exception as e:
        info["error"] = str(e)
    return info


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
