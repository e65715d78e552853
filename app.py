from __future__ import annotations

import ipaddress
import os
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from pydantic import BaseModel

from core import (
    _RAW_PLAYLIST_ID_RE,
    fetch_playlist,
    normalize_playlist_url,
    playlist_result_to_dict,
)
from lib.ytplaylist import ExtractionError, NetworkError
from lib.ytplaylist.url_handler import YOUTUBE_HOSTS
import logging

# Basic logging configuration to ensure logger outputs appear in the terminal
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


# =========================
# Pydantic models
# =========================

class TrackModel(BaseModel):
    url: str
    name: str
    duration_seconds: int
    uploader_name: str
    uploader_url: str
    thumbnail_url: str
    stream_type: str = "video_stream"
    is_ad: bool = False
    view_count: int = -1
    upload_date: str = ""


class UploaderModel(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    avatar_url: Optional[str] = None


class FieldErrorModel(BaseModel):
    field: str
    error: str


class ItemErrorModel(BaseModel):
    index: int
    field: str
    error: str


class PageErrorModel(BaseModel):
    kind: str
    error: str
    page_url: str = ""


class PlaylistMetaModel(BaseModel):
    model_config = {"extra": "allow"}  # Allow unknown fields to pass through

    pages: Optional[int] = None
    has_more: Optional[bool] = None
    page_error: Optional[PageErrorModel] = None
    open_ms: Optional[float] = None
    pages_ms: Optional[float] = None
    overall_ms: Optional[float] = None
    total_api_ms: Optional[float] = None


class PlaylistResponse(BaseModel):
    playlist_id: str
    playlist_name: Optional[str] = None
    playlist_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    banner_url: Optional[str] = None
    uploader: Optional[UploaderModel] = None
    stream_count: Optional[int] = None
    tracks: List[TrackModel]
    field_errors: List[FieldErrorModel] = []
    item_errors: List[ItemErrorModel] = []
    meta: Optional[PlaylistMetaModel] = None


# =========================
# FastAPI app & CORS
# =========================

app = FastAPI(
    title="YouTube Playlist Extractor",
    version="1.0.0",
)

# Add GZip middleware for response compression (reduces payload size for large JSON)
app.add_middleware(GZipMiddleware, minimum_size=1000)

# デフォルトの許可オリジン
default_origins = [
    "http://localhost:3000",
]

# 環境変数 ALLOWED_ORIGINS があればそれを優先（カンマ区切り）
env_origins = os.getenv("ALLOWED_ORIGINS")
if env_origins:
    origins = [o.strip() for o in env_origins.split(",") if o.strip()]
else:
    origins = default_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# =========================
# Health check
# =========================

@app.get("/health", tags=["system"])
def health() -> Dict[str, Any]:
    return {
        "ok": True,
        "status": "ok",
        "build_commit": os.getenv("RENDER_GIT_COMMIT", "local")[:7],
    }


@app.get("/", tags=["system"])
def root() -> Dict[str, Any]:
    return {"ok": True, "status": "ok"}


# =========================
# Core helpers
# =========================

def _sanitize_url(raw: str) -> str:
    """
    Basic server-side URL sanitization: trim whitespace, strip surrounding
    angle brackets and surrounding single/double quotes.
    """
    if not raw:
        return raw
    s = raw.strip()
    if s.startswith('<') and s.endswith('>'):
        s = s[1:-1].strip()
    # strip surrounding quotes
    s = s.strip('\'"')
    return s


def _validate_playlist_url_or_id(raw: str) -> str:
    """
    https の YouTube URL か、生のプレイリストIDだけを許可する。
    それ以外は 422。
    """
    s = _sanitize_url(raw or "")
    if not s:
        raise HTTPException(status_code=422, detail="url is required")

    # Raw playlist ID (no scheme)
    if _RAW_PLAYLIST_ID_RE.match(s):
        return s

    try:
        parsed = urlparse(s)
    except ValueError:
        raise HTTPException(status_code=422, detail="Malformed URL")
    if parsed.scheme != "https":
        raise HTTPException(status_code=422, detail="Only https URLs are supported")

    host = (parsed.hostname or "").lower()
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        ip = None
    if ip is not None or host not in YOUTUBE_HOSTS:
        raise HTTPException(status_code=422, detail=f"Unsupported URL host: {host or '(empty)'}")

    return s


# =========================
# Endpoints
# =========================

@app.get("/api/playlist", response_model=PlaylistResponse)
def get_playlist(
    url: str = Query(..., description="Playlist URL or ID"),
    max_pages: Optional[int] = Query(None, ge=0, description="Stop after N pages (0 = all)"),
):
    """
    プレイリストのメタデータと動画一覧を取得（"load more" を辿る）。
    """
    t0_total = time.time()
    clean_url = _validate_playlist_url_or_id(url)
    normalized_url = normalize_playlist_url(clean_url)

    logger.info(f"[api/playlist] raw_url={url} clean_url={clean_url} normalized_url={normalized_url} max_pages={max_pages}")

    try:
        result = fetch_playlist(clean_url, max_pages=max_pages)
    except NetworkError as e:
        logger.error(f"[api/playlist] network error for clean_url={clean_url}: {e} meta={e.meta}")
        raise HTTPException(status_code=502, detail={
            "error": str(e),
            "url": clean_url,
            "meta": e.meta,
        })
    except ExtractionError as e:
        logger.error(f"[api/playlist] error for clean_url={clean_url}: {e} meta={e.meta}")
        raise HTTPException(status_code=400, detail={
            "error": str(e),
            "url": clean_url,
            "meta": e.meta,
        })

    data = playlist_result_to_dict(result)
    total_ms = (time.time() - t0_total) * 1000
    data["meta"]["total_api_ms"] = float(total_ms)

    logger.info(
        f"[PERF] url_len={len(clean_url)} pages={data['meta'].get('pages')} "
        f"total_api_ms={total_ms:.1f} tracks={len(data['tracks'])} "
        f"field_errors={len(data['field_errors'])} item_errors={len(data['item_errors'])}"
        f" page_error={data['meta']['page_error'] is not None}"
    )
    return data


# =========================
# Local dev entrypoint
# =========================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
