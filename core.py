#!/usr/bin/env python3
"""
YouTube プレイリストを取得して、
- プレイリスト基本情報（名前 / サムネイル / バナー / 投稿者 / 動画数）
- 各動画情報（タイトル / URL / 再生時間 / 投稿者 / サムネイル）

を Python 辞書で返すコアモジュール。
"""

from __future__ import annotations

import logging
import os
import re
import unicodedata
from dataclasses import asdict
from time import perf_counter
from typing import Any, Dict, List
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from lib.ytplaylist import (
    Downloader,
    ExtractionError,
    ItemExtractionError,
    PlaylistExtractor,
    PlaylistUrlIdHandler,
    UnresolvedIdentifier,
)
from lib.ytplaylist.url_handler import YOUTUBE_HOSTS

# 0 = no page limit
YT_MAX_PAGES = int(os.getenv("YT_MAX_PAGES", "0"))

_TRACKING_PARAMS = {"si", "fbclid", "gclid", "feature", "pp"}
_RAW_PLAYLIST_ID_RE = re.compile(r"^(PL|UU|LL|FL|OL|RD)[A-Za-z0-9_-]{8,}$")

# Configure logger for this module
logger = logging.getLogger(__name__)


def _finalize_timings(timings: dict, overall_start: float) -> dict:
    timings["overall_ms"] = int((perf_counter() - overall_start) * 1000)
    for k, v in list(timings.items()):
        try:
            timings[k] = int(v)
        except (TypeError, ValueError):
            timings[k] = 0
    known_keys = ["open_ms", "pages_ms"]
    known = sum(int(timings.get(k, 0) or 0) for k in known_keys)
    timings["other_ms"] = max(0, int(timings.get("overall_ms", 0)) - known)
    return timings


# =========================
# プレイリストURL / ID
# =========================


def normalize_playlist_url(url: str) -> str:
    """Normalize playlist URL for logging and response.
    - Strip tracking query params: si, utm_*, fbclid, gclid, feature, pp
    - For YouTube URLs carrying list=, canonicalize to www.youtube.com/playlist?list=<id>
    """
    s = (url or "").strip()
    if not s:
        return ""
    parsed = urlparse(s)
    host = (parsed.netloc or "").lower()
    query = [
        (k, v) for k, v in parse_qsl(parsed.query)
        if k not in _TRACKING_PARAMS and not k.startswith("utm_")
    ]

    if host in YOUTUBE_HOSTS:
        list_id = dict(query).get("list")
        if list_id:
            try:
                return PlaylistUrlIdHandler().get_url(list_id)
            except UnresolvedIdentifier:
                pass

    path = parsed.path or ""
    if path.endswith("/"):
        path = path[:-1]
    return urlunparse((parsed.scheme or "https", parsed.netloc or "", path, "", urlencode(query), ""))


def extract_playlist_id(url_or_id: str) -> str:
    """Extract a YouTube playlist ID from a full URL or a raw ID.

    Supports formats like:
    - https://www.youtube.com/playlist?list=<id>
    - https://www.youtube.com/watch?v=<video>&list=<id>
    - raw ID (PL..., UU..., ...)
    """
    s = (url_or_id or "").strip()
    if not s:
        raise UnresolvedIdentifier("Empty playlist URL or ID")

    if _RAW_PLAYLIST_ID_RE.match(s):
        return s
    return PlaylistUrlIdHandler().get_id(s)


# =========================
# 取得
# =========================


def fetch_playlist(
    url_or_id: str,
    max_pages: int | None = None,
    downloader: Downloader | None = None,
) -> Dict[str, Any]:
    """
    プレイリストページと "load more" の続きを順に取得する。

    2ページ目以降の取得に失敗した場合は、そこまでのページを残して打ち切り、
    エラーを "page_error" に入れる（has_more は True のまま）。

    Args:
        url_or_id: playlist URL or raw playlist id
        max_pages: stop after this many pages (None -> YT_MAX_PAGES, 0 -> no limit)
        downloader: transport override (tests inject a fake); one created here
            is closed before returning

    Returns:
        raw dict: {"playlist": PlaylistInfo, "items": [...], "item_errors": [...],
                   "pages": int, "has_more": bool, "page_error": ExtractionError | None,
                   "page_error_url": str, "perf": {...}}
    """
    if downloader is None:
        with Downloader() as owned:
            return fetch_playlist(url_or_id, max_pages=max_pages, downloader=owned)

    overall_start = perf_counter()
    timings: Dict[str, Any] = {}
    limit = YT_MAX_PAGES if max_pages is None else max_pages

    playlist_id = extract_playlist_id(url_or_id)
    extractor = PlaylistExtractor(
        PlaylistUrlIdHandler().get_url(playlist_id),
        downloader=downloader,
    )

    t0 = perf_counter()
    info = extractor.open()
    timings["open_ms"] = (perf_counter() - t0) * 1000

    items: List[Any] = []
    item_errors: List[ItemExtractionError] = []
    pages = 0
    page_error: ExtractionError | None = None
    page_error_url = ""
    t0 = perf_counter()
    try:
        for page in extractor.iter_pages(max_pages=limit or None):
            pages += 1
            items.extend(page.items)
            item_errors.extend(page.errors)
    except ExtractionError as e:
        if pages == 0:
            raise
        # The cursor still points at the page that failed
        page_error = e
        page_error_url = extractor.next_page_url
        logger.warning(
            f"[YouTube] pagination stopped id={playlist_id} after pages={pages} "
            f"url={page_error_url}: {type(e).__name__}: {e}"
        )
    timings["pages_ms"] = (perf_counter() - t0) * 1000

    perf = _finalize_timings(timings, overall_start)
    logger.info(
        f"[YouTube] playlist fetched id={playlist_id} pages={pages} items={len(items)} "
        f"item_errors={len(item_errors)} field_errors={len(info.errors)} overall_ms={perf['overall_ms']}"
    )
    return {
        "playlist": info,
        "items": items,
        "item_errors": item_errors,
        "pages": pages,
        "has_more": extractor.has_next_page(),
        "page_error": page_error,
        "page_error_url": page_error_url,
        "perf": perf,
    }


def _nfc(s: str | None) -> str | None:
    if s is None:
        return None
    return unicodedata.normalize("NFC", s)


def playlist_result_to_dict(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    fetch_playlist() の結果（raw dict）を、
    フロントエンドや API 用に扱いやすい形の dict に変換する。

    戻り値フォーマット:
    {
      "playlist_id": str,
      "playlist_name": str | None,
      "playlist_url": str,
      "thumbnail_url": str | None,
      "banner_url": str | None,
      "uploader": {"name": ..., "url": ..., "avatar_url": ...},
      "stream_count": int | None,
      "tracks": [ {url, name, duration_seconds, uploader_name, ...}, ... ],
      "field_errors": [ {"field": str, "error": str}, ... ],
      "item_errors": [ {"index": int, "field": str, "error": str}, ... ],
      "meta": {"pages": int, "has_more": bool, "page_error": {...} | None, ...perf}
    }
    """
    info = raw["playlist"]
    page_error = raw.get("page_error")

    tracks_out: List[Dict[str, Any]] = []
    for item in raw.get("items", []):
        d = asdict(item)
        d["stream_type"] = item.stream_type.value
        d["name"] = _nfc(d["name"])
        d["uploader_name"] = _nfc(d["uploader_name"])
        tracks_out.append(d)

    return {
        "playlist_id": info.id,
        "playlist_name": _nfc(info.name),
        "playlist_url": info.url,
        "thumbnail_url": info.thumbnail_url,
        "banner_url": info.banner_url,
        "uploader": {
            "name": _nfc(info.uploader_name),
            "url": info.uploader_url,
            "avatar_url": info.uploader_avatar_url,
        },
        "stream_count": info.stream_count,
        "tracks": tracks_out,
        "field_errors": [{"field": e.field, "error": str(e)} for e in info.errors],
        "item_errors": [
            {"index": e.index, "field": e.field, "error": str(e)}
            for e in raw.get("item_errors", [])
        ],
        "meta": {
            "pages": raw.get("pages", 0),
            "has_more": bool(raw.get("has_more")),
            "page_error": (
                {
                    "kind": type(page_error).__name__,
                    "error": str(page_error),
                    "page_url": raw.get("page_error_url") or "",
                }
                if page_error is not None else None
            ),
            **(raw.get("perf") or {}),
        },
    }
