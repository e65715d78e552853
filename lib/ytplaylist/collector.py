"""
Listing rows -> StreamItem.

Deleted rows (no owner link) are skipped silently; a failure on any other row
is recorded as an ItemExtractionError and the remaining rows are still read.
"""
from __future__ import annotations

import logging
from typing import Any, List, Tuple

from lib.ytplaylist.errors import ItemExtractionError, ParsingError, UnresolvedIdentifier
from lib.ytplaylist.models import StreamItem, StreamType
from lib.ytplaylist.normalizer import abs_attr, parse_duration_string
from lib.ytplaylist.url_handler import StreamUrlIdHandler

logger = logging.getLogger(__name__)

OWNER_LINK_SELECTOR = "div.pl-video-owner a"
TIMESTAMP_SELECTOR = "div.timestamp span"
LIVE_BADGE_SELECTOR = '[class*="yt-badge-live"]'


def get_owner_link(row: Any):
    """Owner link of a row, or None for a deleted entry."""
    return row.select_one(OWNER_LINK_SELECTOR)


def get_stream_type(row: Any) -> StreamType:
    if row.select_one(LIVE_BADGE_SELECTOR) is not None:
        return StreamType.LIVE_STREAM
    return StreamType.VIDEO_STREAM


def get_duration(row: Any, stream_type: StreamType) -> int:
    if stream_type == StreamType.LIVE_STREAM:
        return -1

    # Private/removed videos keep their row but lose the timestamp
    span = row.select_one(TIMESTAMP_SELECTOR)
    if span is None:
        return -1
    return parse_duration_string(span.get_text(strip=True))


def extract_stream_item(
    row: Any,
    base_url: str,
    stream_handler: StreamUrlIdHandler,
    index: int = -1,
    owner_link: Any = None,
) -> StreamItem:
    """Build one StreamItem from a listing row; raises ItemExtractionError."""
    if owner_link is None:
        owner_link = get_owner_link(row)
    if owner_link is None:
        raise ItemExtractionError("Row has no owner link", index=index, field="uploader_url")

    try:
        url = stream_handler.get_url(row.get("data-video-id") or "")
    except UnresolvedIdentifier as e:
        raise ItemExtractionError(
            f"Could not get web page url for the video: {e}", index=index, field="url"
        ) from e

    stream_type = get_stream_type(row)
    try:
        duration = get_duration(row, stream_type)
    except ValueError as e:
        raise ItemExtractionError(
            f"Could not get duration {url}: {e}", index=index, field="duration"
        ) from e

    try:
        uploader_url = abs_attr(owner_link, "href", base_url)
    except ValueError as e:
        raise ItemExtractionError(
            f"Could not get uploader url {url}: {e}", index=index, field="uploader_url"
        ) from e

    try:
        thumbnail_url = stream_handler.thumbnail_url(url)
    except UnresolvedIdentifier as e:
        raise ItemExtractionError(
            f"Could not get thumbnail url: {e}", index=index, field="thumbnail_url"
        ) from e

    return StreamItem(
        url=url,
        name=row.get("data-title") or "",
        duration_seconds=duration,
        uploader_name=owner_link.get_text(strip=True),
        uploader_url=uploader_url,
        thumbnail_url=thumbnail_url,
        stream_type=stream_type,
    )


def collect_streams_from(
    container: Any,
    base_url: str,
    stream_handler: StreamUrlIdHandler,
) -> Tuple[List[StreamItem], List[ItemExtractionError]]:
    """
    Walk the container's element children in document order.

    Returns:
        (items, errors) where errors holds one entry per row that failed
    """
    if container is None:
        raise ParsingError("Could not find playlist listing container")

    items: List[StreamItem] = []
    errors: List[ItemExtractionError] = []
    deleted = 0

    for index, row in enumerate(container.find_all(recursive=False)):
        owner_link = get_owner_link(row)
        if owner_link is None:
            deleted += 1
            continue
        try:
            items.append(
                extract_stream_item(row, base_url, stream_handler, index=index, owner_link=owner_link)
            )
        except ItemExtractionError as e:
            logger.debug(f"[Collector] row={index} field={e.field} failed: {e}")
            errors.append(e)

    logger.debug(f"[Collector] items={len(items)} deleted={deleted} errors={len(errors)}")
    return items, errors
