"""
プレイリストページ（HTML）のメタデータ抽出。

各フィールドは独立して抽出し、失敗はフィールド単位のエラーとして
PlaylistInfo.errors に積む。1フィールドの失敗で全体を落とさない。
"""
from __future__ import annotations

import logging
from typing import Callable, List, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from lib.ytplaylist.errors import (
    FieldExtractionError,
    MissingBanner,
    MissingName,
    MissingStreamCount,
    MissingThumbnail,
    MissingUploader,
    MissingUploaderAvatar,
    ParsingError,
)
from lib.ytplaylist.models import PlaylistInfo
from lib.ytplaylist.normalizer import abs_attr, abs_url, match_css_url, parse_stream_count

logger = logging.getLogger(__name__)

# Generic channel banner served when the uploader never set one
DEFAULT_BANNER_HOST = "s.ytimg.com"

LISTING_CONTAINER_SELECTOR = "tbody#pl-load-more-destination"
LOAD_MORE_BUTTON_SELECTOR = 'button[class*="yt-uix-load-more"]'


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def get_name(doc: BeautifulSoup) -> str:
    el = doc.select_one("#pl-header h1.pl-header-title")
    if el is None:
        raise MissingName("Could not get playlist name")
    return el.get_text(strip=True)


def get_thumbnail_url(doc: BeautifulSoup, base_url: str) -> str:
    try:
        url = abs_attr(doc.select_one("#pl-header div.pl-header-thumb img"), "src", base_url)
    except ValueError as e:
        raise MissingThumbnail(f"Invalid playlist thumbnail url: {e}") from e
    if not url:
        raise MissingThumbnail("Could not get playlist thumbnail")
    return url


def get_banner_url(doc: BeautifulSoup, base_url: str) -> str | None:
    el = doc.select_one("#gh-banner style")
    if el is None:
        raise MissingBanner("Could not get playlist banner")

    ref = match_css_url(el.string or el.get_text())
    if not ref:
        raise MissingBanner("No url() reference in banner style")

    try:
        url = abs_url(ref, base_url)
        host = (urlparse(url).netloc or "").lower()
    except ValueError as e:
        raise MissingBanner(f"Invalid playlist banner url: {e}") from e
    if host == DEFAULT_BANNER_HOST:
        return None
    return url


def _uploader_link(doc: BeautifulSoup):
    first = doc.select_one("ul.pl-header-details li")
    return first.select_one("a") if first is not None else None


def get_uploader_url(doc: BeautifulSoup, base_url: str) -> str:
    try:
        url = abs_attr(_uploader_link(doc), "href", base_url)
    except ValueError as e:
        raise MissingUploader(f"Invalid playlist uploader url: {e}", field="uploader_url") from e
    if not url:
        raise MissingUploader("Could not get playlist uploader url", field="uploader_url")
    return url


def get_uploader_name(doc: BeautifulSoup) -> str:
    el = doc.select_one("span.qualified-channel-title-text a")
    if el is None:
        raise MissingUploader("Could not get playlist uploader name", field="uploader_name")
    return el.get_text(strip=True)


def get_uploader_avatar_url(doc: BeautifulSoup, base_url: str) -> str:
    try:
        url = abs_attr(doc.select_one("#gh-banner img.channel-header-profile-image"), "src", base_url)
    except ValueError as e:
        raise MissingUploaderAvatar(f"Invalid playlist uploader avatar url: {e}") from e
    if not url:
        raise MissingUploaderAvatar("Could not get playlist uploader avatar")
    return url


def get_stream_count(doc: BeautifulSoup) -> int:
    details = doc.select("ul.pl-header-details li")
    if len(details) < 2:
        raise MissingStreamCount("Could not get video count from playlist")

    text = details[1].get_text(" ", strip=True)
    try:
        return parse_stream_count(text)
    except ValueError as e:
        raise MissingStreamCount(str(e)) from e


def get_next_page_url_from(doc: BeautifulSoup, base_url: str) -> str:
    """
    "load more" ボタンの data-uix-load-more-href を次ページURLとして返す。
    小さいプレイリストにはボタンが無いので、その場合は "" （終端）。
    href が壊れている場合は ParsingError。
    """
    button = doc.select_one(LOAD_MORE_BUTTON_SELECTOR)
    if button is None:
        return ""
    try:
        return abs_attr(button, "data-uix-load-more-href", base_url)
    except ValueError as e:
        raise ParsingError(
            f"Could not get next page url: {e}",
            meta={"href": button.get("data-uix-load-more-href")},
        ) from e


def extract_playlist_info(
    doc: BeautifulSoup,
    url: str,
    playlist_id: str,
    base_url: str | None = None,
) -> PlaylistInfo:
    """
    ルートドキュメントから PlaylistInfo を構築する。

    Args:
        doc: parsed playlist page
        url: clean playlist URL
        playlist_id: id derived from the URL (never read from the page)
        base_url: base for relative links (defaults to url)

    Returns:
        PlaylistInfo; failed fields are None and listed in .errors
    """
    base = base_url or url
    extractors: List[Tuple[str, Callable[[], object]]] = [
        ("name", lambda: get_name(doc)),
        ("thumbnail_url", lambda: get_thumbnail_url(doc, base)),
        ("banner_url", lambda: get_banner_url(doc, base)),
        ("uploader_name", lambda: get_uploader_name(doc)),
        ("uploader_url", lambda: get_uploader_url(doc, base)),
        ("uploader_avatar_url", lambda: get_uploader_avatar_url(doc, base)),
        ("stream_count", lambda: get_stream_count(doc)),
    ]

    values: dict = {}
    errors: List[FieldExtractionError] = []
    for field_name, extract in extractors:
        try:
            values[field_name] = extract()
        except FieldExtractionError as e:
            logger.debug(f"[Playlist] {field_name} failed for id={playlist_id}: {e}")
            errors.append(e)

    if errors:
        logger.info(
            f"[Playlist] id={playlist_id} partial metadata, failed_fields={[e.field for e in errors]}"
        )

    return PlaylistInfo(id=playlist_id, url=url, errors=tuple(errors), **values)
