"""
Playlist extraction session: root page metadata, first page of items, and the
"load more" pagination cursor.
"""
from __future__ import annotations

import json
import logging
from typing import Iterator, List

from bs4 import BeautifulSoup

from lib.ytplaylist.collector import collect_streams_from
from lib.ytplaylist.downloader import Downloader
from lib.ytplaylist.errors import (
    ExtractionError,
    MalformedPayload,
    NoMorePages,
    PaginationProtocolError,
)
from lib.ytplaylist.models import PageResult, PlaylistInfo, StreamItem
from lib.ytplaylist.parser import (
    LISTING_CONTAINER_SELECTOR,
    extract_playlist_info,
    get_next_page_url_from,
    parse_document,
)
from lib.ytplaylist.url_handler import PlaylistUrlIdHandler, StreamUrlIdHandler

logger = logging.getLogger(__name__)


class PlaylistExtractor:
    """
    One extraction session for one playlist URL.

    States:
        HasMore   -- next_page_url is a non-empty URL
        Exhausted -- next_page_url == ""

    The cursor only moves after a page has been fully fetched and parsed, so a
    failed next_page() can simply be retried.
    """

    def __init__(
        self,
        url: str,
        downloader: Downloader | None = None,
        stream_handler: StreamUrlIdHandler | None = None,
        playlist_handler: PlaylistUrlIdHandler | None = None,
    ):
        self.original_url = url
        self.downloader = downloader or Downloader()
        self.stream_handler = stream_handler or StreamUrlIdHandler()
        self.playlist_handler = playlist_handler or PlaylistUrlIdHandler()

        # Raises UnresolvedIdentifier before any network call
        self.id = self.playlist_handler.get_id(url)
        self.clean_url = self.playlist_handler.clean_url(url)

        self._doc: BeautifulSoup | None = None
        self._info: PlaylistInfo | None = None
        self._root_next_page_url = ""
        self._next_page_url = ""

    # ---- session -------------------------------------------------------

    def open(self) -> PlaylistInfo:
        """Fetch the root page and (re)start the session."""
        html = self.downloader.download(self.clean_url)
        doc = parse_document(html)

        next_page_url = get_next_page_url_from(doc, self.clean_url)
        info = extract_playlist_info(doc, self.clean_url, self.id)

        self._doc = doc
        self._info = info
        self._root_next_page_url = next_page_url
        self._next_page_url = next_page_url

        logger.info(
            f"[Playlist] opened id={self.id} stream_count={self._info.stream_count} "
            f"has_more={self.has_next_page()}"
        )
        return self._info

    @property
    def info(self) -> PlaylistInfo:
        self._require_open()
        return self._info

    @property
    def next_page_url(self) -> str:
        return self._next_page_url

    def _require_open(self) -> None:
        if self._doc is None:
            raise ExtractionError("Playlist page not fetched yet; call open() first")

    # ---- pages ---------------------------------------------------------

    def first_page(self) -> PageResult:
        self._require_open()
        container = self._doc.select_one(LISTING_CONTAINER_SELECTOR)
        items, errors = collect_streams_from(container, self.clean_url, self.stream_handler)
        return PageResult(items=items, next_page_url=self._root_next_page_url, errors=errors)

    def get_streams(self) -> List[StreamItem]:
        return self.first_page().items

    def has_next_page(self) -> bool:
        return self._next_page_url != ""

    def next_page(self) -> PageResult:
        self._require_open()
        if not self.has_next_page():
            raise NoMorePages("Playlist doesn't have more streams", meta={"id": self.id})

        page = self.get_page(self._next_page_url)
        self._next_page_url = page.next_page_url
        return page

    def get_page(self, page_url: str) -> PageResult:
        """
        Fetch one continuation payload without touching session state.

        Payload contract:
            content_html           -- rows for the listing container (required)
            load_more_widget_html  -- markup with the next "load more" button;
                                      missing or empty means last page
        """
        if not page_url:
            raise NoMorePages("Empty page url", meta={"id": self.id})

        raw = self.downloader.download(page_url)
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise MalformedPayload(
                f"Could not parse ajax json: {e}", meta={"page_url": page_url}
            ) from e
        if not isinstance(payload, dict):
            raise MalformedPayload(
                "Ajax json is not an object", meta={"page_url": page_url}
            )

        content_html = payload.get("content_html")
        if not isinstance(content_html, str):
            raise PaginationProtocolError(
                "Ajax json has no content_html", meta={"page_url": page_url}
            )

        fragment = parse_document(
            '<table><tbody id="pl-load-more-destination">'
            + content_html
            + "</tbody></table>"
        )
        items, errors = collect_streams_from(
            fragment.select_one(LISTING_CONTAINER_SELECTOR), page_url, self.stream_handler
        )

        next_page_url = self._next_page_url_from_ajax(payload, page_url)
        logger.info(
            f"[Playlist] page id={self.id} items={len(items)} errors={len(errors)} "
            f"has_more={next_page_url != ''}"
        )
        return PageResult(items=items, next_page_url=next_page_url, errors=errors)

    def _next_page_url_from_ajax(self, payload: dict, page_url: str) -> str:
        widget_html = payload.get("load_more_widget_html")
        if widget_html is None:
            return ""
        if not isinstance(widget_html, str):
            raise PaginationProtocolError(
                "load_more_widget_html is not a string", meta={"page_url": page_url}
            )
        if not widget_html.strip():
            return ""
        return get_next_page_url_from(parse_document(widget_html), page_url)

    def iter_pages(self, max_pages: int | None = None) -> Iterator[PageResult]:
        """Yield first_page() then next_page() until exhausted or max_pages."""
        self._require_open()
        count = 0
        page = self.first_page()
        while True:
            yield page
            count += 1
            if not self.has_next_page():
                return
            if max_pages and count >= max_pages:
                return
            page = self.next_page()
