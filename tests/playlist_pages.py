"""HTML builders and a fake transport shared by the playlist tests."""
from __future__ import annotations

import json
from html import escape

from lib.ytplaylist.errors import NetworkError

PLAYLIST_ID = "PLtest0123456789"
PLAYLIST_URL = f"https://www.youtube.com/playlist?list={PLAYLIST_ID}"
NEXT_PAGE_URL = "https://www.youtube.com/browse_ajax?action_continuation=1&continuation=page2"
THIRD_PAGE_URL = "https://www.youtube.com/browse_ajax?action_continuation=1&continuation=page3"

CUSTOM_BANNER_CSS = (
    "#c4-header-bg-container { background-image: url(//yt3.ggpht.com/banner-abc=w1060); }"
)
DEFAULT_BANNER_CSS = (
    "#c4-header-bg-container { background-image: "
    "url(//s.ytimg.com/yts/img/channels/c4/default_banner-vfl7DRgTn.png); }"
)


def vid(n: int) -> str:
    return f"video{n:06d}"


def row(
    video_id: str,
    title: str = "Some video",
    duration: str | None = "3:45",
    owner: bool = True,
    live: bool = False,
) -> str:
    owner_html = (
        '<div class="pl-video-owner">by <a href="/channel/UCowner">Owner Name</a></div>'
        if owner else ""
    )
    badge_html = '<span class="yt-badge yt-badge-live">LIVE NOW</span>' if live else ""
    time_html = (
        f'<div class="more-menu-wrapper"><div class="timestamp"><span>{duration}</span></div></div>'
        if duration is not None else ""
    )
    return (
        f'<tr class="pl-video yt-uix-tile" data-video-id="{video_id}" data-title="{escape(title)}">'
        f'<td class="pl-video-title">{owner_html}{badge_html}</td>'
        f'<td class="pl-video-time">{time_html}</td>'
        "</tr>"
    )


def load_more_button(href: str = "/browse_ajax?action_continuation=1&continuation=page2") -> str:
    return (
        '<button class="yt-uix-button yt-uix-load-more load-more-button" '
        f'data-uix-load-more-href="{escape(href)}">Load more</button>'
    )


def playlist_page(
    rows: list[str],
    name: str = "My Playlist",
    count_text: str = "1,234 videos",
    banner_css: str | None = CUSTOM_BANNER_CSS,
    with_avatar: bool = True,
    with_thumb: bool = True,
    with_owner: bool = True,
    load_more: str = "",
) -> str:
    banner = f"<style>{banner_css}</style>" if banner_css is not None else ""
    avatar = (
        '<img class="channel-header-profile-image" src="//yt3.ggpht.com/avatar=s100">'
        if with_avatar else ""
    )
    thumb = (
        f'<div class="pl-header-thumb"><img src="https://i.ytimg.com/vi/{vid(1)}/hqdefault.jpg"></div>'
        if with_thumb else ""
    )
    owner_li = '<li><a href="/channel/UCuploader">Uploader</a></li>' if with_owner else "<li></li>"
    channel = (
        '<span class="qualified-channel-title-text"><a href="/channel/UCuploader">Uploader</a></span>'
        if with_owner else ""
    )
    title = f'<h1 class="pl-header-title">\n   {name}\n  </h1>' if name is not None else ""
    return f"""<!DOCTYPE html>
<html>
<body>
  <div id="gh-banner">{banner}{avatar}</div>
  <div id="pl-header">
    {thumb}
    <div class="pl-header-content">
      {title}
      {channel}
      <ul class="pl-header-details">{owner_li}<li>{count_text}</li><li>Updated today</li></ul>
    </div>
  </div>
  <table id="pl-video-table">
    <tbody id="pl-load-more-destination">
      {''.join(rows)}
    </tbody>
  </table>
  {load_more}
</body>
</html>
"""


def ajax_payload(rows: list[str], load_more_html: str | None = "") -> str:
    payload = {"content_html": "".join(rows)}
    if load_more_html is not None:
        payload["load_more_widget_html"] = load_more_html
    return json.dumps(payload)


class FakeDownloader:
    """Serves canned bodies by URL; values that are exceptions are raised."""

    def __init__(self, pages: dict):
        self.pages = dict(pages)
        self.calls: list[str] = []
        self.closed = False

    def download(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise NetworkError(f"404 for {url}", meta={"url": url})
        body = self.pages[url]
        if isinstance(body, Exception):
            raise body
        return body

    def close(self) -> None:
        self.closed = True
