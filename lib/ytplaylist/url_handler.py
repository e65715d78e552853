"""
Identifier resolvers: video id <-> watch URL, playlist URL <-> playlist id.
"""
from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from lib.ytplaylist.errors import UnresolvedIdentifier

YOUTUBE_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
}

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_PLAYLIST_ID_RE = re.compile(r"^[A-Za-z0-9_-]{10,}$")

THUMBNAIL_URL_TEMPLATE = "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"


def _parse(url: str):
    try:
        return urlparse(url)
    except ValueError as e:
        raise UnresolvedIdentifier(f"Malformed URL: {url}") from e


def _host(parsed) -> str:
    return (parsed.netloc or "").lower().split(":")[0]


class StreamUrlIdHandler:
    """Maps an 11-character video id to its canonical watch URL and back."""

    base_url = "https://www.youtube.com/watch?v="

    def get_url(self, video_id: str) -> str:
        video_id = (video_id or "").strip()
        if not _VIDEO_ID_RE.match(video_id):
            raise UnresolvedIdentifier(f"Invalid video id: {video_id!r}")
        return self.base_url + video_id

    def get_id(self, url: str) -> str:
        """
        Supports:
        - https://www.youtube.com/watch?v=<id>
        - https://youtu.be/<id>
        - https://www.youtube.com/embed/<id>, /v/<id>, /shorts/<id>
        - vnd.youtube:<id>
        """
        s = (url or "").strip()
        if not s:
            raise UnresolvedIdentifier("Empty video URL")

        candidate = ""
        if s.startswith("vnd.youtube:"):
            candidate = s[len("vnd.youtube:"):].split("?")[0]
        else:
            parsed = _parse(s)
            host = _host(parsed)
            parts = [p for p in (parsed.path or "").split("/") if p]
            if host == "youtu.be" and parts:
                candidate = parts[0]
            elif host in YOUTUBE_HOSTS:
                if parts and parts[0] == "watch":
                    candidate = (parse_qs(parsed.query).get("v") or [""])[0]
                elif len(parts) >= 2 and parts[0] in ("embed", "v", "shorts"):
                    candidate = parts[1]

        if not _VIDEO_ID_RE.match(candidate):
            raise UnresolvedIdentifier(f"Could not extract video id from: {s}")
        return candidate

    def thumbnail_url(self, url: str) -> str:
        return THUMBNAIL_URL_TEMPLATE.format(video_id=self.get_id(url))


class PlaylistUrlIdHandler:
    """Maps a playlist page URL (any form carrying list=) to its id and back."""

    base_url = "https://www.youtube.com/playlist?list="

    def get_url(self, playlist_id: str) -> str:
        playlist_id = (playlist_id or "").strip()
        if not _PLAYLIST_ID_RE.match(playlist_id):
            raise UnresolvedIdentifier(f"Invalid playlist id: {playlist_id!r}")
        return self.base_url + playlist_id

    def get_id(self, url: str) -> str:
        s = (url or "").strip()
        if not s:
            raise UnresolvedIdentifier("Empty playlist URL")

        parsed = _parse(s)
        if _host(parsed) not in YOUTUBE_HOSTS:
            raise UnresolvedIdentifier(f"Not a YouTube URL: {s}")

        candidate = (parse_qs(parsed.query).get("list") or [""])[0]
        if not _PLAYLIST_ID_RE.match(candidate):
            raise UnresolvedIdentifier(f"Could not extract playlist id from: {s}")
        return candidate

    def clean_url(self, url: str) -> str:
        return self.get_url(self.get_id(url))
