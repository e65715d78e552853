"""
プレイリスト抽出のエラー階層。

- フィールド単位 / アイテム単位のエラーは結果と一緒に返す（処理は止めない）
- ページ取得単位のエラー（通信・JSON形式）はそのステップだけを中断する
"""
from __future__ import annotations


class ExtractionError(Exception):
    """Base error; carries optional meta for diagnostics."""

    def __init__(self, message: str, meta: dict | None = None):
        super().__init__(message)
        self.message = message
        self.meta = meta or {}


class ParsingError(ExtractionError):
    pass


class UnresolvedIdentifier(ParsingError):
    """Identifier resolver could not map a token or URL."""


class FieldExtractionError(ParsingError):
    """One playlist-level attribute could not be derived."""

    field = ""

    def __init__(self, message: str, field: str | None = None, meta: dict | None = None):
        super().__init__(message, meta=meta)
        if field:
            self.field = field


class MissingName(FieldExtractionError):
    field = "name"


class MissingThumbnail(FieldExtractionError):
    field = "thumbnail_url"


class MissingBanner(FieldExtractionError):
    field = "banner_url"


class MissingUploader(FieldExtractionError):
    field = "uploader_name"


class MissingUploaderAvatar(FieldExtractionError):
    field = "uploader_avatar_url"


class MissingStreamCount(FieldExtractionError):
    field = "stream_count"


class ItemExtractionError(ParsingError):
    """One listing row could not be turned into a StreamItem."""

    def __init__(self, message: str, index: int = -1, field: str = "", meta: dict | None = None):
        super().__init__(message, meta=meta)
        self.index = index
        self.field = field


class PaginationProtocolError(ExtractionError):
    """Continuation payload was malformed or missed an expected field."""


class MalformedPayload(PaginationProtocolError):
    pass


class NoMorePages(ExtractionError):
    """next_page() was called after the playlist was exhausted."""


class NetworkError(ExtractionError):
    pass


class ReCaptchaError(NetworkError):
    """Server answered with a rate limit / captcha gate (HTTP 429)."""
