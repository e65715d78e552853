"""
YouTube playlist page extraction and "load more" pagination.

Public API:
  - PlaylistExtractor(url).open() -> PlaylistInfo
  - PlaylistExtractor.first_page() / next_page() -> PageResult
  - parse_duration_string(s) -> int
"""
from lib.ytplaylist.errors import (
    ExtractionError,
    ParsingError,
    FieldExtractionError,
    MissingName,
    MissingThumbnail,
    MissingBanner,
    MissingUploader,
    MissingUploaderAvatar,
    MissingStreamCount,
    ItemExtractionError,
    UnresolvedIdentifier,
    PaginationProtocolError,
    MalformedPayload,
    NoMorePages,
    NetworkError,
    ReCaptchaError,
)
from lib.ytplaylist.models import PlaylistInfo, StreamItem, StreamType, PageResult
from lib.ytplaylist.normalizer import parse_duration_string
from lib.ytplaylist.url_handler import StreamUrlIdHandler, PlaylistUrlIdHandler
from lib.ytplaylist.downloader import Downloader
from lib.ytplaylist.extractor import PlaylistExtractor

__all__ = [
    "PlaylistExtractor",
    "Downloader",
    "StreamUrlIdHandler",
    "PlaylistUrlIdHandler",
    "PlaylistInfo",
    "StreamItem",
    "StreamType",
    "PageResult",
    "parse_duration_string",
    "ExtractionError",
    "ParsingError",
    "FieldExtractionError",
    "MissingName",
    "MissingThumbnail",
    "MissingBanner",
    "MissingUploader",
    "MissingUploaderAvatar",
    "MissingStreamCount",
    "ItemExtractionError",
    "UnresolvedIdentifier",
    "PaginationProtocolError",
    "MalformedPayload",
    "NoMorePages",
    "NetworkError",
    "ReCaptchaError",
]
