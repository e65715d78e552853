"""
YouTube プレイリストのデータモデル。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from lib.ytplaylist.errors import FieldExtractionError, ItemExtractionError


class StreamType(str, Enum):
    """
    リスト行のストリーム種別。
    LIVE_STREAM の場合は duration を読まずに -1 とする。
    """
    VIDEO_STREAM = "video_stream"
    LIVE_STREAM = "live_stream"


@dataclass(frozen=True)
class PlaylistInfo:
    """
    プレイリスト全体のメタデータ（open() ごとに1回だけ構築）。

    抽出に失敗したフィールドは None になり、対応するエラーが errors に入る。
    stream_count は 0 が「空のプレイリスト」、None が「取得できなかった」。
    """
    id: str
    url: str
    name: str | None = None
    thumbnail_url: str | None = None
    banner_url: str | None = None
    uploader_name: str | None = None
    uploader_url: str | None = None
    uploader_avatar_url: str | None = None
    stream_count: int | None = None
    errors: Tuple[FieldExtractionError, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.errors

    @property
    def failed_fields(self) -> List[str]:
        return [e.field for e in self.errors]


@dataclass(frozen=True)
class StreamItem:
    """プレイリスト内の単一動画。"""
    url: str
    name: str
    duration_seconds: int  # -1: unknown or live
    uploader_name: str
    uploader_url: str
    thumbnail_url: str
    stream_type: StreamType = StreamType.VIDEO_STREAM
    is_ad: bool = False

    # 一覧ページからは取れない値（センチネル）
    view_count: int = -1
    upload_date: str = ""


@dataclass
class PageResult:
    """1ページ分のアイテムと次ページのカーソル（"" = 終端）。"""
    items: List[StreamItem] = field(default_factory=list)
    next_page_url: str = ""
    errors: List[ItemExtractionError] = field(default_factory=list)

    @property
    def has_next_page(self) -> bool:
        return self.next_page_url != ""
