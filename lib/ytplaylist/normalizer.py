"""
正規化ヘルパー: 再生時間・動画数・URL の文字列を数値/絶対URLに揃える。
"""
from __future__ import annotations

import re
from typing import Any
from urllib.parse import urljoin

_DIGITS_RE = re.compile(r"^[0-9]+$")
_CSS_URL_RE = re.compile(r"url\(\s*['\"]?([^)'\"]+)['\"]?\s*\)")


def remove_non_digit_characters(s: str) -> str:
    return re.sub(r"[^0-9]", "", s or "")


def parse_duration_string(s: str) -> int:
    """
    "S" / "M:S" / "H:M:S" 形式の再生時間を秒に変換する。

    - 各セグメントは ASCII 数字のみ（前後の空白は無視）
    - 空文字、4セグメント以上、数字以外を含む場合は ValueError
    """
    parts = (s or "").split(":")
    if len(parts) > 3:
        raise ValueError(f"Unknown duration format: {s!r}")

    seconds = 0
    for part in parts:
        part = part.strip()
        if not _DIGITS_RE.match(part):
            raise ValueError(f"Non-numeric duration segment in {s!r}")
        seconds = seconds * 60 + int(part)
    return seconds


def parse_stream_count(text: str) -> int:
    """
    "1,234 videos" → 1234。
    空のプレイリストは数字が出ない（"No videos"）ので、数字が残らなければ 0。
    """
    digits = remove_non_digit_characters(text)
    if not digits:
        return 0
    try:
        return int(digits)
    except ValueError as e:
        raise ValueError(f"Could not handle input: {text!r}") from e


def match_css_url(css: str) -> str | None:
    """Return the first url(...) reference in a CSS block, quotes stripped."""
    m = _CSS_URL_RE.search(css or "")
    if not m:
        return None
    return m.group(1).strip()


def abs_url(href: str, base_url: str) -> str:
    href = (href or "").strip()
    if not href:
        return ""
    if href.startswith("//"):
        return "https:" + href
    return urljoin(base_url, href)


def abs_attr(element: Any, attr: str, base_url: str) -> str:
    """Absolute URL from an element attribute ("" when missing)."""
    if element is None:
        return ""
    return abs_url(element.get(attr) or "", base_url)
