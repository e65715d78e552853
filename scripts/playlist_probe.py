#!/usr/bin/env python3
"""
YouTube Playlist Probe.

Minimal script to check extraction against a live playlist page.
Opens the playlist, follows "load more" pages and prints a JSON summary.

Usage:
    python scripts/playlist_probe.py "https://www.youtube.com/playlist?list=..." [max_pages]

Output:
    - playlist fields, failed fields, page count, item count, sample titles
"""

import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# Load .env before importing modules that read env at import time
env_file = ROOT / ".env"
if env_file.exists():
    load_dotenv(env_file)

from core import fetch_playlist, playlist_result_to_dict  # noqa: E402
from lib.ytplaylist import ExtractionError  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if os.getenv("PROBE_DEBUG", "0") == "1" else logging.INFO,
    format="[%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python scripts/playlist_probe.py <playlist_url> [max_pages]")
        return 1

    url = sys.argv[1].strip().strip('"\'')
    max_pages = int(sys.argv[2]) if len(sys.argv) > 2 else None

    try:
        data = playlist_result_to_dict(fetch_playlist(url, max_pages=max_pages))
    except ExtractionError as e:
        logger.error(f"Probe failed: {e} meta={e.meta}")
        return 1

    summary = {
        "playlist_id": data["playlist_id"],
        "playlist_name": data["playlist_name"],
        "stream_count": data["stream_count"],
        "failed_fields": [e["field"] for e in data["field_errors"]],
        "item_errors": len(data["item_errors"]),
        "track_count": len(data["tracks"]),
        "sample_titles": [t["name"][:100] for t in data["tracks"][:5]],
        "meta": data["meta"],
    }

    print("\n" + "=" * 70)
    print("YOUTUBE PLAYLIST PROBE RESULT")
    print("=" * 70)
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    print("=" * 70)

    return 0 if not data["field_errors"] else 1


if __name__ == "__main__":
    sys.exit(main())
