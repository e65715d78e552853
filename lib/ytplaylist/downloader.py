"""Blocking HTTP transport used by the extractor (requests)."""
from __future__ import annotations

import logging
import os
import time

import requests

from lib.ytplaylist.errors import NetworkError, ReCaptchaError

logger = logging.getLogger(__name__)

YT_HTTP_TIMEOUT_S = float(os.getenv("YT_HTTP_TIMEOUT_S", "20"))
YT_HTTP_RETRIES = int(os.getenv("YT_HTTP_RETRIES", "2"))
YT_HTTP_USER_AGENT = os.getenv(
    "YT_HTTP_USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
)
YT_ACCEPT_LANGUAGE = os.getenv("YT_ACCEPT_LANGUAGE", "en-US,en;q=0.9")


class Downloader:
    """
    GET a URL and return the body text.

    Retries (with linear backoff) live here, not in the extractor: the
    extractor performs exactly one download() call per step.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout_s: float = YT_HTTP_TIMEOUT_S,
        retries: int = YT_HTTP_RETRIES,
        backoff_s: float = 1.0,
    ):
        # Only a session created here is closed by close()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout_s = timeout_s
        self.retries = max(0, retries)
        self.backoff_s = backoff_s
        self.headers = {
            "User-Agent": YT_HTTP_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
            "Accept-Language": YT_ACCEPT_LANGUAGE,
        }

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def download(self, url: str) -> str:
        last_error: Exception | None = None
        for attempt in range(self.retries + 1):
            try:
                resp = self.session.get(url, headers=self.headers, timeout=self.timeout_s)
                if resp.status_code == 429:
                    raise ReCaptchaError(
                        "reCaptcha challenge requested",
                        meta={"url": url, "status": resp.status_code},
                    )
                resp.raise_for_status()
                return resp.text
            except ReCaptchaError:
                raise
            except requests.RequestException as e:
                last_error = e
                logger.warning(f"[Downloader] attempt {attempt + 1}/{self.retries + 1} failed: {e}")
                if attempt < self.retries:
                    time.sleep(self.backoff_s * (attempt + 1))

        raise NetworkError(
            f"Failed to download {url} after {self.retries + 1} attempts: {last_error}",
            meta={"url": url},
        )
