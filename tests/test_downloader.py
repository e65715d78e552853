import unittest
from unittest import mock

import requests

from lib.ytplaylist.downloader import Downloader
from lib.ytplaylist.errors import NetworkError, ReCaptchaError

URL = "https://www.youtube.com/playlist?list=PLtest0123456789"


def _response(status: int, text: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = URL
    return resp


class DownloaderTests(unittest.TestCase):
    def _downloader(self, side_effect, retries: int = 2) -> tuple:
        session = mock.Mock(spec=requests.Session)
        session.get.side_effect = side_effect
        return Downloader(session=session, retries=retries, backoff_s=0), session

    def test_returns_body(self):
        downloader, session = self._downloader([_response(200, "<html></html>")])
        self.assertEqual(downloader.download(URL), "<html></html>")
        session.get.assert_called_once()
        _, kwargs = session.get.call_args
        self.assertIn("User-Agent", kwargs["headers"])
        self.assertEqual(kwargs["timeout"], downloader.timeout_s)

    def test_retries_then_succeeds(self):
        downloader, session = self._downloader([
            requests.ConnectionError("reset"),
            _response(503),
            _response(200, "ok"),
        ])
        self.assertEqual(downloader.download(URL), "ok")
        self.assertEqual(session.get.call_count, 3)

    def test_gives_up_with_network_error(self):
        downloader, session = self._downloader(requests.Timeout("slow"), retries=1)
        with self.assertRaises(NetworkError) as ctx:
            downloader.download(URL)
        self.assertEqual(session.get.call_count, 2)
        self.assertEqual(ctx.exception.meta["url"], URL)

    def test_close_only_closes_own_session(self):
        downloader, session = self._downloader([])
        downloader.close()
        session.close.assert_not_called()

        with mock.patch.object(requests, "Session") as session_cls:
            with Downloader() as owned:
                self.assertIs(owned.session, session_cls.return_value)
        session_cls.return_value.close.assert_called_once()

    def test_rate_limit_is_not_retried(self):
        downloader, session = self._downloader([_response(429), _response(200, "ok")])
        with self.assertRaises(ReCaptchaError):
            downloader.download(URL)
        self.assertEqual(session.get.call_count, 1)


if __name__ == "__main__":
    unittest.main()
