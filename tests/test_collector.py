import unittest

from lib.ytplaylist.collector import collect_streams_from, extract_stream_item, get_owner_link
from lib.ytplaylist.errors import ItemExtractionError, ParsingError
from lib.ytplaylist.models import StreamType
from lib.ytplaylist.parser import LISTING_CONTAINER_SELECTOR, parse_document
from lib.ytplaylist.url_handler import StreamUrlIdHandler

from playlist_pages import PLAYLIST_URL, playlist_page, row, vid


def _collect(rows):
    doc = parse_document(playlist_page(rows))
    container = doc.select_one(LISTING_CONTAINER_SELECTOR)
    return collect_streams_from(container, PLAYLIST_URL, StreamUrlIdHandler())


class CollectorTests(unittest.TestCase):
    def test_skips_deleted_rows_and_keeps_order(self):
        rows = [
            row(vid(1), "one"),
            row(vid(2), "two", owner=False),
            row(vid(3), "three"),
            row(vid(4), "four", owner=False),
            row(vid(5), "five"),
        ]
        items, errors = _collect(rows)

        self.assertEqual(errors, [])
        self.assertEqual([i.name for i in items], ["one", "three", "five"])
        self.assertEqual(
            [i.url for i in items],
            [f"https://www.youtube.com/watch?v={vid(n)}" for n in (1, 3, 5)],
        )

    def test_item_fields(self):
        items, _ = _collect([row(vid(7), "Title & more", duration="1:02:03")])
        item = items[0]

        self.assertEqual(item.name, "Title & more")
        self.assertEqual(item.duration_seconds, 3723)
        self.assertEqual(item.uploader_name, "Owner Name")
        self.assertEqual(item.uploader_url, "https://www.youtube.com/channel/UCowner")
        self.assertEqual(item.thumbnail_url, f"https://i.ytimg.com/vi/{vid(7)}/hqdefault.jpg")
        self.assertEqual(item.stream_type, StreamType.VIDEO_STREAM)
        self.assertFalse(item.is_ad)
        self.assertEqual(item.view_count, -1)
        self.assertEqual(item.upload_date, "")

    def test_empty_title_is_valid(self):
        items, errors = _collect([row(vid(1), "")])
        self.assertEqual(errors, [])
        self.assertEqual(items[0].name, "")

    def test_live_stream_has_no_duration(self):
        # even a malformed timestamp is never read for a live row
        items, errors = _collect([row(vid(1), live=True, duration="LIVE")])
        self.assertEqual(errors, [])
        self.assertEqual(items[0].stream_type, StreamType.LIVE_STREAM)
        self.assertEqual(items[0].duration_seconds, -1)

    def test_missing_timestamp_is_unknown_duration(self):
        items, _ = _collect([row(vid(1), duration=None)])
        self.assertEqual(items[0].duration_seconds, -1)

    def test_failures_are_isolated_per_row(self):
        rows = [
            row(vid(1), "ok-1"),
            row("bad id", "bad-url"),
            row(vid(3), "bad-duration", duration="1:2:3:4"),
            row(vid(4), "ok-4"),
        ]
        items, errors = _collect(rows)

        self.assertEqual([i.name for i in items], ["ok-1", "ok-4"])
        self.assertEqual(len(errors), 2)
        self.assertTrue(all(isinstance(e, ItemExtractionError) for e in errors))
        self.assertEqual([(e.index, e.field) for e in errors], [(1, "url"), (2, "duration")])

    def test_missing_container(self):
        with self.assertRaises(ParsingError):
            collect_streams_from(None, PLAYLIST_URL, StreamUrlIdHandler())

    def test_malformed_owner_href_is_isolated(self):
        rows = [
            row(vid(1), "one"),
            row(vid(2), "two").replace('href="/channel/UCowner"', 'href="http://[bad/c"'),
            row(vid(3), "three"),
        ]
        items, errors = _collect(rows)

        self.assertEqual([i.name for i in items], ["one", "three"])
        self.assertEqual([(e.index, e.field) for e in errors], [(1, "uploader_url")])

    def test_owner_link_marks_deleted_rows(self):
        doc = parse_document(row(vid(1), owner=False) + row(vid(2)))
        rows = doc.find_all("tr")
        self.assertIsNone(get_owner_link(rows[0]))
        self.assertEqual(get_owner_link(rows[1]).get_text(strip=True), "Owner Name")

    def test_extract_deleted_row_directly(self):
        doc = parse_document(row(vid(1), owner=False))
        with self.assertRaises(ItemExtractionError):
            extract_stream_item(doc.find("tr"), PLAYLIST_URL, StreamUrlIdHandler())


if __name__ == "__main__":
    unittest.main()
