import unittest
from datetime import timedelta

from headline_feed.recency import filter_recent

from .helpers import NOW, make_headline


class FilterRecentTests(unittest.TestCase):
    def test_drops_headlines_outside_window(self):
        fresh = make_headline("fresh", timestamp="2026-10-19T08:00:00.000Z")
        old = make_headline("old", timestamp="2026-10-17T08:00:00.000Z")
        kept = filter_recent([fresh, old], timedelta(hours=24), NOW)
        self.assertEqual([h.title for h in kept], ["fresh"])

    def test_window_in_milliseconds(self):
        h = make_headline("six hours", timestamp="2026-10-19T03:00:00.000Z")
        self.assertEqual(filter_recent([h], 12 * 60 * 60 * 1000, NOW), [h])
        self.assertEqual(filter_recent([h], 60 * 60 * 1000, NOW), [])

    def test_boundary_is_inclusive(self):
        h = make_headline("edge", timestamp="2026-10-18T09:00:00.000Z")
        self.assertEqual(filter_recent([h], timedelta(hours=24), NOW), [h])

    def test_unparseable_timestamp_is_kept(self):
        h = make_headline("broken", timestamp="not-a-date")
        self.assertEqual(filter_recent([h], timedelta(seconds=1), NOW), [h])
        self.assertEqual(filter_recent([h], 0, NOW), [h])

    def test_naive_now_treated_as_utc(self):
        fresh = make_headline("fresh", timestamp="2026-10-19T08:00:00.000Z")
        old = make_headline("old", timestamp="2026-10-17T08:00:00.000Z")
        naive = NOW.replace(tzinfo=None)
        self.assertEqual(filter_recent([fresh, old], timedelta(hours=24), naive), [fresh])

    def test_rfc822_timestamp_understood(self):
        h = make_headline("rfc", timestamp="Mon, 12 Oct 2026 08:00:00 GMT")
        self.assertEqual(filter_recent([h], timedelta(hours=24), NOW), [])


if __name__ == "__main__":
    unittest.main()
