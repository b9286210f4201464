import unittest

from headline_feed.dedup import dedupe, normalize_title
from headline_feed.ranker import rank

from .helpers import NOW_ISO, make_headline


class NormalizeTitleTests(unittest.TestCase):
    def test_case_punctuation_and_whitespace_ignored(self):
        self.assertEqual(normalize_title("Hello, World!"), normalize_title("  hello   world "))

    def test_cjk_spacing_and_fullwidth_punctuation(self):
        self.assertEqual(normalize_title("A国新规出台"), normalize_title("A 国 新规 出台！"))

    def test_cjk_text_retained(self):
        self.assertEqual(normalize_title("B市楼市回暖"), "b市楼市回暖")

    def test_different_stories_differ(self):
        self.assertNotEqual(normalize_title("A国新规出台"), normalize_title("B市楼市回暖"))


class DedupeTests(unittest.TestCase):
    def test_cross_outlet_scenario(self):
        items = [
            make_headline("A国新规出台", source="X"),
            make_headline("A 国 新规 出台！", source="Y"),
            make_headline("B市楼市回暖", source="Z"),
        ]
        merged = dedupe(items)
        self.assertEqual(len(merged), 2)
        self.assertEqual(merged[0].sources, frozenset({"X", "Y"}))
        self.assertEqual(merged[0].source_count, 2)
        self.assertEqual(merged[1].sources, frozenset({"Z"}))
        self.assertEqual(merged[1].source_count, 1)

        ranked = rank(merged, 5)
        self.assertEqual(ranked[0].title, "A国新规出台")
        self.assertEqual(ranked[1].title, "B市楼市回暖")

    def test_representative_is_first_inserted(self):
        first = make_headline("Big News", source="X", id="tech-X-0", url="https://x.example/1")
        second = make_headline("big news!", source="Y", id="tech-Y-3", url="https://y.example/9")
        merged = dedupe([first, second])[0]
        self.assertEqual(merged.title, "Big News")
        self.assertEqual(merged.url, "https://x.example/1")
        self.assertEqual(merged.id, "tech-X-0")

    def test_duplicate_source_does_not_inflate_count(self):
        merged = dedupe([
            make_headline("Same story", source="X"),
            make_headline("Same story.", source="X"),
        ])
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].source_count, 1)

    def test_most_recent_timestamp_wins(self):
        merged = dedupe([
            make_headline("Story", source="X", timestamp="2026-10-19T01:00:00.000Z"),
            make_headline("Story", source="Y", timestamp="2026-10-19T05:00:00.000Z"),
            make_headline("Story", source="Z", timestamp="2026-10-19T03:00:00.000Z"),
        ])
        self.assertEqual(merged[0].timestamp, "2026-10-19T05:00:00.000Z")

    def test_single_member_group(self):
        merged = dedupe([make_headline("Lonely", source="X")])
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].source_count, 1)
        self.assertEqual(merged[0].timestamp, NOW_ISO)

    def test_group_order_is_first_appearance(self):
        merged = dedupe([
            make_headline("one", source="X"),
            make_headline("two", source="X"),
            make_headline("ONE", source="Y"),
            make_headline("three", source="Z"),
        ])
        self.assertEqual([m.title for m in merged], ["one", "two", "three"])


if __name__ == "__main__":
    unittest.main()
