import unittest

from headline_feed.cache import MemoryCache
from headline_feed.core import ColumnBuilder
from headline_feed.models import Board, Column, RssFeed
from headline_feed.newsletter import (
    DEFAULT_SUBTITLE,
    DEFAULT_TITLE,
    NewsletterService,
    build_newsletter,
    extract_json_object,
)
from headline_feed.sources import CategorySources, SourceRegistry
from headline_feed.summarizers import NullSummarizer

from .helpers import NOW, FakeFetch, make_headline, rss_document


class ScriptedSummarizer:
    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    def summarize(self, prompt, max_tokens=300):
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else ""


def board():
    cards = tuple(make_headline(f"科技新闻标题第{i}条，内容较长用于截断测试", source="X", id=f"tech-X-{i}") for i in range(4))
    return Board(date="2026-10-19", columns=(Column(key="tech", category="科技", cards=cards),))


class ExtractJsonTests(unittest.TestCase):
    def test_fenced(self):
        self.assertEqual(extract_json_object('```json\n{"title": "t"}\n```'), {"title": "t"})

    def test_embedded(self):
        self.assertEqual(extract_json_object('Sure! {"title": "t"} hope it helps'), {"title": "t"})

    def test_garbage(self):
        self.assertIsNone(extract_json_object("no json here"))
        self.assertIsNone(extract_json_object(""))
        self.assertIsNone(extract_json_object("[1, 2]"))


class BuildNewsletterTests(unittest.TestCase):
    def test_uses_llm_answers(self):
        summarizer = ScriptedSummarizer([
            '{"title": "芯片", "summary": "概要", "description": "说明"}',
            '{"title": "整体", "subtitle": "副标题"}',
        ])
        letter = build_newsletter(board(), summarizer, key="2026-10-19-AM", max_workers=1)
        self.assertEqual(letter.id, "daily-2026-10-19-AM")
        self.assertEqual((letter.title, letter.subtitle), ("整体", "副标题"))
        trend = letter.trends[0]
        self.assertEqual((trend.id, trend.title, trend.category), ("tech", "芯片", "科技"))
        self.assertEqual(len(trend.headlines), 4)

    def test_falls_back_when_llm_unavailable(self):
        letter = build_newsletter(board(), NullSummarizer(), max_workers=1)
        trend = letter.trends[0]
        self.assertEqual(letter.title, DEFAULT_TITLE)
        self.assertEqual(len(trend.title), 20)
        self.assertTrue(trend.summary.startswith("科技领域热点："))
        self.assertLessEqual(len(trend.summary), 40)
        self.assertEqual(trend.description.count("\n- "), 3)

    def test_raising_summarizer_degrades_to_fallback(self):
        class Broken:
            def summarize(self, prompt, max_tokens=300):
                raise TimeoutError("request timed out")

        letter = build_newsletter(board(), Broken(), max_workers=2)
        self.assertEqual((letter.title, letter.subtitle), (DEFAULT_TITLE, DEFAULT_SUBTITLE))
        self.assertTrue(letter.trends[0].summary.startswith("科技领域热点："))

    def test_to_dict(self):
        payload = build_newsletter(board(), NullSummarizer(), max_workers=1).to_dict()
        self.assertEqual(payload["trends"][0]["headlines"][0]["id"], "tech-X-0")


class NewsletterServiceTests(unittest.IsolatedAsyncioTestCase):
    async def test_cached_per_half_day(self):
        feed = RssFeed("X", "https://x.example/rss")
        fake = FakeFetch({feed.url: rss_document([("T", "https://x.example/1", None)])})
        builder = ColumnBuilder(SourceRegistry([CategorySources("tech", "科技", (feed,))]), fetch=fake)
        service = NewsletterService(builder, NullSummarizer(), MemoryCache())

        first = await service.get_newsletter(now=NOW)
        second = await service.get_newsletter(now=NOW)
        self.assertIs(first, second)
        self.assertEqual(first.date, "2026-10-19-AM")
        self.assertEqual(len(fake.calls), 1)


if __name__ == "__main__":
    unittest.main()
