import unittest

from headline_feed.extraction import extract_content, fetch_content

from .helpers import FakeFetch

LONG = "Officials announced the new policy on Monday. " * 10


class ExtractContentTests(unittest.TestCase):
    def test_article_selector_wins(self):
        html = f"""<html><head><title>Page</title><meta name="description" content="desc"></head>
        <body><nav>menu</nav><div class="article-body">{LONG}</div></body></html>"""
        out = extract_content(html)
        self.assertEqual(out.selector_used, "article")
        self.assertTrue(out.content.startswith("Officials announced"))
        self.assertEqual(out.title, "Page")
        self.assertEqual(out.meta_description, "desc")

    def test_general_selector_when_no_article_body(self):
        out = extract_content(f"<html><body><article>{LONG}</article></body></html>")
        self.assertEqual(out.selector_used, "general")

    def test_short_page_keeps_longest(self):
        html = '<html><head><meta property="og:title" content="OG"></head><body><p>Short text.</p></body></html>'
        out = extract_content(html)
        self.assertEqual(out.content, "Short text.")
        self.assertEqual(out.title, "OG")

    def test_scripts_ignored_and_clamped(self):
        html = f"<html><body><script>var x = 1;</script><article>{LONG * 20}</article></body></html>"
        out = extract_content(html)
        self.assertNotIn("var x", out.content)
        self.assertEqual(len(out.content), 4000)

    def test_custom_strategy_chain_short_circuits(self):
        calls = []

        def first(soup):
            calls.append("first")
            return "x" * 150

        def second(soup):
            calls.append("second")
            return "y" * 500

        out = extract_content("<html></html>", strategies=[("first", first), ("second", second)])
        self.assertEqual(out.selector_used, "first")
        self.assertEqual(calls, ["first"])


class FetchContentTests(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_then_extract(self):
        fake = FakeFetch({"https://example.com/a": f"<article>{LONG}</article>"})
        out = await fetch_content("https://example.com/a", fetch=fake)
        self.assertGreater(len(out.content), 100)


if __name__ == "__main__":
    unittest.main()
