"""Tests for extractor module."""
from tote.extractor import extract, first_match, meta_property, parse_html

from tests.conftest import ARTICLE_HTML, ARTICLE_URL, BARE_HTML


def _head(*tags: str) -> str:
    return "<html><head>" + "".join(tags) + "</head><body></body></html>"


class TestTitle:
    def test_og_title_wins_over_title_element(self):
        meta = extract(ARTICLE_HTML, ARTICLE_URL)
        assert meta.title == "Python Tips"

    def test_twitter_title_when_no_og(self):
        html = _head('<meta property="twitter:title" content="Tweet Title">', "<title>Doc</title>")
        assert extract(html, "https://example.com/").title == "Tweet Title"

    def test_twitter_title_by_name(self):
        html = _head('<meta name="twitter:title" content="Card Title">', "<title>Doc</title>")
        assert extract(html, "https://example.com/").title == "Card Title"

    def test_title_element(self):
        html = _head("<title>\n   Just a Title \n</title>")
        assert extract(html, "https://example.com/").title == "Just a Title"

    def test_empty_og_title_falls_through(self):
        html = _head('<meta property="og:title" content="   ">', "<title>Doc</title>")
        assert extract(html, "https://example.com/").title == "Doc"

    def test_host_when_no_title_sources(self):
        assert extract(BARE_HTML, "https://news.example.org/story/1").title == "news.example.org"

    def test_unknown_when_url_unparseable(self):
        assert extract(BARE_HTML, "not a url").title == "Unknown"

    def test_ipv6_host_as_title_and_icon(self):
        meta = extract(BARE_HTML, "http://[::1]:8080/x")
        assert meta.title == "[::1]"
        assert meta.icon == "http://[::1]/favicon.ico"


class TestDescription:
    def test_og_description_first(self):
        meta = extract(ARTICLE_HTML, ARTICLE_URL)
        assert meta.description == "Ten tips for cleaner code."

    def test_twitter_description(self):
        html = _head(
            '<meta name="twitter:description" content="From the card">',
            '<meta name="description" content="Plain">',
        )
        assert extract(html, "https://example.com/").description == "From the card"

    def test_meta_description(self):
        html = _head('<meta name="description" content="  Plain  ">')
        assert extract(html, "https://example.com/").description == "Plain"

    def test_absent(self):
        assert extract(BARE_HTML, "https://example.com/").description is None


class TestImage:
    def test_og_image_resolved(self):
        meta = extract(ARTICLE_HTML, ARTICLE_URL)
        assert meta.image == "https://example.com/static/cover.webp"

    def test_twitter_image_absolute(self):
        html = _head('<meta name="twitter:image" content="https://cdn.example.com/card.png">')
        assert extract(html, "https://example.com/").image == "https://cdn.example.com/card.png"

    def test_absent(self):
        assert extract(BARE_HTML, "https://example.com/").image is None

    def test_relative_dropped_when_url_unparseable(self):
        html = _head('<meta property="og:image" content="/cover.png">')
        assert extract(html, "not a url").image is None


class TestIcon:
    def test_apple_touch_icon_first(self):
        meta = extract(ARTICLE_HTML, ARTICLE_URL)
        assert meta.icon == "https://example.com/img/logo.svg?v=2"

    def test_icon_link(self):
        html = _head('<link rel="icon" href="/favicon.png">')
        assert extract(html, "https://example.com/page").icon == "https://example.com/favicon.png"

    def test_shortcut_icon(self):
        html = _head('<link rel="shortcut icon" href="static/fav.ico">')
        assert extract(html, "https://example.com/blog/").icon == "https://example.com/blog/static/fav.ico"

    def test_icon_preferred_over_shortcut_icon(self):
        html = _head(
            '<link rel="shortcut icon" href="/shortcut.ico">',
            '<link rel="icon" href="/icon.png">',
        )
        assert extract(html, "https://example.com/").icon == "https://example.com/icon.png"

    def test_rel_match_is_case_insensitive(self):
        html = _head('<link rel="Icon" href="/favicon.png">')
        assert extract(html, "https://example.com/").icon == "https://example.com/favicon.png"

    def test_favicon_fallback(self):
        assert extract(BARE_HTML, "https://site.org/a/b").icon == "https://site.org/favicon.ico"

    def test_absent_when_url_unparseable(self):
        assert extract(BARE_HTML, "not a url").icon is None

    def test_absolute_icon_kept_when_url_unparseable(self):
        html = _head('<link rel="icon" href="https://cdn.example.com/i.png">')
        assert extract(html, "not a url").icon == "https://cdn.example.com/i.png"


class TestRobustness:
    def test_malformed_markup(self):
        html = '<html><head><title>Broken<meta property="og:title" content=<<<</head'
        meta = extract(html, "https://example.com/")
        assert meta.title

    def test_empty_document(self):
        meta = extract("", "https://example.com/x")
        assert meta.title == "example.com"
        assert meta.description is None
        assert meta.image is None
        assert meta.icon == "https://example.com/favicon.ico"

    def test_failing_rule_is_skipped(self):
        def broken(soup):
            raise RuntimeError("bad selector")

        soup = parse_html(_head('<meta property="og:title" content="Still here">'))
        assert first_match(soup, (broken, meta_property("og:title"))) == "Still here"

    def test_deterministic(self):
        assert extract(ARTICLE_HTML, ARTICLE_URL) == extract(ARTICLE_HTML, ARTICLE_URL)
