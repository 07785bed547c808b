"""Tests for search-term to URL resolution."""

import pytest

from weather_mcp.urlfinder import (
    DEFAULT_SEARCH_URL,
    URL_RULES,
    build_search_url,
    ensure_scheme,
    fill_template,
    find_url,
)


class TestFindUrl:
    """Tests for URL inference from free text."""

    def test_rule_order(self):
        assert [name for name, _ in URL_RULES] == ["literal_url", "site_prefix", "domain_word"]

    @pytest.mark.parametrize(
        "term,expected",
        [
            ("github.com", "https://github.com"),
            ("github.com/anthropics", "https://github.com/anthropics"),
            ("http://localhost.test:8080/x", "http://localhost.test:8080/x"),
            ("https://example.org/a?b=c", "https://example.org/a?b=c"),
        ],
    )
    def test_literal_url(self, term, expected):
        assert find_url(term) == expected

    @pytest.mark.parametrize(
        "term,expected",
        [
            ("google weather today", "https://www.google.com/search?q=weather%20today"),
            ("YouTube cats", "https://www.youtube.com/results?search_query=cats"),
            ("search bilibili anime", "https://search.bilibili.com/all?keyword=anime"),
            ("在知乎搜索 python", "https://www.zhihu.com/search?type=content&q=python"),
            ("在百度上搜索天气", "https://www.baidu.com/s?wd=%E5%A4%A9%E6%B0%94"),
            ("douyin dance", "https://www.douyin.com/search/dance"),
            ("instagram sunset", "https://www.instagram.com/explore/tags/sunset"),
        ],
    )
    def test_site_prefix(self, term, expected):
        assert find_url(term) == expected

    def test_site_prefix_query_is_encoded(self):
        assert find_url("bing a&b=c") == "https://www.bing.com/search?q=a%26b%3Dc"

    def test_domain_word(self):
        assert find_url("please open example.org now") == "https://example.org"

    def test_domain_word_keeps_scheme(self):
        assert find_url("visit http://news.example.com") == "http://news.example.com"

    @pytest.mark.parametrize("term", ["", "   ", "weather in paris", "google"])
    def test_no_match(self, term):
        assert find_url(term) is None


class TestBuildSearchUrl:
    """Tests for the final URL handed to the browser."""

    def test_default_search_engine(self):
        assert build_search_url("weather in paris") == (
            "https://www.bing.com/search?q=weather%20in%20paris"
        )

    def test_inference_disabled(self):
        url = build_search_url("github.com", auto_find_url=False)
        assert url == "https://www.bing.com/search?q=github.com"

    def test_inferred_url_wins_over_default(self):
        assert build_search_url("github.com") == "https://github.com"

    def test_explicit_template(self):
        url = build_search_url("rust", url="https://duckduckgo.com/?q={query}")
        assert url == "https://duckduckgo.com/?q=rust"

    def test_explicit_complete_site_opened_as_is(self):
        assert build_search_url("ignored", url="https://example.com/page") == (
            "https://example.com/page"
        )

    def test_explicit_bare_domain_gets_scheme(self):
        assert build_search_url("ignored", url="example.com") == "https://example.com"

    def test_explicit_search_page_gets_query(self):
        url = build_search_url("a b", url="https://www.google.com/search")
        assert url == "https://www.google.com/search?q=a%20b"

    def test_explicit_search_page_with_params(self):
        url = build_search_url("x", url="https://site.test/search?lang=en")
        assert url == "https://site.test/search?lang=en&q=x"

    def test_explicit_query_marker_not_duplicated(self):
        url = build_search_url("x", url="https://site.test/find?query=")
        assert url == "https://site.test/find?query=x"

    def test_explicit_url_wins_over_inference(self):
        url = build_search_url("google cats", url="https://www.bing.com/search?q=")
        assert url == "https://www.bing.com/search?q=google%20cats"

    def test_custom_default(self):
        url = build_search_url(
            "x", auto_find_url=False, default_search_url="https://search.test/?s={query}"
        )
        assert url == "https://search.test/?s=x"


class TestHelpers:
    def test_fill_template_encodes_everything(self):
        assert fill_template("https://a.test/?q={query}", "a/b c") == "https://a.test/?q=a%2Fb%20c"

    def test_ensure_scheme(self):
        assert ensure_scheme("example.com") == "https://example.com"
        assert ensure_scheme("http://example.com") == "http://example.com"

    def test_default_is_template(self):
        assert "{query}" in DEFAULT_SEARCH_URL
