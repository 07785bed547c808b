"""Resolve a free-text search request into a URL to open.

``find_url`` applies an ordered list of rules and returns the first hit:

1. literal URL: the whole term is a URL or bare domain ("github.com/foo")
2. known site: the term starts with a site name ("google weather",
   "在知乎搜索 python", "search youtube cats")
3. domain word: some word in the term looks like a domain ("open example.org")

Search templates carry a ``{query}`` placeholder that is filled with the
URL-encoded query.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

QUERY_PLACEHOLDER = "{query}"

DEFAULT_SEARCH_URL = "https://www.bing.com/search?q={query}"

_DOMAIN = r"[a-zA-Z0-9][-a-zA-Z0-9]*(?:\.[a-zA-Z0-9][-a-zA-Z0-9]*)+"
_LITERAL_URL = re.compile(rf"^(?:https?://)?{_DOMAIN}(?::\d+)?(?:[/?#]\S*)?$")
_BARE_DOMAIN = re.compile(rf"^{_DOMAIN}$")
_DOMAIN_WORD = re.compile(
    r"\.(com|cn|net|org|edu|gov|io|co|me|tv|app|xyz|site|online|shop|store|tech|ai)$",
    re.IGNORECASE,
)

SITE_SEARCH_URLS: dict[str, str] = {
    "百度": "https://www.baidu.com/s?wd={query}",
    "baidu": "https://www.baidu.com/s?wd={query}",
    "谷歌": "https://www.google.com/search?q={query}",
    "google": "https://www.google.com/search?q={query}",
    "必应": "https://www.bing.com/search?q={query}",
    "bing": "https://www.bing.com/search?q={query}",
    "淘宝": "https://s.taobao.com/search?q={query}",
    "taobao": "https://s.taobao.com/search?q={query}",
    "京东": "https://search.jd.com/Search?keyword={query}",
    "jd": "https://search.jd.com/Search?keyword={query}",
    "知乎": "https://www.zhihu.com/search?type=content&q={query}",
    "zhihu": "https://www.zhihu.com/search?type=content&q={query}",
    "哔哩哔哩": "https://search.bilibili.com/all?keyword={query}",
    "bilibili": "https://search.bilibili.com/all?keyword={query}",
    "b站": "https://search.bilibili.com/all?keyword={query}",
    "微博": "https://s.weibo.com/weibo?q={query}",
    "weibo": "https://s.weibo.com/weibo?q={query}",
    "抖音": "https://www.douyin.com/search/{query}",
    "douyin": "https://www.douyin.com/search/{query}",
    "小红书": "https://www.xiaohongshu.com/search_result?keyword={query}",
    "xiaohongshu": "https://www.xiaohongshu.com/search_result?keyword={query}",
    "天猫": "https://list.tmall.com/search_product.htm?q={query}",
    "tmall": "https://list.tmall.com/search_product.htm?q={query}",
    "亚马逊": "https://www.amazon.cn/s?k={query}",
    "amazon": "https://www.amazon.com/s?k={query}",
    "twitter": "https://twitter.com/search?q={query}",
    "推特": "https://twitter.com/search?q={query}",
    "youtube": "https://www.youtube.com/results?search_query={query}",
    "油管": "https://www.youtube.com/results?search_query={query}",
    "facebook": "https://www.facebook.com/search/top?q={query}",
    "脸书": "https://www.facebook.com/search/top?q={query}",
    "instagram": "https://www.instagram.com/explore/tags/{query}",
    "ins": "https://www.instagram.com/explore/tags/{query}",
    "微信": "https://weixin.sogou.com/weixin?type=2&query={query}",
}


def fill_template(template: str, query: str) -> str:
    """Substitute the URL-encoded query into a ``{query}`` template."""
    return template.replace(QUERY_PLACEHOLDER, quote(query, safe=""))


def ensure_scheme(url: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return "https://" + url


def _literal_url(term: str) -> Optional[str]:
    if _LITERAL_URL.match(term):
        return ensure_scheme(term)
    return None


def _site_prefix(term: str) -> Optional[str]:
    lowered = term.lower()
    for site, template in SITE_SEARCH_URLS.items():
        site = site.lower()
        for prefix in (f"{site} ", f"在{site}上搜索", f"在{site}搜索", f"search {site} "):
            if lowered.startswith(prefix):
                query = term[len(prefix):].strip() or term
                return fill_template(template, query)
    return None


def _domain_word(term: str) -> Optional[str]:
    for word in term.split():
        if _DOMAIN_WORD.search(word):
            return ensure_scheme(word)
    return None


URL_RULES: list[tuple[str, Callable[[str], Optional[str]]]] = [
    ("literal_url", _literal_url),
    ("site_prefix", _site_prefix),
    ("domain_word", _domain_word),
]


def find_url(search_term: str) -> Optional[str]:
    """Infer a URL from a search term.

    Returns:
        The URL produced by the first matching rule, or None
    """
    term = search_term.strip()
    if not term:
        return None
    for rule_name, rule in URL_RULES:
        url = rule(term)
        if url:
            logger.info("Resolved %r to %s via %s", search_term, url, rule_name)
            return url
    logger.info("No URL inferred for %r", search_term)
    return None


def _apply_search_term(url: str, search_term: str) -> str:
    """Attach the search term to an explicit, non-template URL."""
    if not url.startswith(("http://", "https://")) and _BARE_DOMAIN.match(url):
        url = "https://" + url

    is_complete_site = url.startswith("http") and not any(
        marker in url for marker in ("search", "query", "q=")
    )
    if is_complete_site:
        return url

    if not any(marker in url for marker in ("?q=", "&q=", "search=", "query=")):
        url += "&q=" if "?" in url else "?q="
    return url + quote(search_term, safe="")


def build_search_url(
    search_term: str,
    url: Optional[str] = None,
    auto_find_url: bool = True,
    default_search_url: str = DEFAULT_SEARCH_URL,
) -> str:
    """Work out the URL to open for a browser search request.

    Args:
        search_term: What the user asked to search for
        url: Explicit URL or ``{query}`` template; wins over inference
        auto_find_url: Try ``find_url`` when no explicit URL is given
        default_search_url: Template used when nothing else applies

    Returns:
        The URL to open
    """
    if url:
        if QUERY_PLACEHOLDER in url:
            return fill_template(url, search_term)
        return _apply_search_term(url, search_term)

    if auto_find_url:
        found = find_url(search_term)
        if found:
            return found

    if QUERY_PLACEHOLDER in default_search_url:
        return fill_template(default_search_url, search_term)
    return _apply_search_term(default_search_url, search_term)


__all__ = [
    "DEFAULT_SEARCH_URL",
    "SITE_SEARCH_URLS",
    "URL_RULES",
    "build_search_url",
    "ensure_scheme",
    "fill_template",
    "find_url",
]
