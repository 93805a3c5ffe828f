#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Article import - fetch a web page and pull out its readable HTML.

Extraction is a best-effort heuristic: the first known article container
wins, otherwise every paragraph and heading on the page is collected.

Usage:
    from core.scraper import fetch_article

    content = await fetch_article("https://example.com/story")
"""

import html as html_lib
import re
from typing import List, Optional
from urllib.parse import urlparse

import httpx
from lxml import etree
from lxml import html as lxml_html

from config.constants import FETCH_MAX_REDIRECTS, FETCH_TIMEOUT_SECONDS

from config.logging_config import get_logger
logger = get_logger(__name__)


class ScrapeError(Exception):
    """Base exception for article import errors"""
    pass


class InvalidUrlError(ScrapeError):
    """URL is missing or not http(s)"""
    pass


class ArticleFetchError(ScrapeError):
    """The page could not be downloaded"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ArticleExtractionError(ScrapeError):
    """The page had no readable content"""
    pass


# Mimic a desktop browser; some sites refuse obvious bots
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Referer": "https://www.google.com/",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}

NOISE_TAGS = ("script", "style", "noscript", "iframe", "svg", "form", "button")
LAYOUT_TAGS = ("nav", "footer", "header")
FALLBACK_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6")


def _has_class(name: str) -> str:
    return f"//*[contains(concat(' ', normalize-space(@class), ' '), ' {name} ')]"


# Article containers in priority order
CONTENT_SELECTORS = [
    ("article", "//article"),
    (".article", _has_class("article")),
    (".post", _has_class("post")),
    (".content", _has_class("content")),
    ("main", "//main"),
    ("#main", "//*[@id='main']"),
    (".main", _has_class("main")),
    (".story", _has_class("story")),
    (".story-body", _has_class("story-body")),
    (".entry-content", _has_class("entry-content")),
    (".post-content", _has_class("post-content")),
    ("[itemprop=articleBody]", "//*[@itemprop='articleBody']"),
    (".news-item", _has_class("news-item")),
]

WHITESPACE_PATTERN = re.compile(r"\s+")


def validate_url(url: Optional[str]) -> str:
    """
    Check that ``url`` is an absolute http(s) URL.

    Raises:
        InvalidUrlError: Otherwise.
    """
    if not url or not url.strip():
        raise InvalidUrlError("URL is required")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrlError(f"Invalid URL: {url}")
    return url


def _drop(document, tags) -> None:
    xpath = "|".join(f"//{tag}" for tag in tags)
    for element in document.xpath(xpath):
        if element.getparent() is not None:
            element.drop_tree()


def _inner_html(element) -> str:
    parts: List[str] = []
    if element.text:
        parts.append(html_lib.escape(element.text, quote=False))
    for child in element:
        parts.append(etree.tostring(child, encoding="unicode", method="html"))
    return "".join(parts)


def extract_content(page: str) -> str:
    """
    Extract readable article HTML from a full page.

    Args:
        page: Page HTML.

    Returns:
        Article HTML with whitespace collapsed.

    Raises:
        ArticleExtractionError: When nothing readable is found.
    """
    if not page or not page.strip():
        raise ArticleExtractionError("Page is empty")

    try:
        document = lxml_html.document_fromstring(page)
    except (etree.ParserError, ValueError) as e:
        raise ArticleExtractionError(f"Could not parse page: {e}") from e

    titles = document.xpath("//title/text()")
    if titles:
        logger.debug(f"Page title: {titles[0].strip()}")

    _drop(document, NOISE_TAGS)

    content = ""
    for name, xpath in CONTENT_SELECTORS:
        matches = document.xpath(xpath)
        if matches:
            logger.info(f"Found content with selector: {name}")
            content = _inner_html(matches[0])
            break

    if not content.strip():
        _drop(document, LAYOUT_TAGS)
        elements = document.xpath("|".join(f"//{tag}" for tag in FALLBACK_TAGS))
        content = "\n".join(
            etree.tostring(el, encoding="unicode", method="html", with_tail=False)
            for el in elements
        )

    content = WHITESPACE_PATTERN.sub(" ", content).strip()
    if not content:
        raise ArticleExtractionError("Could not extract content from the page")
    return content


async def fetch_article(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> str:
    """
    Download ``url`` and extract its article HTML.

    Args:
        url: Page to import.
        client: Optional shared client (a temporary one is created otherwise).
        timeout: Request timeout in seconds.

    Raises:
        InvalidUrlError: Bad URL.
        ArticleFetchError: Network failure or non-2xx response.
        ArticleExtractionError: No readable content.
    """
    url = validate_url(url)
    logger.info(f"Fetching article from: {url}")

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            max_redirects=FETCH_MAX_REDIRECTS,
        )

    try:
        response = await client.get(url, headers=BROWSER_HEADERS)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.error(f"Error fetching article: HTTP {status}")
        raise ArticleFetchError(f"HTTP {status} from {url}", status_code=status) from e
    except httpx.HTTPError as e:
        logger.error(f"Error fetching article: {e}")
        raise ArticleFetchError(str(e) or e.__class__.__name__) from e
    finally:
        if owns_client:
            await client.aclose()

    return extract_content(response.text)
