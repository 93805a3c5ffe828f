"""
HTML cleanup for translated fragments.

The translator sometimes echoes tag names into the text it returns
("<p>p Hello world p</p>"). These passes strip such echoes with regular
expressions. It is a heuristic, not a parser: an ordinary word that equals a
tag name can be removed when it stands alone between whitespace or
punctuation (e.g. "section" in prose).
"""

import re
from typing import Iterable, Optional

ECHO_TAGS = ("div", "p", "span", "a", "h1", "h2", "h3", "h4", "h5", "h6",
             "ul", "li", "section", "article")

# "a" is far more often the English article than an echoed tag
STANDALONE_TAGS = tuple(tag for tag in ECHO_TAGS if tag != "a")

_TAG_ALTERNATION = "|".join(ECHO_TAGS)

# <div class="x">  div Hello  ->  <div class="x">Hello
OPEN_ECHO_PATTERN = re.compile(
    rf"<({_TAG_ALTERNATION})\b([^>]*)>\s*\1\s+",
    re.IGNORECASE,
)

# Hello world p</p>  ->  Hello world</p>
CLOSE_ECHO_PATTERN = re.compile(
    rf"\s+({_TAG_ALTERNATION})\s*</\1>",
    re.IGNORECASE,
)

# <li>li</li>  ->  <li></li>
BARE_ECHO_PATTERN = re.compile(
    rf">\s*(?:{_TAG_ALTERNATION})\s*<",
    re.IGNORECASE,
)

STANDALONE_PATTERN = re.compile(
    r"(\s|^)(?:" + "|".join(STANDALONE_TAGS) + r")(?=[\s.,:;?!]|$)"
)

TAG_SPLIT_PATTERN = re.compile(r"(<[^>]*>)")
WHITESPACE_RUN_PATTERN = re.compile(r"\s{2,}")


def _strip_standalone_words(html: str) -> str:
    """Remove free-standing tag words from text nodes, leaving markup alone."""
    parts = TAG_SPLIT_PATTERN.split(html)
    for i, part in enumerate(parts):
        if part and not part.startswith("<"):
            parts[i] = STANDALONE_PATTERN.sub(r"\1", part)
    return "".join(parts)


def clean_translated_html(html: Optional[str]) -> str:
    """
    Strip tag-name artifacts from translated HTML.

    Args:
        html: Raw translator output (``None`` is treated as empty).

    Returns:
        Cleaned HTML with runs of whitespace collapsed to one space.

    Example:
        >>> clean_translated_html("<p>p Hello world p</p>")
        '<p>Hello world</p>'
    """
    if not html:
        return ""

    cleaned = OPEN_ECHO_PATTERN.sub(r"<\1\2>", html)
    cleaned = CLOSE_ECHO_PATTERN.sub(r"</\1>", cleaned)
    cleaned = BARE_ECHO_PATTERN.sub("><", cleaned)
    cleaned = _strip_standalone_words(cleaned)
    cleaned = WHITESPACE_RUN_PATTERN.sub(" ", cleaned)
    return cleaned


def join_chunks(chunks: Iterable[str]) -> str:
    """Join translated fragments in order and run the final cleanup."""
    return clean_translated_html("".join(chunks))
