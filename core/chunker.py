#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
HtmlChunker - Structure-safe splitting of HTML documents for translation.

This module splits scraped article HTML into bounded-size fragments that
can be sent to the translator one at a time:
- Block-level closing tags (p, h1-h6, div, section, article) are the
  preferred boundaries
- Consecutive blocks are packed greedily up to the size limit
- Oversized blocks fall back to paragraph, sentence, whitespace and
  finally hard cuts, never inside a tag

Concatenating the fragments always reproduces the input exactly.

Usage:
    from core.chunker import HtmlChunker, chunk_html

    chunker = HtmlChunker(max_chunk_length=10000)
    fragments = chunker.create_chunks(article_html)

    # Or the functional shortcut
    fragments = chunk_html(article_html, 10000)
"""

import re
from typing import List

from config.constants import (
    BLOCK_TAGS,
    MAX_CHUNK_LENGTH,
    SPLIT_SEARCH_WINDOW,
    WHITESPACE_SEARCH_WINDOW,
)

BLOCK_CLOSE_PATTERN = re.compile(
    r"</(" + "|".join(BLOCK_TAGS) + r")>",
    re.IGNORECASE,
)

SENTENCE_ENDINGS = ".!?"


class HtmlChunker:
    """
    Splits HTML into translation-sized fragments at structurally safe points.

    Attributes:
        max_chunk_length: Target maximum characters per fragment. A fragment
            only exceeds it when it consists of a single tag longer than the
            limit.
        split_window: Look-back distance for paragraph/sentence boundaries.
        whitespace_window: Look-back distance for whitespace boundaries.

    Example:
        >>> chunker = HtmlChunker(max_chunk_length=40)
        >>> chunker.create_chunks("<p>First paragraph.</p><p>Second one.</p>")
        ['<p>First paragraph.</p>', '<p>Second one.</p>']
    """

    def __init__(
        self,
        max_chunk_length: int = MAX_CHUNK_LENGTH,
        split_window: int = SPLIT_SEARCH_WINDOW,
        whitespace_window: int = WHITESPACE_SEARCH_WINDOW,
    ):
        if max_chunk_length <= 0:
            raise ValueError("max_chunk_length must be positive")
        self.max_chunk_length = max_chunk_length
        self.split_window = split_window
        self.whitespace_window = whitespace_window

    def split_on_block_tags(self, html: str) -> List[str]:
        """
        Split HTML after every block-level closing tag.

        re.split() with a capturing group yields text pieces interleaved with
        the captured tag names; each piece gets its closing tag synthesized
        back from the name that follows it.

        Args:
            html: Document to split.

        Returns:
            Ordered pieces whose concatenation equals ``html``.
        """
        parts = BLOCK_CLOSE_PATTERN.split(html)
        pieces = []
        for i in range(0, len(parts), 2):
            piece = parts[i]
            if i + 1 < len(parts):
                piece += f"</{parts[i + 1]}>"
            if piece:
                pieces.append(piece)
        return pieces

    def pack_pieces(self, pieces: List[str]) -> List[str]:
        """
        Greedily pack consecutive pieces into fragments.

        A piece starts a new fragment when adding it would push the current
        one past ``max_chunk_length``. Single oversized pieces are left for
        split_oversized().
        """
        chunks = []
        current = ""
        for piece in pieces:
            if current and len(current) + len(piece) > self.max_chunk_length:
                chunks.append(current)
                current = piece
            else:
                current += piece
        if current:
            chunks.append(current)
        return chunks

    @staticmethod
    def _inside_tag(text: str, position: int) -> bool:
        """True if cutting before ``text[position]`` would bisect a tag."""
        last_open = text.rfind("<", 0, position)
        if last_open == -1:
            return False
        return last_open > text.rfind(">", 0, position)

    def find_safe_split_point(self, text: str) -> int:
        """
        Find where to cut ``text`` so the head fits the limit.

        Search order, scanning backward from the limit:
        1. Right after ``</p>`` (last ``split_window`` chars)
        2. Right after a sentence end followed by whitespace (same window)
        3. Right before whitespace (last ``whitespace_window`` chars)
        4. Hard cut at the limit, moved out of any tag it would bisect

        Returns:
            Index of the cut; ``len(text)`` when the text already fits.
        """
        limit = self.max_chunk_length
        if len(text) <= limit:
            return len(text)

        for i in range(limit, limit - self.split_window, -1):
            if i <= 0:
                break
            if text[i - 4:i].lower() == "</p>":
                return i
            if (text[i - 1] in SENTENCE_ENDINGS and text[i].isspace()
                    and not self._inside_tag(text, i)):
                return i

        for i in range(limit, limit - self.whitespace_window, -1):
            if i <= 0:
                break
            if text[i].isspace() and not self._inside_tag(text, i):
                return i

        if not self._inside_tag(text, limit):
            return limit

        tag_start = text.rfind("<", 0, limit)
        if tag_start > 0:
            return tag_start

        # The tag opens the fragment: keep it whole even past the limit
        tag_end = text.find(">", limit)
        return tag_end + 1 if tag_end != -1 else len(text)

    def split_oversized(self, chunk: str) -> List[str]:
        """Cut one oversized fragment into pieces at safe split points."""
        pieces = []
        remaining = chunk
        while remaining:
            cut = self.find_safe_split_point(remaining)
            pieces.append(remaining[:cut])
            remaining = remaining[cut:]
        return pieces

    def create_chunks(self, html: str) -> List[str]:
        """
        Split an HTML document into ordered fragments.

        Args:
            html: Full document.

        Returns:
            Non-empty list of fragments; ``"".join(result) == html``.
        """
        packed = self.pack_pieces(self.split_on_block_tags(html))

        final_chunks = []
        for chunk in packed:
            if len(chunk) > self.max_chunk_length:
                final_chunks.extend(self.split_oversized(chunk))
            else:
                final_chunks.append(chunk)

        return final_chunks if final_chunks else [html]


def chunk_html(html: str, max_chunk_length: int = MAX_CHUNK_LENGTH) -> List[str]:
    """Split ``html`` into fragments of at most ``max_chunk_length`` characters."""
    return HtmlChunker(max_chunk_length=max_chunk_length).create_chunks(html)
