#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

text_utils.py

Text helpers for manifest content.

Storyline stores most text runs as plain strings, but rich-text runs and
question prompts are often HTML fragments (either CDATA or escaped markup).
The extractor flattens those to plain text before anything downstream looks
at lengths or compares option text.
"""

from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup

_TAG_PATTERN = re.compile(r"<\s*(/?)\s*([a-zA-Z][a-zA-Z0-9]*)\b[^<>]*?(/?)\s*>")
_BLOCK_TAGS = ["p", "div", "li", "h1", "h2", "h3", "h4", "h5", "h6"]

# Tags Storyline rich-text runs actually emit
HTML_TAGS = frozenset({
    "a", "b", "big", "blockquote", "br", "code", "div", "em", "font", "h1", "h2",
    "h3", "h4", "h5", "h6", "hr", "i", "img", "li", "ol", "p", "pre", "s", "small",
    "span", "strike", "strong", "sub", "sup", "table", "tbody", "td", "th", "thead",
    "tr", "u", "ul", "wbr",
})
VOID_TAGS = frozenset({"br", "hr", "img", "wbr"})


def looks_like_markup(text: str) -> bool:
    """
    True when the string is an HTML fragment rather than text that mentions tags.

    Every tag must be a known HTML tag and every non-void tag must be closed,
    so literal text such as "<p>" or "Press <Enter> key" is left alone.
    """
    if not text or "<" not in text:
        return False

    tags = _TAG_PATTERN.findall(text)
    if not tags:
        return False

    open_counts = {}
    for closing, name, self_closing in tags:
        name = name.lower()
        if name not in HTML_TAGS:
            return False
        if name in VOID_TAGS or self_closing:
            continue
        open_counts[name] = open_counts.get(name, 0) + (-1 if closing else 1)

    return all(count == 0 for count in open_counts.values())


def clean_text(text: Optional[str]) -> str:
    """
    Flatten an HTML fragment to plain text.

    Block-level breaks become single newlines; surrounding whitespace is
    trimmed. Anything looks_like_markup() rejects passes through with only
    the trim applied.

    Example:
        >>> clean_text("<p>Hello <b>world</b></p>")
        'Hello world'
    """
    if not text:
        return ""

    if not looks_like_markup(text):
        return text.strip()

    soup = BeautifulSoup(text, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(_BLOCK_TAGS):
        block.append("\n")

    lines = [line.strip() for line in soup.get_text().splitlines()]
    return "\n".join(line for line in lines if line)


def sanitize_filename(name: str) -> str:
    """Sanitize a filename for file system use."""
    # Remove/replace invalid characters
    name = re.sub(r'[<>:"/\\|?*]', '', name)
    # Replace spaces with hyphens
    name = re.sub(r'\s+', '-', name)
    # Remove multiple hyphens
    name = re.sub(r'-+', '-', name)
    # Trim hyphens from ends
    name = name.strip('-')
    # Limit length
    if len(name) > 100:
        name = name[:100]
    return name or "untitled"
