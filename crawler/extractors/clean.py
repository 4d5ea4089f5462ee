"""
Text cleanup applied to titles before they leave the crawler.
"""
from __future__ import annotations

import html
import re
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u200b-\u200f\u2028\u2029\ufeff]")
_WHITESPACE = re.compile(r"\s+")


def clean_title(raw: str) -> str:
    """
    Reduce a scraped title to plain single-line text.

    Markup is stripped rather than escaped; entity escaping belongs to
    whatever renders the snapshot.
    """
    if not raw:
        return ""
    text = html.unescape(raw)
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "lxml").get_text(" ")
    text = _CONTROL_CHARS.sub("", text)
    text = text.replace("<", "").replace(">", "")
    return _WHITESPACE.sub(" ", text).strip()


def is_absolute_url(url: str) -> bool:
    if not url:
        return False
    parts = urlsplit(url)
    return parts.scheme in {"http", "https"} and bool(parts.netloc)
