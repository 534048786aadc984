"""
Read schedule text from a pasted-text file, standard input, or a portal page
saved from the browser ("Save As -> Webpage, HTML only").

Saved pages are flattened to one line per text node, which is what the
portal's table cells look like when copy-pasted.
"""
from __future__ import annotations

import sys
from pathlib import Path

from bs4 import BeautifulSoup  # type: ignore[import]

HTML_SUFFIXES = {".html", ".htm"}


def html_to_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "head"]):
        tag.decompose()
    return soup.get_text(separator="\n", strip=True)


def read_source_text(path: str | Path) -> str:
    """Return the text of `path` ('-' for stdin); HTML files are flattened first."""
    if str(path) == "-":
        return sys.stdin.read()
    p = Path(path)
    if not p.exists():
        raise ValueError(f"Input file not found: {p}")
    text = p.read_text(encoding="utf-8", errors="replace")
    if p.suffix.lower() in HTML_SUFFIXES:
        return html_to_text(text)
    return text
