"""ANSI-aware width helpers for the selector screen.

Rows carry color codes, so clipping must count display cells rather than
string length and must keep escape sequences intact.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8

RESET = "\033[0m"
REVERSE = "\033[7m"
QUERY_STYLE = "\033[1;38;5;81m"
HINT_STYLE = "\033[2;38;5;250m"
MATCH_STYLE = "\033[1;38;5;229m"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Escape sequences are kept and do not count toward the width; tabs are
    expanded to spaces.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    while i < len(text) and col < max_cols:
        match = ANSI_ESCAPE_RE.match(text, i) if text[i] == "\x1b" else None
        if match:
            out.append(match.group(0))
            i = match.end()
            continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1
    return "".join(out)


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text
    # Keep reverse video active even when the text contains internal resets.
    return REVERSE + text.replace(RESET, "\033[0;7m") + RESET


def highlight_span(text: str, span: tuple[int, int], style: str = MATCH_STYLE) -> str:
    """Wrap ``text[start:end]`` in ``style``."""
    start, end = span
    start = max(0, min(start, len(text)))
    end = max(start, min(end, len(text)))
    if start == end:
        return text
    return f"{text[:start]}{style}{text[start:end]}{RESET}{text[end:]}"
