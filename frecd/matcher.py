"""Query matching and ranking over visited directories.

Every path is classified into one match tier (exact basename, contiguous
substring, ordered subsequence). Tier always wins over frecency; frecency only
orders paths within a tier, and path text breaks the remaining ties.
"""

from __future__ import annotations

import enum
import os
from collections.abc import Iterable
from dataclasses import dataclass


class MatchKind(enum.IntEnum):
    """Match quality tier; lower values rank first."""

    EXACT = 0
    SUBSTRING = 1
    SUBSEQUENCE = 2


@dataclass(frozen=True)
class MatchCandidate:
    path: str
    score: float
    kind: MatchKind
    span: tuple[int, int]

    def sort_key(self) -> tuple[int, float, str]:
        return (int(self.kind), -self.score, self.path)


def basename(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return path
    return os.path.basename(stripped)


def basename_span(path: str) -> tuple[int, int]:
    stripped = path.rstrip("/")
    name = basename(path)
    end = len(stripped) if stripped else len(path)
    return (end - len(name), end)


def _fold_with_offsets(text: str) -> tuple[str, list[int]]:
    """Casefold ``text`` and map each folded character back to its source index.

    Folding can lengthen a string (``ß`` becomes ``ss``), so spans found in the
    folded text are translated through this map before being reported.
    """
    parts: list[str] = []
    offsets: list[int] = []
    for idx, ch in enumerate(text):
        folded = ch.casefold()
        parts.append(folded)
        offsets.extend([idx] * len(folded))
    return "".join(parts), offsets


def substring_span(query: str, candidate: str) -> tuple[int, int] | None:
    needle = query.casefold()
    if not needle:
        return (0, 0)
    folded, offsets = _fold_with_offsets(candidate)
    idx = folded.find(needle)
    if idx < 0:
        return None
    return (offsets[idx], offsets[idx + len(needle) - 1] + 1)


def subsequence_span(query: str, candidate: str) -> tuple[int, int] | None:
    if not query:
        return (0, 0)
    folded, offsets = _fold_with_offsets(candidate)
    first = -1
    prev_idx = -1
    for needle in query.casefold():
        idx = folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if first < 0:
            first = idx
        prev_idx = idx
    return (offsets[first], offsets[prev_idx] + 1)


def match_path(query: str, path: str) -> tuple[MatchKind, tuple[int, int]] | None:
    """Classify ``path`` against ``query``, returning its best tier and span.

    Returns ``None`` when no tier accepts the path.
    """
    if not query:
        return MatchKind.SUBSTRING, (0, 0)
    if basename(path) == query:
        return MatchKind.EXACT, basename_span(path)
    span = substring_span(query, path)
    if span is not None:
        return MatchKind.SUBSTRING, span
    span = subsequence_span(query, path)
    if span is not None:
        return MatchKind.SUBSEQUENCE, span
    return None


def rank(query: str, entries: Iterable[tuple[str, float]]) -> list[MatchCandidate]:
    """Filter and order ``(path, effective_score)`` pairs for ``query``.

    An empty query keeps every entry, ordered by score then path.
    """
    candidates: list[MatchCandidate] = []
    for path, score in entries:
        matched = match_path(query, path)
        if matched is None:
            continue
        kind, span = matched
        candidates.append(MatchCandidate(path=path, score=score, kind=kind, span=span))
    candidates.sort(key=MatchCandidate.sort_key)
    return candidates
