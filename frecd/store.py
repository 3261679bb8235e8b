"""Persistent table of visited directories and their frecency scores.

The whole table is loaded once per invocation and written back wholesale.
Loading is forgiving: a missing or corrupt file starts an empty history.
Paths that are not valid UTF-8 round-trip through surrogate escapes.
Saving goes through a temp file in the same directory and an atomic rename.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import msgpack

from .frecency import DEFAULT_MODEL, FrecencyModel
from .matcher import MatchCandidate, rank

logger = logging.getLogger(__name__)


@dataclass
class VisitRecord:
    path: str
    score: float
    last_visit: float


def _coerce_record(path: object, raw: object) -> VisitRecord | None:
    """Build a record from one decoded ``path -> [score, last_visit]`` entry.

    Returns ``None`` for wrong types, empty paths, and negative or non-finite
    numbers.
    """
    if not isinstance(path, str) or not path:
        return None
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        return None
    score, last_visit = raw
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    if isinstance(last_visit, bool) or not isinstance(last_visit, (int, float)):
        return None
    if not math.isfinite(score) or score < 0 or not math.isfinite(last_visit):
        return None
    return VisitRecord(path=path, score=float(score), last_visit=float(last_visit))


def load_table(source: Path) -> dict[str, VisitRecord]:
    """Load the persisted table, returning an empty one when it cannot be read."""
    try:
        data = msgpack.unpackb(source.read_bytes(), raw=False, unicode_errors="surrogateescape")
    except FileNotFoundError:
        logger.debug("no history at %s; starting empty", source)
        return {}
    except Exception as exc:
        logger.debug("ignoring unreadable history at %s: %s", source, exc)
        return {}
    if not isinstance(data, dict):
        logger.debug("ignoring history at %s: top level is %s", source, type(data).__name__)
        return {}

    table: dict[str, VisitRecord] = {}
    for path, raw in data.items():
        record = _coerce_record(path, raw)
        if record is None:
            logger.debug("dropping malformed history entry %r", path)
            continue
        table[record.path] = record
    return table


def pack_table(table: dict[str, VisitRecord]) -> bytes:
    return msgpack.packb(
        {record.path: [record.score, record.last_visit] for record in table.values()},
        use_bin_type=True,
        unicode_errors="surrogateescape",
    )


def save_table(target: Path, table: dict[str, VisitRecord]) -> None:
    """Atomically replace ``target`` with the serialized table.

    Raises ``OSError`` on permission or disk failures; the previous file is
    left untouched in that case.
    """
    payload = pack_table(table)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f"{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        _unlink_quietly(tmp_path)
        raise
    logger.debug("saved %d entries to %s", len(table), target)


def _unlink_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


class PathStore:
    """Owns the visit table for one invocation and its backing file."""

    def __init__(
        self,
        source: Path,
        table: dict[str, VisitRecord] | None = None,
        *,
        model: FrecencyModel = DEFAULT_MODEL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source = source
        self.table: dict[str, VisitRecord] = table if table is not None else {}
        self.model = model
        self.clock = clock
        self.dirty = False

    @classmethod
    def load(
        cls,
        source: Path,
        *,
        model: FrecencyModel = DEFAULT_MODEL,
        clock: Callable[[], float] = time.time,
    ) -> PathStore:
        table = load_table(source)
        logger.debug("loaded %d entries from %s", len(table), source)
        return cls(source, table, model=model, clock=clock)

    def __len__(self) -> int:
        return len(self.table)

    def visit(self, path: str, now: float | None = None) -> VisitRecord:
        """Record one visit to ``path`` and return its updated record."""
        if not path:
            raise ValueError("cannot record a visit to an empty path")
        if now is None:
            now = self.clock()
        record = self.table.get(path)
        if record is None:
            record = VisitRecord(path=path, score=self.model.score_on_visit(0.0, now, now), last_visit=now)
            self.table[path] = record
        else:
            record.score = self.model.score_on_visit(record.score, record.last_visit, now)
            record.last_visit = max(record.last_visit, now)
        self.dirty = True
        logger.debug("visited %s (score %.4f)", path, record.score)
        return record

    def save(self) -> None:
        save_table(self.source, self.table)
        self.dirty = False

    def items_with_frecency(self, now: float | None = None) -> list[tuple[str, float]]:
        """Return ``(path, effective_score)`` for every record, best first."""
        if now is None:
            now = self.clock()
        items = [
            (record.path, self.model.score_for_ranking(record.score, record.last_visit, now))
            for record in self.table.values()
        ]
        items.sort(key=lambda item: (-item[1], item[0]))
        return items

    def candidates(self, query: str, now: float | None = None) -> list[MatchCandidate]:
        return rank(query, self.items_with_frecency(now))

    def directory_matches(self, query: str, now: float | None = None) -> list[tuple[str, float]]:
        return [(candidate.path, candidate.score) for candidate in self.candidates(query, now)]

    def query(self, pattern: str | None = None, now: float | None = None) -> list[tuple[str, float]]:
        if pattern is None:
            return self.items_with_frecency(now)
        return self.directory_matches(pattern, now)
