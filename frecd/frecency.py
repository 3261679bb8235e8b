"""Frecency scoring for visited directories.

Scores decay lazily: the stored value is aged by elapsed time whenever it is
read, so no background aging pass is ever needed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

DECAY_FACTOR = 0.5
HALF_LIFE_SECONDS = 7 * 24 * 60 * 60.0
VISIT_INCREMENT = 1.0


@dataclass(frozen=True)
class FrecencyModel:
    """Decay and increment constants applied to every record."""

    half_life: float = HALF_LIFE_SECONDS
    decay_factor: float = DECAY_FACTOR
    visit_increment: float = VISIT_INCREMENT

    def __post_init__(self) -> None:
        if not math.isfinite(self.half_life) or self.half_life <= 0:
            raise ValueError(f"half_life must be positive, got {self.half_life!r}")
        if not 0 < self.decay_factor <= 1:
            raise ValueError(f"decay_factor must be in (0, 1], got {self.decay_factor!r}")
        if not math.isfinite(self.visit_increment) or self.visit_increment < 0:
            raise ValueError(f"visit_increment must be >= 0, got {self.visit_increment!r}")

    def score_for_ranking(self, old_score: float, old_last_visit: float, now: float) -> float:
        """Return ``old_score`` aged by the time elapsed since ``old_last_visit``.

        Negative elapsed time (clock skew) counts as zero.
        """
        elapsed = max(0.0, now - old_last_visit)
        return old_score * self.decay_factor ** (elapsed / self.half_life)

    def score_on_visit(self, old_score: float, old_last_visit: float, now: float) -> float:
        """Return the score after one more visit at ``now``."""
        return self.score_for_ranking(old_score, old_last_visit, now) + self.visit_increment


DEFAULT_MODEL = FrecencyModel()


def score_for_ranking(old_score: float, old_last_visit: float, now: float) -> float:
    return DEFAULT_MODEL.score_for_ranking(old_score, old_last_visit, now)


def score_on_visit(old_score: float, old_last_visit: float, now: float) -> float:
    return DEFAULT_MODEL.score_on_visit(old_score, old_last_visit, now)
