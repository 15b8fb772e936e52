"""Recommendation engine: what to train next, based purely on recency.

All functions are pure over a MuscleHistory. ``now`` defaults to the current
UTC instant and can be pinned for reproducible results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from rotation.models import MuscleHistory
from rotation.muscles import MAIN_MUSCLES, superset_candidates

DAY = timedelta(days=1)
NEVER = math.inf


@dataclass(frozen=True)
class Recommendation:
    main: str
    supersets: tuple[str, ...]


def days_since(timestamp: datetime | None, now: datetime | None = None) -> float:
    """Whole days (rounded up) between ``timestamp`` and ``now``.

    Never trained is ``math.inf``, which outranks any finite age. The
    difference is taken as an absolute value, so a timestamp in the future
    counts the same as one equally far in the past.
    """
    if timestamp is None:
        return NEVER
    if now is None:
        now = datetime.now(timezone.utc)
    elapsed = abs(now - timestamp)
    return math.ceil(elapsed / DAY)


def recommend_main(history: MuscleHistory, now: datetime | None = None) -> str:
    """The main muscle that has rested longest.

    Ties go to whichever muscle comes first in MAIN_MUSCLES, so an empty
    history recommends shoulders.
    """
    best = MAIN_MUSCLES[0]
    best_days = days_since(history.get(best), now)
    for muscle in MAIN_MUSCLES[1:]:
        days = days_since(history.get(muscle), now)
        if days > best_days:
            best, best_days = muscle, days
    return best


def recommend_supersets(
    main: str,
    history: MuscleHistory,
    now: datetime | None = None,
) -> tuple[str, ...]:
    """The two most-rested superset partners for ``main``.

    The sort is stable: equally rested muscles keep the pool order
    (biceps, triceps, core, then the remaining major groups).
    """
    pool = superset_candidates(main)
    ranked = sorted(pool, key=lambda muscle: days_since(history.get(muscle), now), reverse=True)
    return tuple(ranked[:2])


def recommend(history: MuscleHistory, now: datetime | None = None) -> Recommendation:
    if now is None:
        now = datetime.now(timezone.utc)
    main = recommend_main(history, now)
    return Recommendation(main=main, supersets=recommend_supersets(main, history, now))
