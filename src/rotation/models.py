"""Core data models for the tracker."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from rotation.muscles import MUSCLE_ORDER

MuscleHistory = dict[str, datetime | None]


def empty_history() -> MuscleHistory:
    """History with every tracked muscle present and never trained."""
    return {muscle: None for muscle in MUSCLE_ORDER}


def complete_history(partial: dict[str, datetime | None]) -> MuscleHistory:
    """Fill in missing muscles with None and return them in canonical order."""
    return {muscle: partial.get(muscle) for muscle in MUSCLE_ORDER}


def utc_now() -> datetime:
    """Current UTC instant truncated to milliseconds.

    Matches the millisecond format of backup codes from the browser tracker.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


@dataclass(frozen=True)
class SupersetRecord:
    """One superset session, immutable once appended to the log."""

    timestamp: datetime
    main: str
    supersets: tuple[str, ...]  # ordered, no duplicates


@dataclass(frozen=True)
class TrackerState:
    """The (history, superset log) pair the core passes around.

    Never mutated in place; the session logger returns a new state.
    """

    history: MuscleHistory = field(default_factory=empty_history)
    superset_log: tuple[SupersetRecord, ...] = ()

    def with_history(self, history: MuscleHistory) -> TrackerState:
        return replace(self, history=complete_history(history))

    def with_record(self, record: SupersetRecord) -> TrackerState:
        return replace(self, superset_log=self.superset_log + (record,))
