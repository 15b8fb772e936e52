"""Session logging: commit a finished workout to the history.

A workout is one main muscle plus an optional set of superset muscles, all
stamped with the same instant. Choosing "none" in the superset picker and
choosing nothing at all are equivalent: only the main muscle is updated and
no superset record is written.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from datetime import datetime

from rotation.models import SupersetRecord, TrackerState, utc_now
from rotation.muscles import (
    MAIN_MUSCLES,
    NO_SUPERSET,
    SUPERSET_GROUPS,
    normalize_muscle,
    superset_candidates,
)
from rotation.store import HistoryStore

logger = logging.getLogger(__name__)


def _normalize_main(main: str) -> str:
    muscle = normalize_muscle(main)
    if muscle not in MAIN_MUSCLES:
        raise ValueError(f"{muscle} is not a main muscle group ({', '.join(MAIN_MUSCLES)})")
    return muscle


def _normalize_supersets(main: str, supersets: Iterable[str]) -> tuple[str, ...]:
    """Ordered, de-duplicated superset muscles; () means "no superset"."""
    picked: list[str] = []
    for name in supersets:
        value = str(name).strip().lower()
        if value not in picked:
            picked.append(value)

    # "none" anywhere in the selection wins over any muscles picked alongside it.
    if NO_SUPERSET in picked:
        return ()

    muscles = tuple(normalize_muscle(value) for value in picked)
    if main in muscles:
        raise ValueError(f"{main} is already the main muscle group")
    allowed = superset_candidates(main)
    for muscle in muscles:
        if muscle not in allowed:
            raise ValueError(f"{muscle} is not a superset option for {main}")
    return muscles


def apply_workout(
    state: TrackerState,
    main: str,
    supersets: Iterable[str],
    at: datetime,
) -> TrackerState:
    """Return ``state`` with the workout applied; ``state`` itself is untouched."""
    main = _normalize_main(main)
    muscles = _normalize_supersets(main, supersets)

    history = dict(state.history)
    history[main] = at
    if not muscles:
        return state.with_history(history)

    for muscle in muscles:
        history[muscle] = at
    record = SupersetRecord(timestamp=at, main=main, supersets=muscles)
    return state.with_history(history).with_record(record)


def log_workout(
    store: HistoryStore,
    main: str,
    supersets: Iterable[str] = (),
    now: datetime | None = None,
) -> TrackerState:
    """Record a workout in ``store`` and return the saved state."""
    at = now if now is not None else utc_now()
    main = _normalize_main(main)
    muscles = _normalize_supersets(main, supersets)
    with store.lock:
        state = apply_workout(store.load(), main, muscles, at)
        store.save(state)
    logger.info(
        "Logged workout",
        extra={
            "rotation_main": main,
            "rotation_supersets": list(muscles),
            "rotation_logged_at": at.isoformat(),
        },
    )
    return state


# ---------------------------------------------------------------------------
# Superset picker
# ---------------------------------------------------------------------------


class SelectionState(enum.Enum):
    EMPTY = "empty"
    NONE_SELECTED = "none_selected"
    PARTIAL = "partial"


class SupersetPicker:
    """Selection builder behind the "select supersets" dialog.

    "none" is exclusive: picking it clears any muscles, and picking a muscle
    while "none" is active replaces it. Otherwise muscles toggle.
    """

    def __init__(self, main: str):
        self.main = _normalize_main(main)
        self._none = False
        self._muscles: list[str] = []

    @property
    def state(self) -> SelectionState:
        if self._none:
            return SelectionState.NONE_SELECTED
        if self._muscles:
            return SelectionState.PARTIAL
        return SelectionState.EMPTY

    @property
    def muscles(self) -> tuple[str, ...]:
        return tuple(self._muscles)

    @property
    def selection(self) -> tuple[str, ...]:
        """What to pass to log_workout."""
        if self._none:
            return (NO_SUPERSET,)
        return tuple(self._muscles)

    def options(self) -> dict[str, tuple[str, ...]]:
        """Superset categories with the main muscle filtered out."""
        options = {}
        for group, muscles in SUPERSET_GROUPS.items():
            remaining = tuple(m for m in muscles if m != self.main)
            if remaining:
                options[group] = remaining
        return options

    def pick(self, name: str) -> SelectionState:
        value = str(name).strip().lower()
        if value == NO_SUPERSET:
            self._none = True
            self._muscles = []
            return self.state

        muscle = normalize_muscle(value)
        if muscle == self.main:
            raise ValueError(f"{muscle} is already the main muscle group")
        if not any(muscle in muscles for muscles in SUPERSET_GROUPS.values()):
            raise ValueError(f"{muscle} cannot be trained as a superset")

        if self._none:
            self._none = False
            self._muscles = [muscle]
        elif muscle in self._muscles:
            self._muscles.remove(muscle)
        else:
            self._muscles.append(muscle)
        return self.state

    def reset(self) -> None:
        self._none = False
        self._muscles = []
