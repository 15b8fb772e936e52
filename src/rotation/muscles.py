"""Muscle vocabulary: the fixed set of tracked groups and how they are grouped.

Recommendation tie-breaks depend on iteration order, so every ordering the
engine relies on is spelled out here as a tuple instead of being derived from
dict iteration.
"""

from __future__ import annotations

# Canonical order. Ties in recommend_main resolve to the earliest entry.
MUSCLE_ORDER: tuple[str, ...] = (
    "shoulders",
    "chest",
    "back",
    "legs",
    "biceps",
    "triceps",
    "core",
)

MUSCLES: frozenset[str] = frozenset(MUSCLE_ORDER)

MAIN_MUSCLES: tuple[str, ...] = ("shoulders", "chest", "back", "legs")

# Order of the "log today's workout" buttons.
MAIN_MUSCLE_BUTTONS: tuple[str, ...] = ("chest", "back", "shoulders", "legs")

SUPERSET_GROUPS: dict[str, tuple[str, ...]] = {
    "Major Muscle Groups": ("chest", "back", "shoulders"),
    "Arms": ("biceps", "triceps"),
    "Core": ("core",),
}

# Superset candidates in pool construction order: accessories first, then
# the major groups minus whatever is being trained as the main muscle.
ACCESSORY_MUSCLES: tuple[str, ...] = ("biceps", "triceps", "core")
MAJOR_SUPERSET_MUSCLES: tuple[str, ...] = SUPERSET_GROUPS["Major Muscle Groups"]

# Picker value meaning "no superset this session".
NO_SUPERSET = "none"


def normalize_muscle(name: str) -> str:
    """Lower-case and trim a muscle name, raising ValueError if it is unknown."""
    normalized = str(name).strip().lower()
    if normalized not in MUSCLES:
        raise ValueError(f"unknown muscle group: {name!r}")
    return normalized


def superset_candidates(main: str) -> tuple[str, ...]:
    """Muscles eligible as supersets for ``main``, in pool construction order."""
    return ACCESSORY_MUSCLES + tuple(m for m in MAJOR_SUPERSET_MUSCLES if m != main)
