"""Wire contract for the persisted snapshot (v1).

The snapshot is the unit of backup and restore:

    {"workoutHistory": {muscle: timestamp | null},
     "supersetHistory": [{"date", "main", "supersets"}]}

Timestamps are ISO-8601 UTC strings with a ``Z`` suffix. Whole-millisecond
instants use the format browser ``Date.toISOString()`` produces, so backup
codes from the web version of the tracker validate unchanged. Anything finer
is written with six fractional digits and survives a round trip intact.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, TypeAdapter, field_validator, model_validator

from rotation.models import complete_history
from rotation.muscles import MAIN_MUSCLES, normalize_muscle, superset_candidates

HISTORY_SLOT = "workoutHistory"
SUPERSET_SLOT = "supersetHistory"


_ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


def format_timestamp(value: datetime) -> str:
    utc = value.astimezone(timezone.utc)
    if utc.microsecond % 1000:
        return utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def _require_timestamp_text(value: Any, *, field_name: str) -> Any:
    # Lax datetime parsing would accept numbers, and numeric strings, as epoch seconds.
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _ISO_DATE_PREFIX.match(value.strip()):
        raise ValueError(f"{field_name} must be an ISO-8601 timestamp string")
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MuscleHistoryV1(RootModel[dict[str, datetime | None]]):
    """Muscle → last-trained timestamp. Keys must come from the fixed set."""

    @field_validator("root", mode="before")
    @classmethod
    def validate_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            raise ValueError(f"{HISTORY_SLOT} must be an object")
        normalized: dict[str, Any] = {}
        for key, stamp in value.items():
            muscle = normalize_muscle(key)
            if muscle in normalized:
                raise ValueError(f"duplicate muscle group: {key!r}")
            normalized[muscle] = _require_timestamp_text(stamp, field_name=f"{HISTORY_SLOT}.{muscle}")
        return normalized

    @field_validator("root")
    @classmethod
    def complete(cls, value: dict[str, datetime | None]) -> dict[str, datetime | None]:
        history = {muscle: _as_utc(stamp) if stamp is not None else None for muscle, stamp in value.items()}
        return complete_history(history)


class SupersetEntryV1(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime
    main: str
    supersets: list[str]

    @field_validator("date", mode="before")
    @classmethod
    def validate_date_text(cls, value: Any) -> Any:
        return _require_timestamp_text(value, field_name="date")

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("main")
    @classmethod
    def validate_main(cls, value: str) -> str:
        muscle = normalize_muscle(value)
        if muscle not in MAIN_MUSCLES:
            raise ValueError(f"main must be one of {', '.join(MAIN_MUSCLES)}")
        return muscle

    @field_validator("supersets")
    @classmethod
    def validate_supersets(cls, values: list[str]) -> list[str]:
        ordered: list[str] = []
        for value in values:
            muscle = normalize_muscle(value)
            if muscle not in ordered:
                ordered.append(muscle)
        return ordered

    @model_validator(mode="after")
    def check_superset_pool(self) -> SupersetEntryV1:
        allowed = superset_candidates(self.main)
        for muscle in self.supersets:
            if muscle not in allowed:
                raise ValueError(f"{muscle} is not a superset option for {self.main}")
        return self


class SnapshotV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    workout_history: MuscleHistoryV1 = Field(alias=HISTORY_SLOT)
    superset_history: list[SupersetEntryV1] = Field(alias=SUPERSET_SLOT)


SUPERSET_LOG_ADAPTER = TypeAdapter(list[SupersetEntryV1])


def validate_snapshot_v1(payload: Any) -> SnapshotV1:
    """Validate a decoded snapshot payload. Raises pydantic.ValidationError."""
    return SnapshotV1.model_validate(payload)


def validate_history_slot(payload: Any) -> MuscleHistoryV1:
    return MuscleHistoryV1.model_validate(payload)


def validate_superset_slot(payload: Any) -> list[SupersetEntryV1]:
    return SUPERSET_LOG_ADAPTER.validate_python(payload)
