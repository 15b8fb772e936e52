"""Snapshot codec: backup codes in, TrackerState out (and back).

Import failures fall into a small, stable taxonomy so the presentation layer
can tell "that is not a backup code at all" apart from "that code is missing
something":

    malformed_encoding  text is not valid JSON
    invalid_shape       valid JSON that is not a snapshot
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import ValidationError

from rotation.contract import (
    HISTORY_SLOT,
    SUPERSET_SLOT,
    MuscleHistoryV1,
    SupersetEntryV1,
    format_timestamp,
    validate_snapshot_v1,
)
from rotation.models import MuscleHistory, SupersetRecord, TrackerState

ImportErrorCode = Literal["malformed_encoding", "invalid_shape", "other"]


class SnapshotImportError(ValueError):
    """Base class for rejected imports. Nothing is applied when raised."""

    code: ImportErrorCode = "other"


class MalformedEncodingError(SnapshotImportError):
    code = "malformed_encoding"


class InvalidShapeError(SnapshotImportError):
    code = "invalid_shape"

    def __init__(self, message: str, *, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []


def classify_import_error(exc: BaseException | None) -> ImportErrorCode:
    if isinstance(exc, SnapshotImportError):
        return exc.code
    return "other"


def _describe_validation_error(exc: ValidationError) -> list[str]:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{location}: {error['msg']}")
    return problems


# ---------------------------------------------------------------------------
# Payload <-> state
# ---------------------------------------------------------------------------


def history_payload(history: MuscleHistory) -> dict[str, str | None]:
    return {
        muscle: format_timestamp(stamp) if stamp is not None else None
        for muscle, stamp in history.items()
    }


def superset_log_payload(records: tuple[SupersetRecord, ...]) -> list[dict[str, Any]]:
    return [
        {
            "date": format_timestamp(record.timestamp),
            "main": record.main,
            "supersets": list(record.supersets),
        }
        for record in records
    ]


def snapshot_payload(state: TrackerState) -> dict[str, Any]:
    return {
        HISTORY_SLOT: history_payload(state.history),
        SUPERSET_SLOT: superset_log_payload(state.superset_log),
    }


def history_from_contract(model: MuscleHistoryV1) -> MuscleHistory:
    return dict(model.root)


def records_from_contract(entries: list[SupersetEntryV1]) -> tuple[SupersetRecord, ...]:
    return tuple(
        SupersetRecord(timestamp=entry.date, main=entry.main, supersets=tuple(entry.supersets))
        for entry in entries
    )


# ---------------------------------------------------------------------------
# Text codec
# ---------------------------------------------------------------------------


def dumps(payload: Any) -> str:
    """Deterministic compact JSON: sorted keys, no whitespace."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def encode_snapshot(state: TrackerState) -> str:
    return dumps(snapshot_payload(state))


def decode_snapshot(text: str) -> TrackerState:
    """Parse and validate a backup code.

    Raises MalformedEncodingError if ``text`` is not JSON and InvalidShapeError
    if it is JSON but not a snapshot. Both top-level fields must be present.
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise MalformedEncodingError(f"Invalid JSON format: {exc}") from exc

    try:
        snapshot = validate_snapshot_v1(payload)
    except ValidationError as exc:
        problems = _describe_validation_error(exc)
        raise InvalidShapeError(
            "Invalid data format: " + "; ".join(problems), problems=problems,
        ) from exc

    return TrackerState(
        history=history_from_contract(snapshot.workout_history),
        superset_log=records_from_contract(snapshot.superset_history),
    )
