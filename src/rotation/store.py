"""History store: persists the tracker state in a small key-value surface.

The state lives in two string slots, ``workoutHistory`` and
``supersetHistory``, each holding its own JSON text. Both slots are always
written together. A slot that is missing or unreadable on load counts as
"no data yet": corrupted stored state looks exactly like a first run and
there is nothing the user could do about it, so it is logged and defaulted
rather than raised.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Protocol, TypeVar

from pydantic import ValidationError

from rotation.contract import (
    HISTORY_SLOT,
    SUPERSET_SLOT,
    validate_history_slot,
    validate_superset_slot,
)
from rotation.models import MuscleHistory, SupersetRecord, TrackerState, empty_history
from rotation.snapshot import (
    decode_snapshot,
    dumps,
    encode_snapshot,
    history_from_contract,
    history_payload,
    records_from_contract,
    superset_log_payload,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set_many(self, values: dict[str, str]) -> None: ...


class MemoryKeyValueStore:
    """In-process key-value surface, mostly for tests and embedding."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def set_many(self, values: dict[str, str]) -> None:
        self._values.update(values)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


class JsonFileKeyValueStore:
    """Key-value surface backed by one JSON object on disk.

    Writes go through a temp file and ``os.replace`` so a crash mid-write
    never leaves half a file behind.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, Any]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Store file %s is not valid JSON; ignoring it", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store file %s does not hold an object; ignoring it", self.path)
            return {}
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str]) -> None:
        data = self._read_all()
        data.update(values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self.path)


class HistoryStore:
    """Load, save, import and export the tracker state.

    ``lock`` serialises read-modify-write sequences (logging a workout,
    importing a backup) for callers sharing one store across threads.
    """

    def __init__(self, surface: KeyValueStore):
        self.surface = surface
        self.lock = threading.RLock()

    @classmethod
    def at_path(cls, path: str | Path) -> HistoryStore:
        return cls(JsonFileKeyValueStore(path))

    def _load_slot(self, key: str, parse: Callable[[Any], T], default: T) -> T:
        raw = self.surface.get(key)
        if raw is None:
            return default
        try:
            return parse(json.loads(raw))
        except (ValueError, RecursionError, ValidationError) as exc:
            logger.warning(
                "Stored %s slot is unreadable; starting from defaults",
                key,
                extra={"rotation_slot": key, "rotation_error": str(exc)[:200]},
            )
            return default

    def load(self) -> TrackerState:
        history: MuscleHistory = self._load_slot(
            HISTORY_SLOT,
            lambda payload: history_from_contract(validate_history_slot(payload)),
            empty_history(),
        )
        records: tuple[SupersetRecord, ...] = self._load_slot(
            SUPERSET_SLOT,
            lambda payload: records_from_contract(validate_superset_slot(payload)),
            (),
        )
        return TrackerState(history=history, superset_log=records)

    def save(self, state: TrackerState) -> None:
        self.surface.set_many({
            HISTORY_SLOT: dumps(history_payload(state.history)),
            SUPERSET_SLOT: dumps(superset_log_payload(state.superset_log)),
        })
        logger.info(
            "Saved tracker state",
            extra={"rotation_superset_records": len(state.superset_log)},
        )

    def import_snapshot(self, text: str) -> TrackerState:
        """Replace the stored state with a backup code.

        Decoding happens before anything is written, so a rejected code
        (SnapshotImportError) leaves the stored state exactly as it was.
        """
        with self.lock:
            state = decode_snapshot(text)
            self.save(state)
        logger.info(
            "Imported snapshot",
            extra={"rotation_superset_records": len(state.superset_log)},
        )
        return state

    def export_snapshot(self) -> str:
        return encode_snapshot(self.load())
