import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_STORE_PATH = Path("~/.workout-rotation.json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    store_path: Path = DEFAULT_STORE_PATH
    log_format: str = "text"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Config":
        log_format = os.environ.get("ROTATION_LOG_FORMAT", "text").strip().lower()
        if log_format not in ("text", "json"):
            raise RuntimeError("ROTATION_LOG_FORMAT must be 'text' or 'json'")

        log_level = os.environ.get("ROTATION_LOG_LEVEL", "WARNING").strip().upper()
        if log_level not in LOG_LEVELS:
            raise RuntimeError(f"ROTATION_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        return cls(
            store_path=Path(os.environ.get("ROTATION_STORE_PATH", str(DEFAULT_STORE_PATH))).expanduser(),
            log_format=log_format,
            log_level=log_level,
        )
