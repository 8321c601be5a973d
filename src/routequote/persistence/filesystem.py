"""File-based persistence helpers for finalized quote outputs."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"


def safe_token(value: str) -> str:
    """Filesystem-safe token; underscores are reserved as run name separators."""
    token = re.sub(r"[^A-Za-z0-9-]+", "-", value.strip()).strip("-")
    return token or "unknown"


class FileStorage:
    """Thin wrapper around the data root for storing quote artifacts."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "quote", label: str | None = None) -> Path:
        timestamp = datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)
        parts = [prefix, safe_token(label)] if label else [prefix]
        base_name = "_".join([*parts, timestamp])
        path = self.output_root / base_name
        attempt = 1
        while True:
            try:
                path.mkdir(parents=True, exist_ok=False)
                return path
            except FileExistsError:
                attempt += 1
                path = self.output_root / f"{base_name}-{attempt}"

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=indent)

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def write_bytes(self, path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            handle.write(payload)
