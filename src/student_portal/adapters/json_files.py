"""Helpers for JSON files that are rewritten as a whole."""

import json
import logging
import os
import tempfile
from pathlib import Path

from student_portal.domain.errors import StorageError

logger = logging.getLogger(__name__)


def read_json(path: Path, default: object) -> object:
    """Load a JSON document, returning `default` when the file does not exist."""
    if not path.exists():
        return default
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.exception("Failed to read store file", extra={"path": str(path)})
        raise StorageError() from exc


def write_json_atomic(path: Path, data: object) -> None:
    """Write a JSON document via a temp file in the same directory."""
    temp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            delete=False,
            encoding="utf-8",
        ) as handle:
            temp_path = Path(handle.name)
            json.dump(data, handle, indent=2, ensure_ascii=False)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
        logger.exception("Failed to write store file", extra={"path": str(path)})
        raise StorageError() from exc
