import json
import os
import shutil
import threading

from .errors import StorageError
from .logging_setup import logger


def load_json(filename: str) -> dict:
    """Read a JSON object from disk. Missing file -> {}; unreadable or malformed -> StorageError."""
    if not os.path.exists(filename):
        return {}
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise StorageError(f"could not read {filename}: {e}") from e
    if not isinstance(data, dict):
        raise StorageError(f"{filename} must hold a JSON object, got {type(data).__name__}")
    return data


def save_json(filename: str, data: dict) -> None:
    """Atomic write through a temp file and os.replace, keeping the previous file as .bak."""
    tmp = f"{filename}.tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        if os.path.exists(filename):
            shutil.copyfile(filename, f"{filename}.bak")
        os.replace(tmp, filename)
    except OSError as e:
        raise StorageError(f"could not write {filename}: {e}") from e


class MessageIdStore:
    """Durable destination -> last message id mapping.

    Every mutation is written to disk before the call returns. Storage
    failures are logged and never raised.
    """

    def __init__(self, path: str):
        self.path = path
        self._ids: dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self) -> dict[str, str]:
        try:
            data = load_json(self.path)
        except StorageError as e:
            logger.warning("[STORE] Failed to load message ids, starting empty: %s", e)
            data = {}
        with self._lock:
            self._ids = {str(k): str(v) for k, v in data.items() if v is not None}
            logger.info("[STORE] Loaded %s message id(s) from %s", len(self._ids), self.path)
            return dict(self._ids)

    def save(self, mapping: dict[str, str]) -> None:
        with self._lock:
            self._ids = {str(k): str(v) for k, v in mapping.items()}
            self._flush()

    def get(self, destination: str) -> str | None:
        with self._lock:
            return self._ids.get(destination)

    def set(self, destination: str, message_id) -> None:
        with self._lock:
            self._ids[destination] = str(message_id)
            self._flush()

    def delete(self, destination: str) -> None:
        with self._lock:
            if self._ids.pop(destination, None) is None:
                return
            self._flush()

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._ids)

    def __contains__(self, destination: str) -> bool:
        with self._lock:
            return destination in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def _flush(self) -> None:
        try:
            save_json(self.path, self._ids)
        except StorageError as e:
            logger.warning("[STORE] Failed to save message ids: %s", e)
