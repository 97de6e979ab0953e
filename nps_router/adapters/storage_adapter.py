"""
Storage adapters for the NPS router.

These adapters implement the StorageProvider interface, playing the role
of the browser's local storage: values are JSON documents under string keys.
"""
import copy
import json
import logging
import os
import tempfile
from typing import Any, Dict

from nps_router.interfaces.providers.storage import StorageProvider

logger = logging.getLogger(__name__)


class MemoryStorageAdapter(StorageProvider):
    """In-process storage. Nothing survives the process."""

    def __init__(self, initial: Dict[str, Any] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, fallback: Any) -> Any:
        if key not in self._data:
            return fallback
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStorageAdapter(StorageProvider):
    """Stores every key in a single JSON file.

    Reads that fail for any reason fall back to the caller's default.
    Writes replace the file atomically and propagate their errors.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> Dict[str, Any]:
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold an object")
        return data

    def get(self, key: str, fallback: Any) -> Any:
        if not os.path.exists(self.path):
            return fallback
        try:
            data = self._read_all()
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading storage file {self.path}: {e}")
            return fallback
        value = data.get(key)
        return fallback if value is None else value

    def set(self, key: str, value: Any) -> None:
        data: Dict[str, Any] = {}
        if os.path.exists(self.path):
            try:
                data = self._read_all()
            except (OSError, ValueError) as e:
                logger.warning(f"Overwriting unreadable storage file {self.path}: {e}")
        data[key] = value

        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception as e:
            logger.error(f"Error writing storage file {self.path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
