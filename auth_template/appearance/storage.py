"""
Key/value storage backends for client-side preferences.

Backends expose ``get_item`` / ``set_item`` with browser ``localStorage``
semantics: values are strings and a missing key reads as ``None``.
"""

import json
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Union

from auth_template.utils.logger import get_logger

logger = get_logger(__name__)


class StorageError(RuntimeError):
    """Raised when a storage backend cannot read or write."""


class MemoryStorage:
    """Process-local storage, used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class MappingStorage:
    """
    Adapter over any mutable mapping.

    Suitable for NiceGUI's ``app.storage.user``, which persists a per-browser
    dictionary on the server.
    """

    def __init__(self, mapping: MutableMapping):
        self._mapping = mapping

    def get_item(self, key: str) -> Optional[str]:
        value = self._mapping.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            self._mapping[key] = value
        except (TypeError, RuntimeError) as exc:
            raise StorageError("Unable to write storage mapping") from exc


class JsonFileStorage:
    """
    Storage persisted as a single JSON object on disk.

    The whole file is rewritten on every ``set_item``.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Unable to read {self.path}") from exc

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"Corrupted storage file {self.path}") from exc

        if not isinstance(data, dict):
            raise StorageError(f"Unexpected storage layout in {self.path}")

        return data

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read_all()
        except StorageError:
            logger.warning(
                "Discarding unreadable storage file",
                extra={"path": str(self.path)},
            )
            items = {}

        items[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Unable to write {self.path}") from exc
