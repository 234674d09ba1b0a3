"""Key-value store backends.

The tracking services only need ``get``/``set``/``remove`` on string values;
anything implementing the :class:`Store` protocol can back them.
"""

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from tinydb import Query, TinyDB

from ..exceptions import StorageReadError, StorageWriteError
from ..utils.config import Settings, get_settings


@runtime_checkable
class Store(Protocol):
    """Asynchronous string key-value store."""

    async def get(self, key: str) -> Optional[str]: ...
    async def set(self, key: str, value: str) -> None: ...
    async def remove(self, key: str) -> None: ...


class TinyDBStore:
    """
    Key-value store on top of TinyDB.

    Each key is one document ``{"key": ..., "value": ...}`` in the ``kv``
    table, so the data file stays human-readable JSON.
    """

    TABLE = "kv"

    def __init__(
        self,
        path: Optional[Path] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self._path = path
        self._db: Optional[TinyDB] = None

    @property
    def db_path(self) -> Path:
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            return self._path
        return self.settings.db_path

    @property
    def db(self) -> TinyDB:
        """Get the TinyDB instance."""
        if self._db is None:
            self._db = TinyDB(self.db_path)
        return self._db

    async def get(self, key: str) -> Optional[str]:
        Record = Query()
        try:
            results = self.db.table(self.TABLE).search(Record.key == key)
        except (OSError, ValueError) as e:
            raise StorageReadError(f"Could not read {key!r}: {e}") from e

        if results:
            return results[0]["value"]
        return None

    async def set(self, key: str, value: str) -> None:
        Record = Query()
        try:
            self.db.table(self.TABLE).upsert(
                {"key": key, "value": value},
                Record.key == key,
            )
        except (OSError, ValueError) as e:
            raise StorageWriteError(f"Could not write {key!r}: {e}") from e

    async def remove(self, key: str) -> None:
        Record = Query()
        try:
            self.db.table(self.TABLE).remove(Record.key == key)
        except (OSError, ValueError) as e:
            raise StorageWriteError(f"Could not remove {key!r}: {e}") from e

    def close(self) -> None:
        """Close the database file."""
        if self._db is not None:
            self._db.close()
            self._db = None

    def __enter__(self) -> "TinyDBStore":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class MemoryStore:
    """In-process store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)
