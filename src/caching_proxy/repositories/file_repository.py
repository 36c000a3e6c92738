"""File system implementation of EntryStore.

Each entry lives in its own file, ``<cache_dir>/<key>.json``. Writes go to a
temporary file in the same directory and are moved into place with
os.replace, so a reader sees either the old entry or the new one, never a
partial write.
"""

import os
import tempfile
from pathlib import Path

from caching_proxy.config import Settings, get_settings
from caching_proxy.exceptions import StoreError

ENTRY_SUFFIX = ".json"


class FileEntryStore:
    """Directory-backed entry store.

    This class satisfies the EntryStore protocol through structural
    typing - no explicit inheritance needed.

    There is no in-process cache: every get reads the file system, so
    entries edited or removed on disk are seen immediately.
    """

    def __init__(self, cache_dir: str | os.PathLike[str]) -> None:
        """Initialize the store, creating cache_dir if needed.

        Args:
            cache_dir: Directory holding the entry files.

        Raises:
            StoreError: If the directory could not be created.
        """
        self._cache_dir = Path(cache_dir)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create cache directory {self._cache_dir}: {e}") from e

    @classmethod
    def create(cls, settings: Settings | None = None) -> "FileEntryStore":
        """Factory method to create FileEntryStore from settings.

        Args:
            settings: Settings to read cache_dir from. If None, uses the
                environment settings.

        Returns:
            Configured FileEntryStore
        """
        settings = settings or get_settings()
        return cls(cache_dir=settings.cache_dir)

    def path_for(self, key: str) -> Path:
        """Return the file path used for key."""
        return self._cache_dir / f"{key}{ENTRY_SUFFIX}"

    def get(self, key: str) -> bytes | None:
        """Read the entry file for key.

        Args:
            key: The cache key

        Returns:
            The file contents, or None if there is no entry file
        """
        try:
            return self.path_for(key).read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Cannot read cache entry {key}: {e}") from e

    def put(self, key: str, data: bytes) -> None:
        """Atomically replace the entry file for key.

        Args:
            key: The cache key
            data: The encoded entry
        """
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._cache_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StoreError(f"Cannot write cache entry {key}: {e}") from e

    @property
    def cache_dir(self) -> Path:
        """Get the cache directory."""
        return self._cache_dir

    def __repr__(self) -> str:
        return f"FileEntryStore({str(self._cache_dir)!r})"
