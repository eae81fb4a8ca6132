"""Key-value backends for capsule persistence."""

import os
import re
import tempfile
from pathlib import Path

from loguru import logger


class KeyValueBackend:
    """
    Minimal string key-value medium.

    `set` reports failure through its return value instead of raising, the
    way a browser's local storage quota error is reported to the app.
    """

    def __init__(self, max_bytes: int | None = None):
        self.max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, value: str) -> bool:
        raise NotImplementedError

    def _over_quota(self, key: str, value: str) -> bool:
        if self.max_bytes is None:
            return False
        size = len(value.encode("utf-8"))
        if size > self.max_bytes:
            logger.error(f"Storage quota exceeded for '{key}': {size} > {self.max_bytes} bytes")
            return True
        return False


class MemoryBackend(KeyValueBackend):
    """Dict-backed storage, for tests and embedding."""

    def __init__(self, data: dict[str, str] | None = None, max_bytes: int | None = None):
        super().__init__(max_bytes)
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        if self._over_quota(key, value):
            return False
        self.data[key] = value
        return True


class FileBackend(KeyValueBackend):
    """One file per key under a data directory, replaced atomically on write."""

    def __init__(self, data_dir: Path, max_bytes: int | None = None):
        super().__init__(max_bytes)
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.data_dir / f"{safe}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        if self._over_quota(key, value):
            return False

        path = self.path_for(key)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
            return True
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False
