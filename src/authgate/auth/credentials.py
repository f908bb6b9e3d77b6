"""Concrete credential stores.

Two implementations are provided here:

* :class:`MemoryCredentialStore` keeps credentials in process memory only.
  Suitable for tests and short-lived scripts.
* :class:`FileCredentialStore` persists credentials to
  ``~/.config/authgate/credentials.json`` with permissions restricted to
  the owner (0o600).  Used by the ``authgate`` CLI.

Both are safe to share between threads.
"""

import json
import threading
from pathlib import Path

from authgate.auth.interfaces import CredentialStore

_CONFIG_DIR = Path.home() / ".config" / "authgate"
_CREDENTIALS_FILE = _CONFIG_DIR / "credentials.json"


class MemoryCredentialStore(CredentialStore):
    """Dictionary-backed credential store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class FileCredentialStore(CredentialStore):
    """JSON-file credential store.

    Every read goes to disk so that several processes sharing the file see
    each other's refreshes.  Writes are read-modify-write under a
    process-local lock.

    Args:
        path: Location of the JSON file.  Defaults to
            ``~/.config/authgate/credentials.json``.
    """

    def __init__(self, path: Path | None = None):
        self._path = path or _CREDENTIALS_FILE
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Return the path to the credentials file."""
        return self._path

    # -------------------------
    # CredentialStore interface
    # -------------------------

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            values = self._load()
            values[key] = value
            self._save(values)

    def remove(self, key: str) -> None:
        with self._lock:
            values = self._load()
            if key not in values:
                return
            del values[key]
            if values:
                self._save(values)
            else:
                self._path.unlink(missing_ok=True)

    # -------------------------
    # Internal helpers
    # -------------------------

    def _load(self) -> dict[str, str]:
        """Load stored values from disk.

        Returns:
            The stored key/value pairs, or an empty dictionary if the file
            does not exist or cannot be parsed.
        """
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, values: dict[str, str]) -> None:
        """Persist ``values``, creating the directory and restricting access."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(values, indent=2), encoding="utf-8")
        self._path.chmod(0o600)
