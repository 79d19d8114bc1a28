# -*- coding: utf-8 -*-
"""Client — bearer token store (in-memory slot + durable storage)."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class MemoryTokenStorage:
    """Durable-storage stand-in that lives as long as the object."""

    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token

    def read(self) -> Optional[str]:
        return self.token

    def write(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None


class FileTokenStorage:
    """Token kept in a single owner-readable file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def read(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cannot read token file %s: %s", self.path, exc)
            return None
        return token or None

    def write(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(token)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class TokenStore:
    """Owns the auth token. Only this object mutates it; writes are last-write-wins.

    ``get()`` hydrates from durable storage on first access and afterwards
    serves the in-memory copy. Expiry is not tracked here; the API decides.
    """

    def __init__(self, storage) -> None:
        self._storage = storage
        self._token: Optional[str] = None
        self._hydrated = False

    def get(self) -> Optional[str]:
        if not self._hydrated:
            self._token = self._storage.read()
            self._hydrated = True
        return self._token

    def set(self, token: Optional[str]) -> None:
        if token:
            self._storage.write(token)
        else:
            self._storage.clear()
        self._token = token or None
        self._hydrated = True
