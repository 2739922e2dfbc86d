from __future__ import annotations

import json
import logging
import os
from typing import Protocol

from msal_extensions import FilePersistence, FilePersistenceWithDataProtection
from msal_extensions.persistence import PersistenceNotFound

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Durable key/value storage for session tokens, keyed per backend kind."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, token: str) -> None:
        ...

    def clear(self, key: str) -> None:
        ...


class InMemoryCredentialStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, token: str) -> None:
        self._values[key] = token

    def clear(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)


class FileCredentialStore:
    """Credential store persisted as one JSON document.

    Uses DPAPI-protected persistence on Windows and a plain file elsewhere.
    Every operation re-reads the file, so a value written by ``set`` is
    visible to the next ``get`` immediately.
    """

    def __init__(self, path: str):
        self._persistence = self._build_persistence(path)

    @staticmethod
    def _build_persistence(path: str):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            return FilePersistenceWithDataProtection(path)
        except Exception:
            return FilePersistence(path)

    @property
    def location(self) -> str:
        return self._persistence.get_location()

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value or None

    def set(self, key: str, token: str) -> None:
        values = self._load()
        values[key] = token
        self._save(values)

    def clear(self, key: str) -> None:
        values = self._load()
        if values.pop(key, None) is not None:
            self._save(values)

    def _load(self) -> dict[str, str]:
        try:
            raw = self._persistence.load()
        except PersistenceNotFound:
            return {}

        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Credential file %s is corrupt; ignoring it", self.location)
            return {}

        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items() if value}

    def _save(self, values: dict[str, str]) -> None:
        self._persistence.save(json.dumps(values))
