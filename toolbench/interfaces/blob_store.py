"""Abstract base class for JSON blob storage.

Analytics and the feedback board persist whole JSON documents under string
keys such as ``analytics/2026-02-11.json``.  Implementations may use the
local filesystem, S3, or any other key-addressable object store.  Reads and
writes are whole-document; there is no partial update or locking across
processes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IBlobStore(ABC):
    """Contract for key-addressable JSON document storage."""

    @abstractmethod
    async def get_json(self, key: str) -> Any | None:
        """Load and decode the document stored under *key*.

        Parameters
        ----------
        key:
            Slash-separated object key.

        Returns
        -------
        Any or None
            The decoded JSON value, or ``None`` when the key does not exist.

        Raises
        ------
        toolbench.utils.errors.StorageError
            If the object exists but is not valid JSON, or the backend fails.
        """

    @abstractmethod
    async def put_json(self, key: str, value: Any) -> None:
        """Encode *value* as JSON and store it under *key*, replacing any existing document."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*.  This is a no-op when the key does not exist."""

    @abstractmethod
    async def list(self, prefix: str = "") -> list[str]:
        """Return the keys that start with *prefix*, sorted."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
