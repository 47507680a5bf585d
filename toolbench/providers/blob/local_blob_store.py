"""Filesystem-backed blob store.

Each key maps to a file under ``root_dir`` (``analytics/2026-02-11.json``
becomes ``{root_dir}/analytics/2026-02-11.json``).  Writes go to a
temporary file in the same directory and are moved into place with
``os.replace`` so a reader never sees a half-written document.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from toolbench.interfaces.blob_store import IBlobStore
from toolbench.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)


class LocalBlobStore(IBlobStore):
    """JSON documents as files under a root directory.

    Parameters
    ----------
    root_dir:
        Directory holding the blobs.  Created on first write.
    """

    def __init__(self, root_dir: str | Path = "data/blobs") -> None:
        self._root = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # IBlobStore implementation
    # ------------------------------------------------------------------

    async def get_json(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._read, key)

    async def put_json(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._write, key, value)
        logger.debug("blob_written", key=key)

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.debug("blob_deleted", key=key)

    async def list(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._list, prefix)

    def get_provider_name(self) -> str:
        return "local"

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        root = self._root.resolve()
        if root != path and root not in path.parents:
            raise StorageError(message=f"Invalid blob key: {key}", provider_name="local")
        return path

    def _read(self, key: str) -> Any | None:
        path = self._path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(message=f"Failed to read blob {key}: {exc}", provider_name="local") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(message=f"Blob {key} is not valid JSON", provider_name="local") from exc

    def _write(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        payload = json.dumps(value, indent=2)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(message=f"Failed to write blob {key}: {exc}", provider_name="local") from exc

    def _list(self, prefix: str) -> list[str]:
        if not self._root.exists():
            return []
        keys = []
        for path in self._root.rglob("*"):
            if not path.is_file() or path.name.startswith("."):
                continue
            key = path.relative_to(self._root).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)
