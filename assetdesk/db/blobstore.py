"""Named-collection storage.

Every collection (users, assets, stock items, reset tokens) is kept as a
single JSON array under a string key. ``load`` hands back the whole array and
``save`` replaces it; there are no partial writes and no transactions.

Unreadable content is not an error: a missing key, text that is not JSON, or
JSON that is not an array all load as an empty collection. Problems talking
to the backing storage itself are raised as ``OperationFailed``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.config import AppSettings
from ..core.errors import OperationFailed
from ..models.blob import Blob
from .session import Base, build_engine, build_sessionmaker

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class Collection:
    USERS = "users"
    ASSETS = "assets"
    STOCK_ITEMS = "stockItems"
    RESET_TOKENS = "password_reset_tokens"

    ALL = (USERS, ASSETS, STOCK_ITEMS, RESET_TOKENS)


class BlobStore:
    """Base class: subclasses only move raw text in and out."""

    def _read(self, key: str) -> str | None:
        raise NotImplementedError

    def _write(self, key: str, text: str) -> None:
        raise NotImplementedError

    def load(self, collection: str) -> list[Record]:
        raw = self._read(collection)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("blobstore.unreadable", extra={"extra_data": {"collection": collection}})
            return []
        if not isinstance(data, list):
            logger.warning("blobstore.not_a_list", extra={"extra_data": {"collection": collection}})
            return []
        return [item for item in data if isinstance(item, dict)]

    def save(self, collection: str, records: list[Record]) -> None:
        self._write(collection, json.dumps(records, ensure_ascii=False))


class MemoryBlobStore(BlobStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.blobs: dict[str, str] = dict(initial or {})

    def _read(self, key: str) -> str | None:
        return self.blobs.get(key)

    def _write(self, key: str, text: str) -> None:
        self.blobs[key] = text


class JsonFileBlobStore(BlobStore):
    """One ``<collection>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise OperationFailed(f"Could not read {key}") from exc

    def _write(self, key: str, text: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise OperationFailed(f"Could not write {key}") from exc


class SqlBlobStore(BlobStore):
    """Collections stored as rows of the ``blobs`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.SessionLocal = build_sessionmaker(engine)
        Base.metadata.create_all(bind=engine)

    def _read(self, key: str) -> str | None:
        try:
            with self.SessionLocal() as db:
                row = db.get(Blob, key)
                return row.value if row else None
        except SQLAlchemyError as exc:
            raise OperationFailed(f"Could not read {key}") from exc

    def _write(self, key: str, text: str) -> None:
        stamp = datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
        try:
            with self.SessionLocal() as db:
                row = db.get(Blob, key)
                if row is None:
                    db.add(Blob(key=key, value=text, updated_at=stamp))
                else:
                    row.value = text
                    row.updated_at = stamp
                db.commit()
        except SQLAlchemyError as exc:
            raise OperationFailed(f"Could not write {key}") from exc


def build_blob_store(settings: AppSettings) -> BlobStore:
    if settings.STORE_BACKEND == "memory":
        return MemoryBlobStore()
    if settings.STORE_BACKEND == "json":
        return JsonFileBlobStore(settings.DATA_DIR)
    return SqlBlobStore(build_engine(settings.database_url))
