import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from assetdesk.core.config import AppSettings
from assetdesk.core.errors import OperationFailed
from assetdesk.db.blobstore import (
    Collection,
    JsonFileBlobStore,
    MemoryBlobStore,
    SqlBlobStore,
    build_blob_store,
)
from assetdesk.db.session import build_engine, build_sessionmaker
from assetdesk.models.blob import Blob


@pytest.fixture()
def sql_store():
    return SqlBlobStore(build_engine("sqlite://"))


def test_missing_collection_loads_empty():
    assert MemoryBlobStore().load(Collection.ASSETS) == []


@pytest.mark.parametrize("raw", ["{not json", '{"id": "a1"}', '"assets"', "null"])
def test_unreadable_content_loads_empty(raw):
    store = MemoryBlobStore({Collection.ASSETS: raw})

    assert store.load(Collection.ASSETS) == []


def test_non_object_entries_are_dropped():
    store = MemoryBlobStore({Collection.USERS: '[{"id": "u1"}, 3, "x", null]'})

    assert store.load(Collection.USERS) == [{"id": "u1"}]


def test_save_replaces_whole_collection():
    store = MemoryBlobStore()
    store.save(Collection.ASSETS, [{"id": "a1"}, {"id": "a2"}])

    store.save(Collection.ASSETS, [{"id": "a3"}])

    assert store.load(Collection.ASSETS) == [{"id": "a3"}]


def test_json_files_one_per_collection(tmp_path):
    store = JsonFileBlobStore(tmp_path / "data")

    store.save(Collection.STOCK_ITEMS, [{"id": "s1", "name": "Café filters"}])

    path = tmp_path / "data" / "stockItems.json"
    assert path.exists()
    assert "Café filters" in path.read_text(encoding="utf-8")
    assert store.load(Collection.STOCK_ITEMS) == [{"id": "s1", "name": "Café filters"}]
    assert store.load(Collection.USERS) == []


def test_json_file_with_garbage_loads_empty(tmp_path):
    (tmp_path / "assets.json").write_text("<<<", encoding="utf-8")

    assert JsonFileBlobStore(tmp_path).load(Collection.ASSETS) == []


def test_json_write_failure_raises_operation_failed(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileBlobStore(blocker)

    with pytest.raises(OperationFailed):
        store.save(Collection.ASSETS, [])


def test_sql_store_round_trip(sql_store):
    sql_store.save(Collection.ASSETS, [{"id": "a1"}])
    sql_store.save(Collection.ASSETS, [{"id": "a1"}, {"id": "a2"}])

    assert sql_store.load(Collection.ASSETS) == [{"id": "a1"}, {"id": "a2"}]
    assert sql_store.load(Collection.USERS) == []

    SessionLocal = build_sessionmaker(sql_store.engine)
    with SessionLocal() as db:
        rows = db.query(Blob).all()
    assert [row.key for row in rows] == ["assets"]
    assert rows[0].updated_at.endswith("Z")


def test_sql_store_wraps_database_errors(sql_store):
    with sql_store.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE blobs")

    with pytest.raises(OperationFailed):
        sql_store.load(Collection.ASSETS)


@pytest.mark.parametrize(
    "backend, expected",
    [("memory", MemoryBlobStore), ("json", JsonFileBlobStore), ("sqlite", SqlBlobStore)],
)
def test_build_blob_store_picks_backend(tmp_path, backend, expected):
    settings = AppSettings(STORE_BACKEND=backend, DATA_DIR=tmp_path, DB_URL=f"sqlite:///{tmp_path / 'test.db'}")

    assert isinstance(build_blob_store(settings), expected)
