"""Tests for the JSON record collections."""

import asyncio
import json

import pytest

from ts_assistant.config import StorageConfig
from ts_assistant.schemas.session_schema import Domain
from ts_assistant.tools.storage import JsonRecordStore, build_stores


class TestJsonRecordStore:
    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, tmp_path):
        store = JsonRecordStore(tmp_path / "nope.json")
        assert await store.load_all() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "leads.json"
        path.write_text("{not json", encoding="utf-8")
        assert await JsonRecordStore(path).load_all() == []

    @pytest.mark.asyncio
    async def test_non_array_reads_empty(self, tmp_path):
        path = tmp_path / "leads.json"
        path.write_text('{"name": "Ana"}', encoding="utf-8")
        assert await JsonRecordStore(path).load_all() == []

    @pytest.mark.asyncio
    async def test_append_persists_and_creates_directory(self, tmp_path):
        path = tmp_path / "data" / "leads.json"
        store = JsonRecordStore(path)
        assert await store.append_one({"name": "Ana", "note": "ação"}) is True
        assert json.loads(path.read_text(encoding="utf-8")) == [{"name": "Ana", "note": "ação"}]

    @pytest.mark.asyncio
    async def test_append_after_corruption_starts_fresh(self, tmp_path):
        path = tmp_path / "leads.json"
        path.write_text("garbage", encoding="utf-8")
        store = JsonRecordStore(path)
        await store.append_one({"name": "Ana"})
        assert await store.load_all() == [{"name": "Ana"}]

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_not_lost(self, tmp_path):
        store = JsonRecordStore(tmp_path / "bookings.json")
        results = await asyncio.gather(*(store.append_one({"n": i}) for i in range(20)))
        assert all(results)
        records = await store.load_all()
        assert sorted(r["n"] for r in records) == list(range(20))

    @pytest.mark.asyncio
    async def test_unserialisable_record_returns_false(self, tmp_path):
        path = tmp_path / "leads.json"
        store = JsonRecordStore(path)
        await store.append_one({"name": "Ana"})
        assert await store.append_one({"bad": object()}) is False
        assert await store.load_all() == [{"name": "Ana"}]


class TestBuildStores:
    def test_one_collection_per_domain(self, tmp_path):
        stores = build_stores(StorageConfig(data_dir=str(tmp_path)))
        assert set(stores) == set(Domain)
        assert stores[Domain.LEAD].path == tmp_path / "leads.json"
        assert stores[Domain.SUPPORT].path == tmp_path / "tickets.json"
        assert stores[Domain.SCHEDULE].path == tmp_path / "bookings.json"
