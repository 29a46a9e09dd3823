"""
Testes para leitura com cache das fontes remotas (RemoteSyncService).
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from library_holds.clients.remote import (
    RemoteRecordNotFound,
    RemoteSourceNotConfigured,
    RemoteSourceUnavailable,
)
from library_holds.models.enums import LoanStatus, SnapshotSource
from library_holds.schemas.remote import CatalogItem, LoanRecord, Snapshot
from library_holds.services.sync import RemoteSyncService


class MemoryCache:
    """SnapshotCache em memória."""

    def __init__(self):
        self.entries: dict[tuple, Snapshot] = {}

    async def get(self, source, key):
        return self.entries.get((source, key))

    async def put(self, source, key, data, synced_at):
        self.entries[(source, key)] = Snapshot(data=data, last_synced=synced_at, source=source)
        return True


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def catalog():
    client = MagicMock()
    client.get_item_status = AsyncMock(return_value=CatalogItem(status="checked-out"))
    client.list_items = AsyncMock()
    return client


@pytest.fixture
def users():
    client = MagicMock()
    client.get_profile = AsyncMock(return_value={"name": "Ana"})
    client.get_loans = AsyncMock(return_value=[])
    return client


@pytest.fixture
def sync(catalog, users, memory_cache, clock):
    return RemoteSyncService(catalog=catalog, users=users, cache=memory_cache, clock=clock)


class TestAvailability:
    """Testes para get_availability (janela de 5 minutos)."""

    @pytest.mark.anyio
    async def test_miss_fetches_and_stores(self, sync, catalog, memory_cache, clock):
        result = await sync.get_availability("BK-1")

        assert result.success
        assert result.available is False
        assert result.status == "checked-out"
        assert result.from_cache is False
        catalog.get_item_status.assert_awaited_once_with("BK-1")
        snapshot = memory_cache.entries[(SnapshotSource.CATALOG, "BK-1")]
        assert snapshot.last_synced == clock.now

    @pytest.mark.anyio
    async def test_fresh_snapshot_served_from_cache(self, sync, catalog, clock):
        await sync.get_availability("BK-1")
        clock.advance(seconds=299)

        result = await sync.get_availability("BK-1")

        assert result.from_cache is True
        assert result.available is False
        assert catalog.get_item_status.await_count == 1

    @pytest.mark.anyio
    async def test_stale_snapshot_is_refreshed(self, sync, catalog, memory_cache, clock):
        await sync.get_availability("BK-1")
        catalog.get_item_status.return_value = CatalogItem(status="available")
        clock.advance(seconds=300)

        result = await sync.get_availability("BK-1")

        assert result.from_cache is False
        assert result.available is True
        assert memory_cache.entries[(SnapshotSource.CATALOG, "BK-1")].last_synced == clock.now

    @pytest.mark.anyio
    @pytest.mark.parametrize("error", [
        RemoteSourceNotConfigured("Fonte catálogo não configurada"),
        RemoteSourceUnavailable("catálogo fora do ar"),
        RemoteRecordNotFound("Registro não encontrado"),
    ])
    async def test_failure_is_not_unavailable(self, sync, catalog, error):
        """Falha na fonte é success=False, distinta de item emprestado."""
        catalog.get_item_status.side_effect = error

        result = await sync.get_availability("BK-1")

        assert result.success is False
        assert result.available is None
        assert result.error == error.message


class TestCatalogSync:
    """Testes para sincronizações em massa."""

    @pytest.mark.anyio
    async def test_sync_entire_catalog(self, sync, catalog, memory_cache):
        catalog.list_items.return_value = {
            "BK-1": CatalogItem(status="available"),
            "BK-2": CatalogItem(status="checked-out"),
        }

        result = await sync.sync_entire_catalog()

        assert result.success
        assert result.count == 2
        assert memory_cache.entries[(SnapshotSource.CATALOG, "BK-2")].data["status"] == "checked-out"

    @pytest.mark.anyio
    async def test_sync_entire_catalog_failure(self, sync, catalog):
        catalog.list_items.side_effect = RemoteSourceUnavailable("fora do ar")

        result = await sync.sync_entire_catalog()

        assert not result.success
        assert result.error == "fora do ar"

    @pytest.mark.anyio
    async def test_sync_active_holds_continues_after_failure(self, sync, catalog, mock_db):
        repo = MagicMock()
        repo.get_item_ids_with_open_holds = AsyncMock(return_value=["BK-1", "BK-2", "BK-3"])
        catalog.get_item_status.side_effect = [
            CatalogItem(status="checked-out"),
            RemoteSourceUnavailable("fora do ar"),
            CatalogItem(status="available"),
        ]

        with patch("library_holds.services.sync.HoldRepository", return_value=repo):
            result = await sync.sync_active_holds(mock_db)

        assert result.success
        assert result.count == 2


class TestUserProfile:
    """Testes para perfis (janela de 1 hora)."""

    @pytest.mark.anyio
    async def test_profile_cached_for_one_hour(self, sync, users, clock):
        first = await sync.get_user_profile("user_1")
        clock.advance(minutes=59)
        second = await sync.get_user_profile("user_1")

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.data == {"name": "Ana"}
        users.get_profile.assert_awaited_once()

    @pytest.mark.anyio
    async def test_profile_refetched_after_one_hour(self, sync, users, clock):
        await sync.get_user_profile("user_1")
        clock.advance(hours=1)

        result = await sync.get_user_profile("user_1")

        assert result.from_cache is False
        assert users.get_profile.await_count == 2

    @pytest.mark.anyio
    async def test_profile_failure(self, sync, users):
        users.get_profile.side_effect = RemoteSourceNotConfigured("não configurado")

        result = await sync.get_user_profile("user_1")

        assert not result.success
        assert result.data is None


class TestUserLoans:
    """Testes para sync_user_loans."""

    @pytest.mark.anyio
    async def test_loans_always_fetched_and_snapshotted(self, sync, users, memory_cache):
        users.get_loans.return_value = [
            LoanRecord(item_id="BK-1", status=LoanStatus.BORROWED),
        ]

        await sync.sync_user_loans("user_1")
        result = await sync.sync_user_loans("user_1")

        assert result.success
        assert result.loans[0].item_id == "BK-1"
        assert users.get_loans.await_count == 2
        snapshot = memory_cache.entries[(SnapshotSource.LOANS, "user_1")]
        assert snapshot.data == [{"itemId": "BK-1", "status": "BORROWED"}]

    @pytest.mark.anyio
    async def test_loans_failure(self, sync, users):
        users.get_loans.side_effect = RemoteSourceUnavailable("fora do ar")

        result = await sync.sync_user_loans("user_1")

        assert not result.success
        assert result.loans == []
