"""
Leitura com cache das fontes remotas (catálogo e diretório de usuários).

Política de leitura (read-through):
    - Snapshot mais novo que a janela de frescor -> serve do cache
      (from_cache=True)
    - Caso contrário busca na fonte, sobrescreve o snapshot com o dado novo
      e o instante atual, e serve from_cache=False
    - Fonte não configurada, fora do ar ou registro inexistente -> resultado
      com success=False, distinto de "item indisponível"

Janelas de frescor:
    - Perfil de usuário: 1 hora (PROFILE_FRESHNESS_SECONDS)
    - Catálogo/disponibilidade: 5 minutos (CATALOG_FRESHNESS_SECONDS)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.clients.remote import (
    CatalogClient,
    RemoteSourceError,
    UserDirectoryClient,
)
from library_holds.core.cache import SnapshotCache, snapshot_cache
from library_holds.core.clock import Clock, utcnow
from library_holds.core.config import get_settings
from library_holds.models.enums import ItemStatus, SnapshotSource
from library_holds.repositories.hold import HoldRepository
from library_holds.schemas.remote import (
    AvailabilityResult,
    CatalogItem,
    LoansResult,
    ProfileResult,
    Snapshot,
    SyncResult,
)

logger = logging.getLogger(__name__)
settings = get_settings()


class RemoteSyncService:
    """Service de sincronização e cache das fontes remotas."""

    def __init__(
        self,
        catalog: CatalogClient | None = None,
        users: UserDirectoryClient | None = None,
        cache: SnapshotCache | None = None,
        clock: Clock = utcnow,
    ):
        self.catalog = catalog or CatalogClient()
        self.users = users or UserDirectoryClient()
        self.cache = cache or snapshot_cache
        self.clock = clock

    def _is_fresh(self, snapshot: Snapshot | None, window_seconds: int) -> bool:
        return snapshot is not None and snapshot.age_seconds(self.clock()) < window_seconds

    # ==========================================
    # Catálogo
    # ==========================================

    async def sync_catalog_item(self, item_id: str) -> CatalogItem:
        """
        Busca o item na fonte e sobrescreve o snapshot.

        Raises:
            RemoteSourceError: Fonte não configurada, fora do ar ou item inexistente
        """
        item = await self.catalog.get_item_status(item_id)
        await self.cache.put(
            SnapshotSource.CATALOG,
            item_id,
            item.model_dump(mode="json"),
            self.clock(),
        )
        logger.debug(f"Item {item_id} sincronizado do catálogo")
        return item

    async def get_availability(self, item_id: str) -> AvailabilityResult:
        """
        Disponibilidade de um item, servida do cache quando fresca.

        Returns:
            AvailabilityResult; success=False se não foi possível determinar
        """
        snapshot = await self.cache.get(SnapshotSource.CATALOG, item_id)
        if self._is_fresh(snapshot, settings.CATALOG_FRESHNESS_SECONDS):
            item_status = snapshot.data.get("status")
            return AvailabilityResult(
                success=True,
                available=item_status == ItemStatus.AVAILABLE.value,
                status=item_status,
                from_cache=True,
            )

        try:
            item = await self.sync_catalog_item(item_id)
        except RemoteSourceError as e:
            logger.warning(f"Disponibilidade de {item_id} indeterminada: {e.message}")
            return AvailabilityResult(success=False, error=e.message)

        return AvailabilityResult(
            success=True,
            available=item.status == ItemStatus.AVAILABLE.value,
            status=item.status,
            from_cache=False,
        )

    async def sync_entire_catalog(self) -> SyncResult:
        """Sobrescreve os snapshots de todos os itens do catálogo."""
        try:
            items = await self.catalog.list_items()
        except RemoteSourceError as e:
            logger.warning(f"Sincronização do catálogo falhou: {e.message}")
            return SyncResult(success=False, error=e.message)

        synced_at = self.clock()
        for item_id, item in items.items():
            await self.cache.put(
                SnapshotSource.CATALOG,
                item_id,
                item.model_dump(mode="json"),
                synced_at,
            )

        logger.info(f"Catálogo sincronizado: {len(items)} itens")
        return SyncResult(success=True, count=len(items))

    async def sync_active_holds(self, db: AsyncSession) -> SyncResult:
        """
        Atualiza a disponibilidade de todo item que tem hold aberto.

        Falhas por item são registradas e não interrompem a sincronização.
        """
        item_ids = await HoldRepository(db).get_item_ids_with_open_holds()
        logger.info(f"Sincronizando disponibilidade de {len(item_ids)} itens com holds")

        synced = 0
        for item_id in item_ids:
            try:
                await self.sync_catalog_item(item_id)
                synced += 1
            except RemoteSourceError as e:
                logger.warning(f"Falha ao sincronizar item {item_id}: {e.message}")

        return SyncResult(success=True, count=synced)

    # ==========================================
    # Usuários e empréstimos
    # ==========================================

    async def sync_user_profile(self, user_id: str) -> ProfileResult:
        """Busca o perfil na fonte e sobrescreve o snapshot."""
        try:
            profile = await self.users.get_profile(user_id)
        except RemoteSourceError as e:
            logger.warning(f"Perfil de {user_id} indisponível: {e.message}")
            return ProfileResult(success=False, error=e.message)

        await self.cache.put(SnapshotSource.PROFILE, user_id, profile, self.clock())
        logger.debug(f"Perfil {user_id} sincronizado")
        return ProfileResult(success=True, data=profile, from_cache=False)

    async def get_user_profile(self, user_id: str) -> ProfileResult:
        """Perfil de usuário, servido do cache quando fresco (1 hora)."""
        snapshot = await self.cache.get(SnapshotSource.PROFILE, user_id)
        if self._is_fresh(snapshot, settings.PROFILE_FRESHNESS_SECONDS):
            return ProfileResult(success=True, data=snapshot.data, from_cache=True)
        return await self.sync_user_profile(user_id)

    async def sync_user_loans(self, user_id: str) -> LoansResult:
        """
        Busca os empréstimos do usuário (sempre na fonte) e grava o snapshot.

        Usado pela elegibilidade de holds; nunca servido do cache.
        """
        try:
            loans = await self.users.get_loans(user_id)
        except RemoteSourceError as e:
            logger.warning(f"Empréstimos de {user_id} indisponíveis: {e.message}")
            return LoansResult(success=False, error=e.message)

        await self.cache.put(
            SnapshotSource.LOANS,
            user_id,
            [loan.model_dump(mode="json", by_alias=True) for loan in loans],
            self.clock(),
        )
        logger.debug(f"Empréstimos de {user_id} sincronizados: {len(loans)}")
        return LoansResult(success=True, loans=loans)
