"""
Snapshots em cache das fontes remotas, guardados no Redis.

Cada entrada guarda o dado remoto, o instante da última sincronização e a
origem (catalog, profile, loans). A decisão de frescor fica com quem lê
(RemoteSyncService); este módulo só lê e grava snapshots.

Chaves:
    cache:snapshot:<origem>:<chave>

Falhas do Redis nunca propagam: leitura vira "sem cache" e escrita devolve
False, e o fluxo segue buscando na fonte remota.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from library_holds.core.config import get_settings
from library_holds.db.redis import get_redis_client
from library_holds.models.enums import SnapshotSource
from library_holds.schemas.remote import Snapshot

logger = logging.getLogger(__name__)
settings = get_settings()


class SnapshotCache:
    """
    Leitura e escrita de snapshots no Redis.

    Único escritor dos snapshots; Eligibility nunca grava aqui.
    """

    PREFIX = "cache:snapshot"

    def __init__(self, ttl: Optional[int] = None):
        """
        Args:
            ttl: TTL de retenção no Redis em segundos (default: config).
                 Não é a janela de frescor, só limita o lixo acumulado.
        """
        self.ttl = ttl or settings.SNAPSHOT_TTL_SECONDS

    def _key(self, source: SnapshotSource, key: str) -> str:
        return f"{self.PREFIX}:{source.value}:{key}"

    async def get(self, source: SnapshotSource, key: str) -> Optional[Snapshot]:
        """
        Busca snapshot.

        Returns:
            Snapshot ou None se ausente, cache desabilitado ou Redis fora
        """
        client = get_redis_client()
        if not settings.CACHE_ENABLED or client is None:
            return None

        try:
            raw = await client.get(self._key(source, key))
            if raw:
                return Snapshot.model_validate_json(raw)
            return None
        except Exception as e:
            logger.warning(f"Erro ao ler snapshot {source.value}:{key}: {e}")
            return None

    async def put(
        self,
        source: SnapshotSource,
        key: str,
        data: Any,
        synced_at: datetime,
    ) -> bool:
        """
        Sobrescreve o snapshot com dado novo e timestamp de sincronização.

        Returns:
            True se salvou com sucesso, False caso contrário
        """
        client = get_redis_client()
        if not settings.CACHE_ENABLED or client is None:
            return False

        snapshot = Snapshot(data=data, last_synced=synced_at, source=source)
        try:
            await client.setex(
                self._key(source, key),
                self.ttl,
                snapshot.model_dump_json(),
            )
            return True
        except Exception as e:
            logger.warning(f"Erro ao salvar snapshot {source.value}:{key}: {e}")
            return False


# Instância global para uso nos services
snapshot_cache = SnapshotCache()
