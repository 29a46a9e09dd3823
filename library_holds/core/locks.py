"""
Exclusão mútua por item para a sequência "ler fila -> inserir hold".

Sem isso, dois place_hold concorrentes para o mesmo item leem o mesmo
tamanho de fila e gravam posições repetidas. O lock vale dentro de um
processo; cada item tem seu próprio asyncio.Lock, descartado quando
ninguém mais o segura ou espera.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ItemLockRegistry:
    """Registro de locks por item_id com contagem de referências."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._refs: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, item_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(item_id)
        if lock is None:
            lock = self._locks[item_id] = asyncio.Lock()
        self._refs[item_id] = self._refs.get(item_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._refs[item_id] -= 1
            if self._refs[item_id] == 0:
                del self._refs[item_id]
                del self._locks[item_id]


# Instância global usada pelo HoldService
item_locks = ItemLockRegistry()
