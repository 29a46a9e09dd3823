"""
Repository para operações de Hold no banco de dados.
"""

from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.models.enums import HoldStatus
from library_holds.models.hold import Hold
from library_holds.repositories.base import BaseRepository


class HoldRepository(BaseRepository[Hold]):
    """Repository para operações de Hold."""

    def __init__(self, db: AsyncSession):
        super().__init__(Hold, db)

    async def get_open_by_user_and_item(
        self,
        user_id: str,
        item_id: str,
    ) -> Hold | None:
        """
        Busca hold não cancelado de um usuário para um item.

        Usado para verificar duplicatas antes de criar novo hold.
        """
        result = await self.db.execute(
            select(Hold)
            .where(
                Hold.user_id == user_id,
                Hold.item_id == item_id,
                Hold.status != HoldStatus.CANCELLED,
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def count_open_by_item(self, item_id: str) -> int:
        """Conta holds não cancelados de um item (tamanho da fila)."""
        result = await self.db.execute(
            select(func.count(Hold.id))
            .where(
                Hold.item_id == item_id,
                Hold.status != HoldStatus.CANCELLED,
            )
        )
        return result.scalar_one()

    async def get_queue(self, item_id: str) -> list[Hold]:
        """Fila de um item: holds não cancelados por posição crescente."""
        result = await self.db.execute(
            select(Hold)
            .where(
                Hold.item_id == item_id,
                Hold.status != HoldStatus.CANCELLED,
            )
            .order_by(Hold.position.asc(), Hold.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_queue_by_creation(self, item_id: str) -> list[Hold]:
        """
        Holds não cancelados de um item na ordem de criação.

        Usada pelo reparo da fila; empates em created_at são desfeitos por id.
        """
        result = await self.db.execute(
            select(Hold)
            .where(
                Hold.item_id == item_id,
                Hold.status != HoldStatus.CANCELLED,
            )
            .order_by(Hold.created_at.asc(), Hold.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_user(self, user_id: str) -> list[Hold]:
        """Lista holds de um usuário, mais recentes primeiro."""
        result = await self.db.execute(
            select(Hold)
            .where(Hold.user_id == user_id)
            .order_by(Hold.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_item_ids_with_open_holds(self) -> list[str]:
        """IDs distintos de itens com pelo menos um hold aberto."""
        result = await self.db.execute(
            select(Hold.item_id)
            .where(Hold.status != HoldStatus.CANCELLED)
            .distinct()
        )
        return list(result.scalars().all())

    async def delete_if_exists(self, hold_id: UUID) -> bool:
        """
        Remove o hold numa única instrução.

        Returns:
            False se o hold não existia mais no momento da remoção
        """
        result = await self.db.execute(
            delete(Hold).where(Hold.id == hold_id)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            return False
        await self.db.commit()
        return True

    async def set_position(self, hold_id: UUID, position: int) -> bool:
        """Grava a posição de um hold (idempotente)."""
        result = await self.db.execute(
            update(Hold)
            .where(Hold.id == hold_id)
            .values(position=position)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def update_status(
        self,
        hold: Hold,
        status: HoldStatus,
        notified: bool,
    ) -> Hold:
        """Atualiza status e flag de notificação de um hold."""
        hold.status = status
        hold.notified = notified
        await self.db.commit()
        await self.db.refresh(hold)
        return hold
