"""
Repository para operações de Reservation no banco de dados.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.models.enums import ReservationStatus
from library_holds.models.reservation import Reservation
from library_holds.repositories.base import BaseRepository


class ReservationRepository(BaseRepository[Reservation]):
    """Repository para operações de Reservation."""

    def __init__(self, db: AsyncSession):
        super().__init__(Reservation, db)

    async def get_active_by_user_and_item(
        self,
        user_id: str,
        item_id: str,
    ) -> Reservation | None:
        """
        Busca reserva ACTIVE de um usuário para um item.

        Usado para verificar duplicatas antes de criar nova reserva.
        """
        result = await self.db.execute(
            select(Reservation)
            .where(
                Reservation.user_id == user_id,
                Reservation.item_id == item_id,
                Reservation.status == ReservationStatus.ACTIVE,
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_user(self, user_id: str) -> list[Reservation]:
        """Lista reservas de um usuário, mais recentes primeiro."""
        result = await self.db.execute(
            select(Reservation)
            .where(Reservation.user_id == user_id)
            .order_by(Reservation.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_expired_active_ids(self, now: datetime) -> list[UUID]:
        """
        IDs das reservas ACTIVE com expires_at < now.

        Comparação estrita: reserva que vence exatamente em `now` fica ativa.
        """
        result = await self.db.execute(
            select(Reservation.id)
            .where(
                Reservation.status == ReservationStatus.ACTIVE,
                Reservation.expires_at < now,
            )
            .order_by(Reservation.expires_at.asc())
        )
        return list(result.scalars().all())

    async def transition_if_active(
        self,
        reservation_id: UUID,
        status: ReservationStatus,
    ) -> bool:
        """
        Move uma reserva de ACTIVE para `status` numa única instrução.

        O status é reverificado no próprio UPDATE, então um cancelamento
        concorrente nunca é sobrescrito.

        Returns:
            True se a reserva estava ACTIVE e foi atualizada
        """
        result = await self.db.execute(
            update(Reservation)
            .where(
                Reservation.id == reservation_id,
                Reservation.status == ReservationStatus.ACTIVE,
            )
            .values(status=status)
        )
        await self.db.commit()
        return result.rowcount == 1
