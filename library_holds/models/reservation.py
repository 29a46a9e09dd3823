"""
Model de reserva de item disponível.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from library_holds.db.session import Base
from library_holds.models.base import UUIDMixin, TimestampMixin
from library_holds.models.enums import ReservationStatus


class Reservation(Base, UUIDMixin, TimestampMixin):
    """
    Reserva de um item disponível, guardado para retirada.

    Fluxo de estados:
        1. ACTIVE: Item separado para o usuário até expires_at
        2. CANCELLED: Usuário cancelou (terminal)
        3. EXPIRED: Passou de expires_at sem retirada (terminal)

    Regras de negócio:
        - expires_at = created_at + 7 dias, definido na criação
        - No máximo uma reserva ACTIVE por (user_id, item_id)
        - Somente a varredura de expiração faz ACTIVE -> EXPIRED

    Attributes:
        id: UUID único da reserva
        user_id: Identificador do usuário no diretório externo
        item_id: Identificador do item no catálogo externo
        status: Status atual da reserva
        expires_at: Data/hora limite para retirada
    """
    __tablename__ = "reservations"

    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        SQLEnum(ReservationStatus, name="reservation_status", create_type=True),
        nullable=False,
        default=ReservationStatus.ACTIVE,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_reservations_user_id", "user_id"),
        Index("ix_reservations_item_id", "item_id"),
        # Varredura de expiração: ACTIVE com expires_at vencido
        Index("ix_reservations_status_expires", "status", "expires_at"),
        # Evitar reserva ativa duplicada do mesmo usuário para o mesmo item
        Index(
            "uq_reservations_user_item_active",
            "user_id",
            "item_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Reservation {self.id} - {self.status.value}>"

    @property
    def is_active(self) -> bool:
        """Retorna True se a reserva está ativa."""
        return self.status == ReservationStatus.ACTIVE

    def is_expired_at(self, now: datetime) -> bool:
        """Retorna True se a reserva ativa já venceu em `now` (estritamente)."""
        return self.is_active and self.expires_at < now
