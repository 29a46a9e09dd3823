"""
Schemas Pydantic para Reservation.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from library_holds.models.enums import ReservationStatus
from library_holds.schemas.base import BaseSchema, OperationResult, TimestampSchema


class ReservationCreate(BaseSchema):
    """Schema para criação de reserva (usuário vem do token)."""
    item_id: str = Field(..., description="Identificador do item no catálogo")


class ReservationRead(TimestampSchema):
    """Schema para leitura de reserva."""
    id: UUID
    user_id: str
    item_id: str
    status: ReservationStatus
    expires_at: datetime


class ReservationResult(OperationResult):
    """Resultado de operações que devolvem uma única reserva."""
    reservation: ReservationRead | None = None


class ReservationListResult(OperationResult):
    """Resultado de listagens de reservas."""
    reservations: list[ReservationRead] = Field(default_factory=list)


class ExpirationResult(OperationResult):
    """Resultado da varredura de expiração."""
    expired_count: int = 0
    expired_ids: list[UUID] = Field(
        default_factory=list,
        description="IDs efetivamente expirados nesta varredura",
    )
