"""
Schemas Pydantic para Hold.
"""

from typing import Any
from uuid import UUID

from pydantic import Field

from library_holds.models.enums import HoldStatus
from library_holds.schemas.base import BaseSchema, OperationResult, TimestampSchema


class HoldCreate(BaseSchema):
    """Schema para criação de hold (usuário vem do token)."""
    item_id: str = Field(..., description="Identificador do item no catálogo")


class HoldStatusUpdate(BaseSchema):
    """Schema para atualização administrativa de status."""
    status: HoldStatus
    notified: bool = False


class HoldRead(TimestampSchema):
    """Schema para leitura de hold."""
    id: UUID
    user_id: str
    item_id: str
    status: HoldStatus
    position: int
    notified: bool


class HoldResult(OperationResult):
    """Resultado de operações que devolvem um único hold."""
    hold: HoldRead | None = None


class HoldListResult(OperationResult):
    """Resultado de listagens de holds."""
    holds: list[HoldRead] = Field(default_factory=list)
    user_info: dict[str, Any] | None = Field(
        None,
        description="Perfil do usuário (do cache), quando disponível",
    )
