"""
Model de hold (fila de espera por item emprestado).
"""

from sqlalchemy import Boolean, Index, Integer, String, text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from library_holds.db.session import Base
from library_holds.models.base import UUIDMixin, TimestampMixin
from library_holds.models.enums import HoldStatus


class Hold(Base, UUIDMixin, TimestampMixin):
    """
    Lugar de um usuário na fila de um item atualmente emprestado.

    Regras de negócio:
        - No máximo um hold não cancelado por (user_id, item_id)
        - Holds não cancelados de um item têm posições 1..N, sem buracos,
          na ordem de criação
        - Cancelar um hold remove o registro e reordena a fila do item

    Attributes:
        id: UUID único do hold
        user_id: Identificador do usuário no diretório externo
        item_id: Identificador do item no catálogo externo
        status: Status atual do hold
        position: Posição na fila do item (1 = próximo a receber)
        notified: Se o usuário já foi avisado da mudança de status
    """
    __tablename__ = "holds"

    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    item_id: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[HoldStatus] = mapped_column(
        SQLEnum(HoldStatus, name="hold_status", create_type=True),
        nullable=False,
        default=HoldStatus.WAITING,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_holds_user_id", "user_id"),
        # Fila de um item ordenada por posição
        Index("ix_holds_item_position", "item_id", "position"),
        # Reparo da fila percorre por ordem de criação
        Index("ix_holds_item_created", "item_id", "created_at"),
        # Um hold aberto por usuário e item
        Index(
            "uq_holds_user_item_open",
            "user_id",
            "item_id",
            unique=True,
            postgresql_where=text("status <> 'CANCELLED'"),
            sqlite_where=text("status <> 'CANCELLED'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Hold {self.id} - {self.item_id} #{self.position} {self.status.value}>"

    @property
    def is_open(self) -> bool:
        """Retorna True se o hold ainda ocupa lugar na fila."""
        return self.status != HoldStatus.CANCELLED
