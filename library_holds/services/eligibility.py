"""
Regras de elegibilidade para holds e reservas.

Regras:
    - Hold: item emprestado (não disponível), sem hold aberto do mesmo
      usuário para o item, e usuário sem empréstimo ativo do item
    - Reserva: item disponível e sem reserva ACTIVE do mesmo usuário

Modo degradado: se a disponibilidade não pode ser determinada (catálogo não
configurado ou fora do ar), o pedido é permitido com um warning no log em
vez de bloquear o usuário.

Avaliar elegibilidade só lê: pode atualizar snapshots de cache e sincronizar
empréstimos, mas nunca grava holds ou reservas.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.models.enums import LoanStatus
from library_holds.repositories.hold import HoldRepository
from library_holds.repositories.reservation import ReservationRepository
from library_holds.services.sync import RemoteSyncService

logger = logging.getLogger(__name__)

MSG_ITEM_AVAILABLE = "Item disponível - faça uma reserva em vez de um hold"
MSG_ITEM_CHECKED_OUT = "Item emprestado - entre na fila com um hold em vez de reservar"
MSG_DUPLICATE_HOLD = "Você já possui um hold para este item"
MSG_DUPLICATE_RESERVATION = "Você já possui uma reserva ativa para este item"
MSG_ACTIVE_LOAN = "Você está com este item emprestado no momento"


@dataclass(frozen=True)
class EligibilityResult:
    """
    Veredito de elegibilidade.

    Attributes:
        valid: Se o pedido pode prosseguir
        reason: Motivo exibível quando inválido
        duplicate: Se a rejeição é por pedido duplicado
        degraded: Se a disponibilidade não pôde ser verificada
    """
    valid: bool
    reason: str | None = None
    duplicate: bool = False
    degraded: bool = False


class EligibilityService:
    """Service de elegibilidade para holds e reservas."""

    def __init__(self, db: AsyncSession, sync: RemoteSyncService | None = None):
        self.db = db
        self.hold_repo = HoldRepository(db)
        self.reservation_repo = ReservationRepository(db)
        self.sync = sync or RemoteSyncService()

    async def validate_hold_request(self, user_id: str, item_id: str) -> EligibilityResult:
        """
        Verifica se o usuário pode entrar na fila do item.

        Ordem:
            1. Disponibilidade (item disponível -> usar reserva)
            2. Hold aberto duplicado
            3. Empréstimo ativo do mesmo item
        """
        degraded = False
        availability = await self.sync.get_availability(item_id)
        if not availability.success:
            logger.warning(
                f"Disponibilidade de {item_id} indeterminada; permitindo hold de {user_id}"
            )
            degraded = True
        elif availability.available:
            return EligibilityResult(valid=False, reason=MSG_ITEM_AVAILABLE)

        existing = await self.hold_repo.get_open_by_user_and_item(user_id, item_id)
        if existing:
            return EligibilityResult(
                valid=False,
                reason=MSG_DUPLICATE_HOLD,
                duplicate=True,
                degraded=degraded,
            )

        loans = await self.sync.sync_user_loans(user_id)
        if not loans.success:
            logger.warning(
                f"Empréstimos de {user_id} indisponíveis; verificação de empréstimo ignorada"
            )
        elif any(
            loan.item_id == item_id and loan.status == LoanStatus.BORROWED
            for loan in loans.loans
        ):
            return EligibilityResult(valid=False, reason=MSG_ACTIVE_LOAN, degraded=degraded)

        return EligibilityResult(valid=True, degraded=degraded)

    async def validate_reservation_request(
        self,
        user_id: str,
        item_id: str,
    ) -> EligibilityResult:
        """
        Verifica se o usuário pode reservar o item.

        Ordem:
            1. Disponibilidade (item emprestado -> usar hold)
            2. Reserva ACTIVE duplicada
        """
        degraded = False
        availability = await self.sync.get_availability(item_id)
        if not availability.success:
            logger.warning(
                f"Disponibilidade de {item_id} indeterminada; permitindo reserva de {user_id}"
            )
            degraded = True
        elif not availability.available:
            return EligibilityResult(valid=False, reason=MSG_ITEM_CHECKED_OUT)

        existing = await self.reservation_repo.get_active_by_user_and_item(user_id, item_id)
        if existing:
            return EligibilityResult(
                valid=False,
                reason=MSG_DUPLICATE_RESERVATION,
                duplicate=True,
                degraded=degraded,
            )

        return EligibilityResult(valid=True, degraded=degraded)
