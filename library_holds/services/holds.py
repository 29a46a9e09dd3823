"""
Service para lógica de negócio de Hold (fila de espera por item).

Regras de negócio:
    - Hold só é permitido se o item NÃO está disponível (ou se a
      disponibilidade não pôde ser verificada)
    - Um hold aberto por usuário e item
    - Novo hold entra no fim da fila (posição = tamanho da fila + 1)
    - Cancelar remove o hold e reordena a fila do item (1..N, por ordem
      de criação)

Toda operação pública devolve um resultado com `success`; nenhuma exceção
escapa daqui.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.core.clock import Clock, utcnow
from library_holds.core.locks import ItemLockRegistry, item_locks
from library_holds.core.validation import (
    validate_item_id,
    validate_record_id,
    validate_user_id,
)
from library_holds.models.enums import ErrorCode, HoldStatus
from library_holds.repositories.hold import HoldRepository
from library_holds.schemas.base import OperationResult
from library_holds.schemas.hold import HoldListResult, HoldRead, HoldResult
from library_holds.services.eligibility import (
    MSG_DUPLICATE_HOLD,
    EligibilityService,
)
from library_holds.services.sync import RemoteSyncService

logger = logging.getLogger(__name__)

MSG_HOLD_NOT_FOUND = "Hold não encontrado"
MSG_INTERNAL = "Não foi possível concluir a operação. Tente novamente."

# Transições administrativas permitidas (cancelamento tem fluxo próprio)
ALLOWED_STATUS_UPDATES = {
    HoldStatus.WAITING: {HoldStatus.WAITING, HoldStatus.READY_FOR_PICKUP},
    HoldStatus.READY_FOR_PICKUP: {HoldStatus.READY_FOR_PICKUP},
    HoldStatus.CANCELLED: set(),
}


def parse_record_id(value: str) -> UUID | None:
    """Converte o ID recebido em UUID; None se não tiver formato de UUID."""
    try:
        return UUID(value.strip())
    except (AttributeError, ValueError):
        return None


class HoldService:
    """Service para operações de Hold."""

    def __init__(
        self,
        db: AsyncSession,
        sync: RemoteSyncService | None = None,
        eligibility: EligibilityService | None = None,
        locks: ItemLockRegistry | None = None,
        clock: Clock = utcnow,
    ):
        self.db = db
        self.hold_repo = HoldRepository(db)
        self.sync = sync or RemoteSyncService()
        self.eligibility = eligibility or EligibilityService(db, self.sync)
        self.locks = locks or item_locks
        self.clock = clock

    async def _rollback(self) -> None:
        try:
            await self.hold_repo.rollback()
        except Exception:
            logger.exception("Falha ao desfazer transação de hold")

    # ==========================================
    # Criação
    # ==========================================

    async def place_hold(self, user_id: str, item_id: str) -> HoldResult:
        """
        Coloca o usuário na fila de um item emprestado.

        Fluxo:
            1. Valida formato dos IDs
            2. Verifica elegibilidade (disponibilidade, duplicata, empréstimo)
            3. Sob o lock do item: relê a fila, reverifica duplicata e cria
               o hold WAITING na posição len(fila) + 1

        Returns:
            HoldResult com o hold criado ou o motivo da recusa
        """
        for check in (validate_user_id(user_id), validate_item_id(item_id)):
            if not check.valid:
                return HoldResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        try:
            eligibility = await self.eligibility.validate_hold_request(user_id, item_id)
            if not eligibility.valid:
                code = ErrorCode.DUPLICATE if eligibility.duplicate else ErrorCode.INELIGIBLE
                return HoldResult.fail(code, eligibility.reason)

            async with self.locks.hold(item_id):
                # Janela entre elegibilidade e escrita: outro pedido pode ter entrado
                if await self.hold_repo.get_open_by_user_and_item(user_id, item_id):
                    return HoldResult.fail(ErrorCode.DUPLICATE, MSG_DUPLICATE_HOLD)

                position = await self.hold_repo.count_open_by_item(item_id) + 1
                try:
                    hold = await self.hold_repo.create(
                        user_id=user_id,
                        item_id=item_id,
                        status=HoldStatus.WAITING,
                        position=position,
                        notified=False,
                        created_at=self.clock(),
                    )
                except IntegrityError:
                    await self._rollback()
                    return HoldResult.fail(ErrorCode.DUPLICATE, MSG_DUPLICATE_HOLD)
        except Exception:
            logger.exception(f"Erro ao registrar hold de {user_id} para {item_id}")
            await self._rollback()
            return HoldResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        logger.info(f"Hold registrado: {hold.id} ({item_id}, posição {position})")
        return HoldResult.ok(
            message=f"Hold registrado. Posição na fila: {position}",
            hold=HoldRead.model_validate(hold),
        )

    # ==========================================
    # Cancelamento e reparo da fila
    # ==========================================

    async def cancel_hold(self, hold_id: str) -> OperationResult:
        """
        Cancela (remove) um hold e reordena a fila do item.

        A remoção verifica a existência na própria instrução: se o hold
        sumiu entre a leitura e o delete, a operação falha como não
        encontrado em vez de reportar sucesso.
        """
        check = validate_record_id(hold_id, "ID do hold")
        if not check.valid:
            return OperationResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        hold_uuid = parse_record_id(hold_id)
        if hold_uuid is None:
            return OperationResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)

        try:
            hold = await self.hold_repo.get_by_id(hold_uuid)
            if hold is None:
                return OperationResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)
            item_id = hold.item_id

            async with self.locks.hold(item_id):
                if not await self.hold_repo.delete_if_exists(hold_uuid):
                    return OperationResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)
                repaired = await self.repair_queue(item_id)
        except Exception:
            logger.exception(f"Erro ao cancelar hold {hold_id}")
            await self._rollback()
            return OperationResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        logger.info(f"Hold cancelado: {hold_id} ({repaired} posições ajustadas em {item_id})")
        return OperationResult.ok("Hold cancelado com sucesso")

    async def repair_queue(self, item_id: str) -> int:
        """
        Regrava posição = índice + 1 para os holds abertos do item, na
        ordem de criação.

        Nunca levanta: falha ao carregar a fila é registrada e devolve 0, e
        cada escrita é independente (uma falha não interrompe as demais).

        Returns:
            Número de holds cuja posição foi efetivamente alterada
        """
        try:
            holds = await self.hold_repo.get_queue_by_creation(item_id)
        except Exception:
            logger.exception(f"Falha ao carregar a fila de {item_id} para reparo")
            await self._rollback()
            return 0

        targets = [
            (hold.id, index)
            for index, hold in enumerate(holds, start=1)
            if hold.position != index
        ]

        repaired = 0
        for hold_id, position in targets:
            try:
                if await self.hold_repo.set_position(hold_id, position):
                    repaired += 1
            except Exception:
                logger.exception(
                    f"Falha ao reposicionar hold {hold_id} em {item_id} para {position}"
                )
                await self._rollback()
        return repaired

    # ==========================================
    # Status
    # ==========================================

    async def update_hold_status(
        self,
        hold_id: str,
        status: HoldStatus | str,
        notified: bool = False,
    ) -> HoldResult:
        """
        Transição administrativa de status (sem efeito na fila).

        Aceita WAITING -> READY_FOR_PICKUP e atualizações do flag `notified`.
        Cancelamento deve passar por cancel_hold para que a fila seja reparada.
        """
        check = validate_record_id(hold_id, "ID do hold")
        if not check.valid:
            return HoldResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        try:
            new_status = HoldStatus(status)
        except ValueError:
            return HoldResult.fail(ErrorCode.VALIDATION_ERROR, f"Status inválido: {status}")

        if new_status == HoldStatus.CANCELLED:
            return HoldResult.fail(
                ErrorCode.INVALID_STATE,
                "Use o cancelamento de hold para cancelar",
            )

        hold_uuid = parse_record_id(hold_id)
        if hold_uuid is None:
            return HoldResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)

        try:
            hold = await self.hold_repo.get_by_id(hold_uuid)
            if hold is None:
                return HoldResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)

            if new_status not in ALLOWED_STATUS_UPDATES[hold.status]:
                return HoldResult.fail(
                    ErrorCode.INVALID_STATE,
                    f"Hold com status {hold.status.value} não pode ir para {new_status.value}",
                )

            hold = await self.hold_repo.update_status(hold, new_status, notified)
        except Exception:
            logger.exception(f"Erro ao atualizar status do hold {hold_id}")
            await self._rollback()
            return HoldResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        logger.info(f"Status do hold {hold_id} atualizado: {new_status.value}")
        return HoldResult.ok(
            message="Status atualizado",
            hold=HoldRead.model_validate(hold),
        )

    # ==========================================
    # Consultas
    # ==========================================

    async def get_hold(self, hold_id: str) -> HoldResult:
        """Busca um hold pelo ID."""
        check = validate_record_id(hold_id, "ID do hold")
        if not check.valid:
            return HoldResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        hold_uuid = parse_record_id(hold_id)
        if hold_uuid is None:
            return HoldResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)

        try:
            hold = await self.hold_repo.get_by_id(hold_uuid)
        except Exception:
            logger.exception(f"Erro ao buscar hold {hold_id}")
            return HoldResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        if hold is None:
            return HoldResult.fail(ErrorCode.NOT_FOUND, MSG_HOLD_NOT_FOUND)
        return HoldResult.ok(hold=HoldRead.model_validate(hold))

    async def get_user_holds(self, user_id: str) -> HoldListResult:
        """Lista holds do usuário junto com o perfil em cache (se houver)."""
        check = validate_user_id(user_id)
        if not check.valid:
            return HoldListResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        try:
            holds = await self.hold_repo.get_by_user(user_id)
            profile = await self.sync.get_user_profile(user_id)
        except Exception:
            logger.exception(f"Erro ao listar holds de {user_id}")
            return HoldListResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        return HoldListResult.ok(
            holds=[HoldRead.model_validate(hold) for hold in holds],
            user_info=profile.data if profile.success else None,
        )

    async def get_item_holds(self, item_id: str) -> HoldListResult:
        """Fila de um item (holds abertos por posição crescente)."""
        check = validate_item_id(item_id)
        if not check.valid:
            return HoldListResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        try:
            holds = await self.hold_repo.get_queue(item_id)
        except Exception:
            logger.exception(f"Erro ao listar fila de {item_id}")
            return HoldListResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        return HoldListResult.ok(holds=[HoldRead.model_validate(hold) for hold in holds])

    async def get_all_holds(self) -> HoldListResult:
        """Lista todos os holds (admin)."""
        try:
            holds = await self.hold_repo.list_all()
        except Exception:
            logger.exception("Erro ao listar holds")
            return HoldListResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        return HoldListResult.ok(holds=[HoldRead.model_validate(hold) for hold in holds])
