"""
Service para lógica de negócio de Reservation.

Regras de negócio:
    - Reserva só é permitida se o item está disponível (ou se a
      disponibilidade não pôde ser verificada)
    - Uma reserva ACTIVE por usuário e item
    - Reserva vale 7 dias a partir da criação (expires_at fixado na criação)
    - ACTIVE -> CANCELLED pelo usuário; ACTIVE -> EXPIRED só pela varredura
    - Estados CANCELLED e EXPIRED são finais
"""

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.core.clock import Clock, utcnow
from library_holds.core.config import get_settings
from library_holds.core.validation import (
    validate_item_id,
    validate_record_id,
    validate_user_id,
)
from library_holds.models.enums import ErrorCode, ReservationStatus
from library_holds.repositories.reservation import ReservationRepository
from library_holds.schemas.base import OperationResult
from library_holds.schemas.reservation import (
    ExpirationResult,
    ReservationListResult,
    ReservationRead,
    ReservationResult,
)
from library_holds.services.eligibility import (
    MSG_DUPLICATE_RESERVATION,
    EligibilityService,
)
from library_holds.services.holds import MSG_INTERNAL, parse_record_id
from library_holds.services.sync import RemoteSyncService

logger = logging.getLogger(__name__)
settings = get_settings()

MSG_RESERVATION_NOT_FOUND = "Reserva não encontrada"


class ReservationService:
    """Service para operações de Reservation e varredura de expiração."""

    def __init__(
        self,
        db: AsyncSession,
        sync: RemoteSyncService | None = None,
        eligibility: EligibilityService | None = None,
        clock: Clock = utcnow,
        batch_size: int | None = None,
    ):
        self.db = db
        self.reservation_repo = ReservationRepository(db)
        self.sync = sync or RemoteSyncService()
        self.eligibility = eligibility or EligibilityService(db, self.sync)
        self.clock = clock
        self.batch_size = batch_size or settings.EXPIRATION_BATCH_SIZE

    async def _rollback(self) -> None:
        try:
            await self.reservation_repo.rollback()
        except Exception:
            logger.exception("Falha ao desfazer transação de reserva")

    async def place_reservation(self, user_id: str, item_id: str) -> ReservationResult:
        """
        Reserva um item disponível para retirada.

        Fluxo:
            1. Valida formato dos IDs
            2. Verifica elegibilidade (disponibilidade, duplicata)
            3. Cria reserva ACTIVE com expires_at = agora + 7 dias

        Returns:
            ReservationResult com a reserva criada ou o motivo da recusa
        """
        for check in (validate_user_id(user_id), validate_item_id(item_id)):
            if not check.valid:
                return ReservationResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        try:
            eligibility = await self.eligibility.validate_reservation_request(user_id, item_id)
            if not eligibility.valid:
                code = ErrorCode.DUPLICATE if eligibility.duplicate else ErrorCode.INELIGIBLE
                return ReservationResult.fail(code, eligibility.reason)

            now = self.clock()
            try:
                reservation = await self.reservation_repo.create(
                    user_id=user_id,
                    item_id=item_id,
                    status=ReservationStatus.ACTIVE,
                    created_at=now,
                    expires_at=now + timedelta(days=settings.RESERVATION_RETENTION_DAYS),
                )
            except IntegrityError:
                await self._rollback()
                return ReservationResult.fail(ErrorCode.DUPLICATE, MSG_DUPLICATE_RESERVATION)
        except Exception:
            logger.exception(f"Erro ao registrar reserva de {user_id} para {item_id}")
            await self._rollback()
            return ReservationResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        logger.info(f"Reserva registrada: {reservation.id} ({item_id})")
        return ReservationResult.ok(
            message=f"Reserva criada. Retire até {reservation.expires_at.isoformat()}",
            reservation=ReservationRead.model_validate(reservation),
        )

    async def cancel_reservation(self, reservation_id: str) -> OperationResult:
        """
        Cancela uma reserva ACTIVE.

        O UPDATE só atinge reservas ACTIVE: cancelar de novo, ou cancelar
        uma reserva expirada, devolve falha sem alterar o estado.
        """
        check = validate_record_id(reservation_id, "ID da reserva")
        if not check.valid:
            return OperationResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        reservation_uuid = parse_record_id(reservation_id)
        if reservation_uuid is None:
            return OperationResult.fail(ErrorCode.NOT_FOUND, MSG_RESERVATION_NOT_FOUND)

        try:
            cancelled = await self.reservation_repo.transition_if_active(
                reservation_uuid,
                ReservationStatus.CANCELLED,
            )
            if not cancelled:
                reservation = await self.reservation_repo.get_by_id(reservation_uuid)
                if reservation is None:
                    return OperationResult.fail(
                        ErrorCode.NOT_FOUND,
                        MSG_RESERVATION_NOT_FOUND,
                    )
                return OperationResult.fail(
                    ErrorCode.INVALID_STATE,
                    f"Reserva com status {reservation.status.value} não pode ser cancelada",
                )
        except Exception:
            logger.exception(f"Erro ao cancelar reserva {reservation_id}")
            await self._rollback()
            return OperationResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        logger.info(f"Reserva cancelada: {reservation_id}")
        return OperationResult.ok("Reserva cancelada com sucesso")

    # ==========================================
    # Varredura de expiração
    # ==========================================

    async def expire_old_reservations(self) -> ExpirationResult:
        """
        Expira reservas ACTIVE com expires_at < agora.

        Processa em lotes de EXPIRATION_BATCH_SIZE. Cada reserva é
        atualizada isoladamente, reverificando status ACTIVE no UPDATE;
        falhas individuais são registradas e não interrompem a varredura.

        Returns:
            ExpirationResult com apenas as reservas efetivamente expiradas
        """
        now = self.clock()
        try:
            candidate_ids = await self.reservation_repo.get_expired_active_ids(now)
        except Exception:
            logger.exception("Erro ao buscar reservas vencidas")
            await self._rollback()
            return ExpirationResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        expired_ids: list[UUID] = []
        for start in range(0, len(candidate_ids), self.batch_size):
            batch = candidate_ids[start:start + self.batch_size]
            expired_ids.extend(await self._expire_batch(batch))

        logger.info(
            f"Reservas expiradas: {len(expired_ids)} de {len(candidate_ids)} candidatas"
        )
        return ExpirationResult.ok(
            message=f"Expiradas: {len(expired_ids)}",
            expired_count=len(expired_ids),
            expired_ids=expired_ids,
        )

    async def _expire_batch(self, batch: list[UUID]) -> list[UUID]:
        expired: list[UUID] = []
        for reservation_id in batch:
            try:
                if await self.reservation_repo.transition_if_active(
                    reservation_id,
                    ReservationStatus.EXPIRED,
                ):
                    expired.append(reservation_id)
            except Exception:
                logger.exception(f"Erro ao expirar reserva {reservation_id}")
                await self._rollback()
        return expired

    # ==========================================
    # Consultas
    # ==========================================

    async def get_reservation(self, reservation_id: str) -> ReservationResult:
        """Busca uma reserva pelo ID."""
        check = validate_record_id(reservation_id, "ID da reserva")
        if not check.valid:
            return ReservationResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        reservation_uuid = parse_record_id(reservation_id)
        if reservation_uuid is None:
            return ReservationResult.fail(ErrorCode.NOT_FOUND, MSG_RESERVATION_NOT_FOUND)

        try:
            reservation = await self.reservation_repo.get_by_id(reservation_uuid)
        except Exception:
            logger.exception(f"Erro ao buscar reserva {reservation_id}")
            return ReservationResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        if reservation is None:
            return ReservationResult.fail(ErrorCode.NOT_FOUND, MSG_RESERVATION_NOT_FOUND)
        return ReservationResult.ok(reservation=ReservationRead.model_validate(reservation))

    async def get_user_reservations(self, user_id: str) -> ReservationListResult:
        """Lista reservas de um usuário."""
        check = validate_user_id(user_id)
        if not check.valid:
            return ReservationListResult.fail(ErrorCode.VALIDATION_ERROR, check.error)

        try:
            reservations = await self.reservation_repo.get_by_user(user_id)
        except Exception:
            logger.exception(f"Erro ao listar reservas de {user_id}")
            return ReservationListResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        return ReservationListResult.ok(
            reservations=[ReservationRead.model_validate(r) for r in reservations],
        )

    async def get_all_reservations(self) -> ReservationListResult:
        """Lista todas as reservas (admin)."""
        try:
            reservations = await self.reservation_repo.list_all()
        except Exception:
            logger.exception("Erro ao listar reservas")
            return ReservationListResult.fail(ErrorCode.INTERNAL_ERROR, MSG_INTERNAL)

        return ReservationListResult.ok(
            reservations=[ReservationRead.model_validate(r) for r in reservations],
        )
