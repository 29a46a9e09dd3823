"""
Endpoints de Sistema (Admin).

Contratos:
    - POST /system/expire-reservations: Executa uma varredura de expiração
    - GET /system/expiration-job: Estado do job recorrente
    - POST /system/expiration-job/start: Agenda o job recorrente
    - POST /system/expiration-job/stop: Cancela o job recorrente
    - POST /system/sync/active-holds: Atualiza disponibilidade de itens com holds
    - POST /system/sync/catalog: Sincroniza o catálogo inteiro

Autorização:
    - Todos os endpoints requerem ADMIN
"""

from fastapi import APIRouter, Query

from library_holds.api.v1.errors import raise_for_result
from library_holds.core.deps import AdminUser, DbSession
from library_holds.schemas.remote import SyncResult
from library_holds.schemas.reservation import ExpirationResult
from library_holds.schemas.system import (
    ExpirationJobCommandResponse,
    ExpirationJobStatus,
)
from library_holds.services.expiration import expiration_scheduler
from library_holds.services.reservations import ReservationService
from library_holds.services.sync import RemoteSyncService

router = APIRouter(prefix="/system", tags=["System (Admin)"])


@router.post(
    "/expire-reservations",
    response_model=ExpirationResult,
    summary="Expirar reservas vencidas",
    description="Expira reservas ACTIVE com prazo vencido. **Requer ADMIN.**",
)
async def expire_reservations(
    db: DbSession,
    admin: AdminUser,
) -> ExpirationResult:
    """
    Varredura sob demanda, na sessão do request.

    Falhas individuais não interrompem a varredura; o resultado conta
    apenas as reservas efetivamente expiradas.
    """
    service = ReservationService(db)
    result = await service.expire_old_reservations()
    raise_for_result(result)
    return result


@router.get(
    "/expiration-job",
    response_model=ExpirationJobStatus,
    summary="Estado do job de expiração",
)
async def expiration_job_status(admin: AdminUser) -> ExpirationJobStatus:
    return expiration_scheduler.status()


@router.post(
    "/expiration-job/start",
    response_model=ExpirationJobCommandResponse,
    summary="Iniciar job de expiração",
)
async def start_expiration_job(
    admin: AdminUser,
    interval_minutes: float = Query(60, gt=0, description="Intervalo entre varreduras"),
) -> ExpirationJobCommandResponse:
    """Agenda o job; se já houver um em execução, nada muda."""
    started = expiration_scheduler.start(interval_minutes)
    return ExpirationJobCommandResponse(
        changed=started,
        message="Job de expiração iniciado" if started else "Job de expiração já está em execução",
        job=expiration_scheduler.status(),
    )


@router.post(
    "/expiration-job/stop",
    response_model=ExpirationJobCommandResponse,
    summary="Parar job de expiração",
)
async def stop_expiration_job(admin: AdminUser) -> ExpirationJobCommandResponse:
    stopped = expiration_scheduler.stop()
    return ExpirationJobCommandResponse(
        changed=stopped,
        message="Job de expiração parado" if stopped else "Job de expiração não estava em execução",
        job=expiration_scheduler.status(),
    )


@router.post(
    "/sync/active-holds",
    response_model=SyncResult,
    summary="Sincronizar itens com holds",
)
async def sync_active_holds(
    db: DbSession,
    admin: AdminUser,
) -> SyncResult:
    return await RemoteSyncService().sync_active_holds(db)


@router.post(
    "/sync/catalog",
    response_model=SyncResult,
    summary="Sincronizar catálogo inteiro",
)
async def sync_catalog(admin: AdminUser) -> SyncResult:
    return await RemoteSyncService().sync_entire_catalog()
