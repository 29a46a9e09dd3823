"""
Endpoints de consulta por item.

Contratos:
    - GET /items/{item_id}/holds: Fila do item por posição
    - GET /items/{item_id}/availability: Disponibilidade (com cache)
"""

from fastapi import APIRouter, HTTPException, status

from library_holds.api.v1.errors import raise_for_result
from library_holds.core.deps import CurrentUser, DbSession
from library_holds.core.validation import validate_item_id
from library_holds.schemas.hold import HoldListResult
from library_holds.schemas.remote import AvailabilityResult
from library_holds.services.holds import HoldService
from library_holds.services.sync import RemoteSyncService

router = APIRouter(prefix="/items", tags=["Items"])


@router.get(
    "/{item_id}/holds",
    response_model=HoldListResult,
    summary="Fila do item",
)
async def item_holds(
    item_id: str,
    db: DbSession,
    current_user: CurrentUser,
) -> HoldListResult:
    service = HoldService(db)
    result = await service.get_item_holds(item_id)
    raise_for_result(result)
    return result


@router.get(
    "/{item_id}/availability",
    response_model=AvailabilityResult,
    summary="Disponibilidade do item",
    description="Consulta o catálogo (cache de 5 minutos). "
                "`success=false` indica que a disponibilidade não pôde ser determinada.",
)
async def item_availability(
    item_id: str,
    current_user: CurrentUser,
) -> AvailabilityResult:
    check = validate_item_id(item_id)
    if not check.valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=check.error)
    return await RemoteSyncService().get_availability(item_id)
