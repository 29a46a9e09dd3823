"""
Endpoints de Holds (fila de espera por item emprestado).

Contratos:
    - POST /holds: Entra na fila de um item (usuário autenticado)
    - GET /holds/my: Holds do usuário autenticado
    - GET /holds: Todos os holds (ADMIN)
    - PATCH /holds/{id}/cancel: Cancela um hold (dono ou ADMIN)
    - PATCH /holds/{id}/status: Atualiza status (ADMIN)

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 400: Erro de validação ou regra de negócio
    - 401: Não autenticado
    - 403: Sem permissão
    - 404: Hold não encontrado
    - 409: Hold duplicado
"""

from fastapi import APIRouter, HTTPException, status

from library_holds.api.v1.errors import raise_for_result
from library_holds.core.deps import AdminUser, CurrentUser, DbSession
from library_holds.schemas.base import OperationResult
from library_holds.schemas.hold import (
    HoldCreate,
    HoldListResult,
    HoldResult,
    HoldStatusUpdate,
)
from library_holds.services.holds import HoldService

router = APIRouter(prefix="/holds", tags=["Holds"])


@router.post(
    "",
    response_model=HoldResult,
    status_code=status.HTTP_201_CREATED,
    summary="Entrar na fila",
    description="Cria um hold para um item atualmente emprestado.",
)
async def place_hold(
    data: HoldCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> HoldResult:
    """
    Coloca o usuário autenticado no fim da fila do item.

    Raises:
        400: ID inválido, item disponível (usar reserva) ou empréstimo ativo
        409: Usuário já possui hold para o item
    """
    service = HoldService(db)
    result = await service.place_hold(current_user.user_id, data.item_id)
    raise_for_result(result)
    return result


@router.get(
    "/my",
    response_model=HoldListResult,
    summary="Meus holds",
    description="Lista holds do usuário autenticado com o perfil em cache.",
)
async def my_holds(
    db: DbSession,
    current_user: CurrentUser,
) -> HoldListResult:
    service = HoldService(db)
    result = await service.get_user_holds(current_user.user_id)
    raise_for_result(result)
    return result


@router.get(
    "",
    response_model=HoldListResult,
    summary="Listar holds",
    description="Lista todos os holds. **Requer ADMIN.**",
)
async def list_holds(
    db: DbSession,
    admin: AdminUser,
) -> HoldListResult:
    service = HoldService(db)
    result = await service.get_all_holds()
    raise_for_result(result)
    return result


@router.patch(
    "/{hold_id}/cancel",
    response_model=OperationResult,
    summary="Cancelar hold",
    description="Remove o hold e reordena a fila do item.",
)
async def cancel_hold(
    hold_id: str,
    db: DbSession,
    current_user: CurrentUser,
) -> OperationResult:
    """
    Cancela um hold.

    Autorização:
        - USER: apenas seus próprios holds
        - ADMIN: qualquer hold

    Raises:
        403: Sem permissão
        404: Hold não encontrado
    """
    service = HoldService(db)

    existing = await service.get_hold(hold_id)
    raise_for_result(existing)
    if not current_user.is_admin and existing.hold.user_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Você não tem permissão para cancelar este hold",
        )

    result = await service.cancel_hold(hold_id)
    raise_for_result(result)
    return result


@router.patch(
    "/{hold_id}/status",
    response_model=HoldResult,
    summary="Atualizar status do hold",
    description="Transição administrativa (ex: WAITING -> READY_FOR_PICKUP). **Requer ADMIN.**",
)
async def update_hold_status(
    hold_id: str,
    data: HoldStatusUpdate,
    db: DbSession,
    admin: AdminUser,
) -> HoldResult:
    service = HoldService(db)
    result = await service.update_hold_status(hold_id, data.status, data.notified)
    raise_for_result(result)
    return result
