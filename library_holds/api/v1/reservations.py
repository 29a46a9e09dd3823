"""
Endpoints de Reservas (Reservation).

Contratos:
    - POST /reservations: Reserva um item disponível (usuário autenticado)
    - GET /reservations/my: Reservas do usuário autenticado
    - GET /reservations: Todas as reservas (ADMIN)
    - PATCH /reservations/{id}/cancel: Cancela reserva ACTIVE (dono ou ADMIN)

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 400: Erro de validação, regra de negócio ou reserva já finalizada
    - 401: Não autenticado
    - 403: Sem permissão
    - 404: Reserva não encontrada
    - 409: Reserva duplicada
"""

from fastapi import APIRouter, HTTPException, status

from library_holds.api.v1.errors import raise_for_result
from library_holds.core.deps import AdminUser, CurrentUser, DbSession
from library_holds.schemas.base import OperationResult
from library_holds.schemas.reservation import (
    ReservationCreate,
    ReservationListResult,
    ReservationResult,
)
from library_holds.services.reservations import ReservationService

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post(
    "",
    response_model=ReservationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Criar reserva",
    description="Reserva um item disponível por 7 dias.",
)
async def place_reservation(
    data: ReservationCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> ReservationResult:
    """
    Reserva o item para o usuário autenticado.

    Raises:
        400: ID inválido ou item emprestado (usar hold)
        409: Reserva ativa duplicada
    """
    service = ReservationService(db)
    result = await service.place_reservation(current_user.user_id, data.item_id)
    raise_for_result(result)
    return result


@router.get(
    "/my",
    response_model=ReservationListResult,
    summary="Minhas reservas",
)
async def my_reservations(
    db: DbSession,
    current_user: CurrentUser,
) -> ReservationListResult:
    service = ReservationService(db)
    result = await service.get_user_reservations(current_user.user_id)
    raise_for_result(result)
    return result


@router.get(
    "",
    response_model=ReservationListResult,
    summary="Listar reservas",
    description="Lista todas as reservas. **Requer ADMIN.**",
)
async def list_reservations(
    db: DbSession,
    admin: AdminUser,
) -> ReservationListResult:
    service = ReservationService(db)
    result = await service.get_all_reservations()
    raise_for_result(result)
    return result


@router.patch(
    "/{reservation_id}/cancel",
    response_model=OperationResult,
    summary="Cancelar reserva",
    description="Cancela uma reserva ACTIVE.",
)
async def cancel_reservation(
    reservation_id: str,
    db: DbSession,
    current_user: CurrentUser,
) -> OperationResult:
    """
    Cancela uma reserva.

    Autorização:
        - USER: apenas suas próprias reservas
        - ADMIN: qualquer reserva

    Raises:
        400: Reserva já cancelada ou expirada
        403: Sem permissão
        404: Reserva não encontrada
    """
    service = ReservationService(db)

    existing = await service.get_reservation(reservation_id)
    raise_for_result(existing)
    if not current_user.is_admin and existing.reservation.user_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Você não tem permissão para cancelar esta reserva",
        )

    result = await service.cancel_reservation(reservation_id)
    raise_for_result(result)
    return result
