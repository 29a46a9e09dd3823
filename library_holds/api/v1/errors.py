"""
Conversão dos resultados do núcleo em respostas HTTP.

Status codes:
    - 400: Erro de validação, regra de negócio ou estado inválido
    - 404: Hold/reserva não encontrado
    - 409: Pedido duplicado
    - 500: Erro interno
"""

from fastapi import HTTPException, status

from library_holds.models.enums import ErrorCode
from library_holds.schemas.base import OperationResult

STATUS_BY_ERROR = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INELIGIBLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: OperationResult) -> None:
    """
    Levanta HTTPException se o resultado for uma falha.

    A mensagem do resultado já é segura para exibição e vira o `detail`.
    """
    if result.success:
        return
    code = STATUS_BY_ERROR.get(result.error_code, status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=code, detail=result.error)
