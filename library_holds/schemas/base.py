"""
Schemas base reutilizáveis em toda a aplicação.

Toda operação pública do núcleo devolve um schema com `success`; em caso de
falha, `error` traz uma mensagem que pode ser exibida diretamente ao usuário
e `error_code` classifica a falha para a camada HTTP.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict

from library_holds.models.enums import ErrorCode


class BaseSchema(BaseModel):
    """Schema base com configurações padrão."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


class TimestampSchema(BaseSchema):
    """Schema com timestamps."""
    created_at: datetime
    updated_at: datetime


class OperationResult(BaseSchema):
    """Resultado genérico de uma operação do núcleo."""
    success: bool
    error: str | None = None
    error_code: ErrorCode | None = None
    message: str | None = None

    @classmethod
    def ok(cls, message: str | None = None, **fields) -> "OperationResult":
        """Constrói um resultado de sucesso."""
        return cls(success=True, message=message, **fields)

    @classmethod
    def fail(cls, code: ErrorCode, error: str, **fields) -> "OperationResult":
        """Constrói um resultado de falha com mensagem exibível."""
        return cls(success=False, error=error, error_code=code, **fields)

