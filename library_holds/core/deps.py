"""
Dependencies FastAPI para autenticação e autorização.

Usuários vivem no diretório externo; o token já traz o ID (sub) e a role,
então não há consulta ao banco aqui.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.core.security import decode_token
from library_holds.core.validation import validate_user_id
from library_holds.db.session import get_db
from library_holds.models.enums import UserRole

# Scheme Bearer para extrair token do header Authorization
security = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    """Usuário autenticado extraído do token."""
    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Principal:
    """
    Dependency que retorna o usuário autenticado.

    Raises:
        HTTPException 401: Token inválido, expirado ou sem sub válido
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token inválido ou expirado",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if not validate_user_id(user_id):
        raise credentials_exception

    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError:
        raise credentials_exception

    return Principal(user_id=user_id, role=role)


async def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """
    Dependency que exige que o usuário seja ADMIN.

    Raises:
        HTTPException 403: Usuário não é admin
    """
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito a administradores",
        )
    return principal


# Type aliases para uso nos endpoints
CurrentUser = Annotated[Principal, Depends(get_current_principal)]
AdminUser = Annotated[Principal, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
