"""
Utilitários de segurança: JWT.

Os tokens são emitidos pelo diretório de usuários com a chave compartilhada
JWT_SECRET. Aqui só decodificamos; create_access_token existe para
ferramentas internas e testes.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from library_holds.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def create_access_token(
    subject: str,
    extra_data: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Cria token JWT.

    Args:
        subject: ID do usuário no diretório externo
        extra_data: Dados adicionais para incluir no payload (ex: role)
        expires_delta: Tempo de expiração customizado

    Returns:
        Token JWT assinado
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRES_MINUTES))

    payload = {
        "sub": subject,
        "exp": expire,
        "iat": now,
    }

    if extra_data:
        payload.update(extra_data)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decodifica e valida token JWT.

    Returns:
        Payload do token ou None se inválido/expirado
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.debug(f"Token rejeitado: {type(e).__name__}")
        return None
