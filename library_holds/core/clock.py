"""
Relógio da aplicação.

Todos os timestamps persistidos são UTC sem tzinfo (colunas TIMESTAMP
WITHOUT TIME ZONE). Services recebem o relógio por parâmetro para que os
testes controlem o "agora".
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Retorna o instante atual em UTC, sem tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
