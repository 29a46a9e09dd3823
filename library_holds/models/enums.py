"""
Enums utilizados nos models e schemas da aplicação.
"""

import enum


class UserRole(str, enum.Enum):
    """Roles presentes no token emitido pelo diretório de usuários."""
    ADMIN = "ADMIN"
    USER = "USER"


class HoldStatus(str, enum.Enum):
    """
    Status de um hold (fila de espera por um item emprestado).

    Fluxo:
        WAITING -> READY_FOR_PICKUP (item liberado)
        WAITING/READY_FOR_PICKUP -> CANCELLED (terminal)
    """
    WAITING = "WAITING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    CANCELLED = "CANCELLED"


class ReservationStatus(str, enum.Enum):
    """
    Status de uma reserva de item disponível.

    Fluxo:
        ACTIVE -> CANCELLED (cancelada pelo usuário)
        ACTIVE -> EXPIRED (somente pela varredura de expiração)
    """
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class ItemStatus(str, enum.Enum):
    """Status de um item no catálogo externo."""
    AVAILABLE = "available"
    CHECKED_OUT = "checked-out"


class LoanStatus(str, enum.Enum):
    """Status de empréstimo reportado pelo diretório de usuários."""
    BORROWED = "BORROWED"
    RETURNED = "RETURNED"


class SnapshotSource(str, enum.Enum):
    """Origem de um snapshot em cache."""
    CATALOG = "catalog"
    PROFILE = "profile"
    LOANS = "loans"


class ErrorCode(str, enum.Enum):
    """Categorias de falha devolvidas pelas operações do núcleo."""
    VALIDATION_ERROR = "validation_error"
    INELIGIBLE = "ineligible"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    INTERNAL_ERROR = "internal_error"
