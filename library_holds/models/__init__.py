"""
Models SQLAlchemy da aplicação.

Importar todos os models aqui para que create_all detecte as tabelas.
"""

from library_holds.models.enums import (
    ErrorCode,
    HoldStatus,
    ItemStatus,
    LoanStatus,
    ReservationStatus,
    SnapshotSource,
    UserRole,
)
from library_holds.models.hold import Hold
from library_holds.models.reservation import Reservation

__all__ = [
    "ErrorCode",
    "HoldStatus",
    "ItemStatus",
    "LoanStatus",
    "ReservationStatus",
    "SnapshotSource",
    "UserRole",
    "Hold",
    "Reservation",
]
