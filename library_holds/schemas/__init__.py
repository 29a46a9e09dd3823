"""
Schemas Pydantic da aplicação.
"""

from library_holds.schemas.base import (
    BaseSchema,
    OperationResult,
    TimestampSchema,
)
from library_holds.schemas.health import HealthResponse
from library_holds.schemas.hold import (
    HoldCreate,
    HoldListResult,
    HoldRead,
    HoldResult,
    HoldStatusUpdate,
)
from library_holds.schemas.remote import (
    AvailabilityResult,
    CatalogItem,
    LoanRecord,
    LoansResult,
    ProfileResult,
    Snapshot,
    SyncResult,
)
from library_holds.schemas.reservation import (
    ExpirationResult,
    ReservationCreate,
    ReservationListResult,
    ReservationRead,
    ReservationResult,
)
from library_holds.schemas.system import (
    ExpirationJobCommandResponse,
    ExpirationJobStatus,
)

__all__ = [
    "BaseSchema",
    "OperationResult",
    "TimestampSchema",
    "HealthResponse",
    "HoldCreate",
    "HoldListResult",
    "HoldRead",
    "HoldResult",
    "HoldStatusUpdate",
    "AvailabilityResult",
    "CatalogItem",
    "LoanRecord",
    "LoansResult",
    "ProfileResult",
    "Snapshot",
    "SyncResult",
    "ExpirationResult",
    "ReservationCreate",
    "ReservationListResult",
    "ReservationRead",
    "ReservationResult",
    "ExpirationJobCommandResponse",
    "ExpirationJobStatus",
]
