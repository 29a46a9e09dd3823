"""
Módulo de serviços - lógica de negócio.
"""

from library_holds.services.eligibility import EligibilityResult, EligibilityService
from library_holds.services.expiration import ExpirationScheduler, expiration_scheduler
from library_holds.services.holds import HoldService
from library_holds.services.reservations import ReservationService
from library_holds.services.sync import RemoteSyncService

__all__ = [
    "EligibilityResult",
    "EligibilityService",
    "ExpirationScheduler",
    "expiration_scheduler",
    "HoldService",
    "ReservationService",
    "RemoteSyncService",
]
