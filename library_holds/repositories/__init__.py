"""
Módulo de repositórios - acesso a dados.
"""

from library_holds.repositories.base import BaseRepository
from library_holds.repositories.hold import HoldRepository
from library_holds.repositories.reservation import ReservationRepository

__all__ = [
    "BaseRepository",
    "HoldRepository",
    "ReservationRepository",
]
