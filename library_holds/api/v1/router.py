"""
Router principal da API v1.

Inclui todos os routers de endpoints.
"""

from fastapi import APIRouter

from library_holds.api.v1.holds import router as holds_router
from library_holds.api.v1.items import router as items_router
from library_holds.api.v1.reservations import router as reservations_router
from library_holds.api.v1.system import router as system_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(holds_router)
api_router.include_router(reservations_router)
api_router.include_router(items_router)
api_router.include_router(system_router)
