"""
Schemas dos endpoints de sistema (job de expiração e sincronização).
"""

from datetime import datetime

from pydantic import BaseModel


class ExpirationJobStatus(BaseModel):
    """Estado do job recorrente de expiração."""
    running: bool
    interval_minutes: float | None = None
    sweep_in_progress: bool = False
    last_run_at: datetime | None = None
    last_expired_count: int | None = None


class ExpirationJobCommandResponse(BaseModel):
    """Resposta de start/stop do job."""
    changed: bool
    message: str
    job: ExpirationJobStatus
