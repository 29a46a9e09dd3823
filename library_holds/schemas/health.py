"""
Schemas Pydantic para o endpoint de healthcheck.
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """
    Resposta do endpoint de healthcheck.

    Attributes:
        status: Status da aplicação ("healthy" ou "unhealthy")
        app_name: Nome da aplicação
        environment: Ambiente atual (development, staging, production)
        expiration_job_running: Se o job de expiração está agendado
    """

    status: str
    app_name: str
    environment: str
    expiration_job_running: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "healthy",
                    "app_name": "Library Holds API",
                    "environment": "development",
                    "expiration_job_running": True,
                }
            ]
        }
    }
