"""
Ponto de entrada da aplicação FastAPI.

Este módulo configura a aplicação FastAPI, inclui rotas e define
handlers de ciclo de vida (startup/shutdown).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from library_holds import __version__
from library_holds.api.v1.router import api_router
from library_holds.core.config import get_settings
from library_holds.core.logging import setup_logging, get_logger
from library_holds.db.session import check_database_connection, engine
from library_holds.db.redis import init_redis, close_redis, check_redis_connection
from library_holds.schemas.health import HealthResponse
from library_holds.services.expiration import expiration_scheduler

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerencia o ciclo de vida da aplicação.

    Startup:
        - Configura logging
        - Conecta ao Redis (sem Redis, o cache fica desligado)
        - Verifica conexão com PostgreSQL
        - Agenda o job de expiração se EXPIRATION_JOB_ENABLED

    Shutdown:
        - Para o job e aguarda varredura em andamento
        - Fecha conexão com Redis
        - Fecha pool de conexões do banco
    """
    setup_logging()
    logger.info(f"Iniciando {settings.APP_NAME} em ambiente {settings.ENVIRONMENT}")

    try:
        await init_redis()
        if await check_redis_connection():
            logger.info("Conexão com Redis estabelecida")
        else:
            logger.warning("Redis não disponível - cache desabilitado")
    except Exception as e:
        logger.warning(f"Falha ao conectar ao Redis: {e}")

    try:
        success, error = await check_database_connection()
        if success:
            logger.info("Conexão com PostgreSQL estabelecida")
        else:
            logger.warning(f"PostgreSQL não disponível: {error}")
    except Exception as e:
        logger.warning(f"Falha ao conectar ao PostgreSQL: {e}")

    if not settings.catalog_configured:
        logger.warning("CATALOG_API_URL vazio - disponibilidade será tratada como indeterminada")
    if not settings.user_directory_configured:
        logger.warning("USER_API_URL vazio - perfis e empréstimos indisponíveis")

    if settings.EXPIRATION_JOB_ENABLED:
        expiration_scheduler.start(settings.EXPIRATION_JOB_INTERVAL_MINUTES)

    yield

    logger.info(f"Encerrando {settings.APP_NAME}")
    await expiration_scheduler.shutdown()
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="API de holds e reservas de itens da biblioteca",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Inclui rotas da API v1
app.include_router(api_router)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Verifica status da aplicação",
    description="Retorna o status atual da aplicação e do job de expiração.",
)
async def health_check() -> HealthResponse:
    """
    Endpoint de healthcheck para monitoramento.

    Útil para load balancers e sistemas de monitoramento.
    """
    return HealthResponse(
        status="healthy",
        app_name=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        expiration_job_running=expiration_scheduler.is_running(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "library_holds.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
