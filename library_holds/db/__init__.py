"""
Módulo de banco de dados - conexões e sessões.

Exports:
    - Base: Classe base para modelos SQLAlchemy
    - engine: Engine async do SQLAlchemy
    - get_db: Dependency para injeção de sessão
    - async_session_factory: Factory usada fora de requests (job de expiração)
"""

from library_holds.db.session import Base, engine, get_db, async_session_factory
from library_holds.db.redis import init_redis, close_redis, get_redis_client

__all__ = [
    "Base",
    "engine",
    "get_db",
    "async_session_factory",
    "init_redis",
    "close_redis",
    "get_redis_client",
]
