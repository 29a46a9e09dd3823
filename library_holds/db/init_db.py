"""
Script de inicialização do banco.

Uso:
    python -m library_holds.db.init_db

Cria as tabelas holds e reservations se não existirem.
"""

import asyncio
import logging

from library_holds.core.config import get_settings
from library_holds.db.session import check_database_connection, create_tables, engine

logger = logging.getLogger(__name__)
settings = get_settings()


async def main() -> None:
    """Verifica a conexão e cria as tabelas."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    success, error = await check_database_connection()
    if not success:
        logger.error(f"Banco indisponível: {error}")
        raise SystemExit(1)

    logger.info("Criando tabelas...")
    await create_tables()
    await engine.dispose()
    logger.info("Tabelas prontas!")


if __name__ == "__main__":
    asyncio.run(main())
