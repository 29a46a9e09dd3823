"""
Repository base com operações CRUD genéricas.
"""

from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from library_holds.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository base com operações CRUD.

    Fornece métodos genéricos para:
    - get_by_id: Buscar por ID
    - list_all: Listar todos (mais recentes primeiro)
    - create: Criar registro
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Busca registro por ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[ModelType]:
        """Lista todos os registros, mais recentes primeiro."""
        result = await self.db.execute(
            select(self.model).order_by(self.model.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> ModelType:
        """Cria novo registro."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.commit()
        await self.db.refresh(instance)
        return instance

    async def rollback(self) -> None:
        """Descarta a transação corrente após uma falha."""
        await self.db.rollback()
