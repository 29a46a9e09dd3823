"""
Schemas das fontes remotas (catálogo e diretório de usuários) e dos
resultados de leitura com cache.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from library_holds.models.enums import LoanStatus, SnapshotSource


class RemoteSchema(BaseModel):
    """Base tolerante a campos extras vindos das fontes externas."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CatalogItem(RemoteSchema):
    """Item do catálogo externo."""
    status: str
    title: str | None = None
    author: str | None = None
    isbn: str | None = None


class LoanRecord(RemoteSchema):
    """Empréstimo reportado pelo diretório de usuários."""
    item_id: str = Field(..., alias="itemId")
    status: LoanStatus | str


class Snapshot(BaseModel):
    """Entrada do cache: dado remoto + instante da sincronização + origem."""
    data: Any
    last_synced: datetime
    source: SnapshotSource

    def age_seconds(self, now: datetime) -> float:
        return (now - self.last_synced).total_seconds()


class AvailabilityResult(BaseModel):
    """Disponibilidade de um item (falha distinta de "indisponível")."""
    success: bool
    available: bool | None = None
    status: str | None = None
    from_cache: bool = False
    error: str | None = None


class ProfileResult(BaseModel):
    """Perfil de usuário lido via cache."""
    success: bool
    data: dict[str, Any] | None = None
    from_cache: bool = False
    error: str | None = None


class LoansResult(BaseModel):
    """Empréstimos de um usuário sincronizados do diretório."""
    success: bool
    loans: list[LoanRecord] = Field(default_factory=list)
    error: str | None = None


class SyncResult(BaseModel):
    """Resultado de sincronizações em massa."""
    success: bool
    count: int = 0
    error: str | None = None
