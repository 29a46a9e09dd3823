"""
Clientes das fontes remotas somente-leitura.

    - CatalogClient: status e metadados de itens do catálogo
    - UserDirectoryClient: perfis e empréstimos de usuários

Features:
    - Retry em erros transitórios (502, 503) e timeout
    - Exceções tipadas: não configurado, indisponível, não encontrado

Nenhum método devolve "indisponível" no lugar de uma falha: quem chama
precisa distinguir "item emprestado" de "não consegui perguntar".
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from library_holds.core.config import get_settings
from library_holds.schemas.remote import CatalogItem, LoanRecord

logger = logging.getLogger(__name__)
settings = get_settings()


class RemoteSourceError(Exception):
    """Falha ao consultar uma fonte remota."""

    def __init__(self, message: str, source: str = "", status_code: int = 0):
        self.message = message
        self.source = source
        self.status_code = status_code
        super().__init__(self.message)


class RemoteSourceNotConfigured(RemoteSourceError):
    """Fonte sem URL configurada."""


class RemoteSourceUnavailable(RemoteSourceError):
    """Fonte fora do ar, lenta demais ou respondendo com erro."""


class RemoteRecordNotFound(RemoteSourceError):
    """Registro inexistente na fonte remota (HTTP 404)."""


class RemoteClient:
    """
    Base dos clientes HTTP das fontes remotas.

    Args:
        base_url: URL base da fonte (vazio = não configurada)
        name: Nome da fonte usado em logs e mensagens
        transport: Transport httpx opcional (testes usam MockTransport)
    """

    RETRY_STATUS = (502, 503)
    RETRY_DELAY = 0.5

    def __init__(
        self,
        base_url: Optional[str],
        name: str,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.name = name
        self.timeout = timeout or settings.REMOTE_TIMEOUT_SECONDS
        self.max_retries = settings.REMOTE_MAX_RETRIES if max_retries is None else max_retries
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def _get(self, path: str) -> Any:
        """
        GET com retry para erros transitórios.

        Raises:
            RemoteSourceNotConfigured: URL base vazia
            RemoteRecordNotFound: HTTP 404
            RemoteSourceUnavailable: Erro de rede, timeout ou HTTP >= 400
        """
        if not self.configured:
            raise RemoteSourceNotConfigured(
                f"Fonte {self.name} não configurada",
                source=self.name,
            )

        url = f"{self.base_url}/{path.lstrip('/')}"
        last_error: RemoteSourceError | None = None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for attempt in range(self.max_retries + 1):
                try:
                    response = await client.get(url)
                except httpx.TimeoutException:
                    last_error = RemoteSourceUnavailable(
                        f"Tempo esgotado consultando {self.name}",
                        source=self.name,
                    )
                    if attempt < self.max_retries:
                        await asyncio.sleep(self.RETRY_DELAY)
                        continue
                    break
                except httpx.HTTPError as e:
                    last_error = RemoteSourceUnavailable(
                        f"Não foi possível conectar a {self.name}: {type(e).__name__}",
                        source=self.name,
                    )
                    break

                if response.status_code in self.RETRY_STATUS and attempt < self.max_retries:
                    await asyncio.sleep(self.RETRY_DELAY * (attempt + 1))
                    continue

                return self._handle_response(response)

        raise last_error

    def _handle_response(self, response: httpx.Response) -> Any:
        if response.status_code == 404:
            raise RemoteRecordNotFound(
                f"Registro não encontrado em {self.name}",
                source=self.name,
                status_code=404,
            )
        if response.status_code >= 400:
            raise RemoteSourceUnavailable(
                f"{self.name} respondeu HTTP {response.status_code}",
                source=self.name,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError:
            raise RemoteSourceUnavailable(
                f"{self.name} devolveu resposta inválida",
                source=self.name,
                status_code=response.status_code,
            )


class CatalogClient(RemoteClient):
    """Cliente do catálogo de itens."""

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(
            settings.CATALOG_API_URL if base_url is None else base_url,
            name="catálogo",
            **kwargs,
        )

    async def get_item_status(self, item_id: str) -> CatalogItem:
        """Busca status e metadados de um item."""
        data = await self._get(f"items/{item_id}")
        try:
            return CatalogItem.model_validate(data)
        except ValueError:
            raise RemoteSourceUnavailable(
                f"Item {item_id} com formato inválido no catálogo",
                source=self.name,
            )

    async def list_items(self) -> dict[str, CatalogItem]:
        """Lista o catálogo inteiro indexado por ID (sincronização completa)."""
        data = await self._get("items")
        items: dict[str, CatalogItem] = {}
        for raw in data or []:
            item_id = raw.get("id") if isinstance(raw, dict) else None
            if not item_id:
                logger.warning("Item do catálogo sem id ignorado na sincronização")
                continue
            try:
                items[str(item_id)] = CatalogItem.model_validate(raw)
            except ValueError:
                logger.warning(f"Item {item_id} com formato inválido ignorado")
        return items


class UserDirectoryClient(RemoteClient):
    """Cliente do diretório de usuários e empréstimos."""

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(
            settings.USER_API_URL if base_url is None else base_url,
            name="diretório de usuários",
            **kwargs,
        )

    async def get_profile(self, user_id: str) -> dict[str, Any]:
        """Busca o perfil de um usuário."""
        data = await self._get(f"users/{user_id}")
        if not isinstance(data, dict):
            raise RemoteSourceUnavailable(
                "Perfil com formato inválido",
                source=self.name,
            )
        return data

    async def get_loans(self, user_id: str) -> list[LoanRecord]:
        """Lista os empréstimos de um usuário."""
        data = await self._get(f"users/{user_id}/loans")
        try:
            return [LoanRecord.model_validate(raw) for raw in data or []]
        except ValueError:
            raise RemoteSourceUnavailable(
                "Empréstimos com formato inválido",
                source=self.name,
            )
