"""
Clientes HTTP das fontes remotas (catálogo e diretório de usuários).
"""

from library_holds.clients.remote import (
    CatalogClient,
    RemoteRecordNotFound,
    RemoteSourceError,
    RemoteSourceNotConfigured,
    RemoteSourceUnavailable,
    UserDirectoryClient,
)

__all__ = [
    "CatalogClient",
    "RemoteRecordNotFound",
    "RemoteSourceError",
    "RemoteSourceNotConfigured",
    "RemoteSourceUnavailable",
    "UserDirectoryClient",
]
