"""Client modules for the local database and the remote catalog."""

from localhands.clients.catalog_api_client import CatalogApiClient, Resource
from localhands.clients.sqlite_client import SqliteClient

__all__ = [
    "CatalogApiClient",
    "Resource",
    "SqliteClient",
]
