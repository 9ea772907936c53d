"""Dgraph adapters for authentication storage.

Exposes the GraphQL client, the AuthStorePort implementation and the
schema helpers used to provision a Dgraph instance.
"""

from .adapter import DgraphAuthStore
from .client import DgraphClient, DgraphClientError, DgraphJwtAlgorithm
from .fragments import Fragments
from .schema import admin_schema_url, load_schema, render_schema

__all__ = [
    "DgraphAuthStore",
    "DgraphClient",
    "DgraphClientError",
    "DgraphJwtAlgorithm",
    "Fragments",
    "admin_schema_url",
    "load_schema",
    "render_schema",
]
