"""Fake implementations for testing.

These in-memory implementations allow the storage contract and the
Dgraph adapter to be tested without external dependencies:

- FakeAuthStore: In-memory AuthStorePort
- FakeDgraphServer: httpx transport emulating Dgraph's generated GraphQL API
"""

from .dgraph import FakeDgraphServer
from .store import FakeAuthStore

__all__ = [
    "FakeAuthStore",
    "FakeDgraphServer",
]
