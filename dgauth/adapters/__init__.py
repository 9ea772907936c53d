"""External adapters for the dgauth storage adapter.

This package contains all external dependencies (httpx, PyJWT) and provides
implementations of the core port interfaces.

Adapter Organization:

- dgraph/: GraphQL client, schema loader and AuthStorePort implementation
  for Dgraph
- cli/: Command-line management commands
"""
