"""Dgraph GraphQL client.

Sends GraphQL documents to a Dgraph endpoint over HTTP and unwraps the
response. Optionally signs a JWT (HS256 or RS256) carrying the claim that
the secure schema's @auth rules check for.
"""

import logging
from typing import Any, Literal, TypeAlias

import httpx
import jwt

logger = logging.getLogger(__name__)

DgraphJwtAlgorithm: TypeAlias = Literal["HS256", "RS256"]

SUPPORTED_ALGORITHMS: frozenset[str] = frozenset({"HS256", "RS256"})


class DgraphClientError(Exception):
    """GraphQL-level failure reported by Dgraph in the ``errors`` list."""

    def __init__(
        self,
        errors: list[dict[str, Any]],
        query: str,
        variables: dict[str, Any] | None = None,
    ):
        self.errors = errors
        self.query = query
        self.variables = variables
        super().__init__(
            "\n".join(str(error.get("message", error)) for error in errors)
        )


class DgraphClient:
    """Async client for a Dgraph GraphQL endpoint via httpx."""

    def __init__(
        self,
        endpoint: str,
        auth_token: str,
        jwt_secret: str | None = None,
        jwt_algorithm: DgraphJwtAlgorithm = "HS256",
        auth_header: str = "Authorization",
        jwt_namespace: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the Dgraph client.

        Args:
            endpoint: GraphQL endpoint (e.g., http://localhost:8080/graphql).
            auth_token: API key sent as ``X-Auth-Token``.
            jwt_secret: Signing key for the auth header. HS256 takes a shared
                secret, RS256 a PEM private key. No JWT is sent when empty.
            jwt_algorithm: "HS256" or "RS256".
            auth_header: Header carrying the JWT, as configured in the
                schema's Dgraph.Authorization line.
            jwt_namespace: Claims are nested under this key when set.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).

        Raises:
            ValueError: If endpoint or auth_token is missing, or the
                algorithm is unsupported.
        """
        if not endpoint:
            raise ValueError("Dgraph client error: Please provide a graphql endpoint")
        if not auth_token:
            raise ValueError("Dgraph client error: Please provide an api key")
        if jwt_algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(
                f"Unsupported JWT algorithm: {jwt_algorithm}. "
                f"Expected one of {sorted(SUPPORTED_ALGORITHMS)}"
            )

        self.endpoint = endpoint
        self.auth_token = auth_token
        self.jwt_secret = jwt_secret or None
        self.jwt_algorithm = jwt_algorithm
        self.auth_header = auth_header
        self.jwt_namespace = jwt_namespace or None
        self.client = httpx.AsyncClient(
            headers=self._get_headers(),
            timeout=timeout,
            transport=transport,
        )

    def _get_headers(self) -> dict[str, str]:
        """Build request headers."""
        headers = {
            "Content-Type": "application/json",
            "X-Auth-Token": self.auth_token,
        }
        if self.auth_header and self.jwt_secret:
            headers[self.auth_header] = self._sign_token()
        return headers

    def _sign_token(self) -> str:
        """Sign the JWT the secure schema's @auth rules expect."""
        claims: dict[str, Any] = {"nextAuth": True}
        if self.jwt_namespace:
            claims = {self.jwt_namespace: claims}
        return jwt.encode(claims, self.jwt_secret, algorithm=self.jwt_algorithm)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    async def run(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> Any:
        """Execute a GraphQL document and return its first result field.

        Args:
            query: GraphQL query or mutation, fragments included.
            variables: Values for the document's variables.

        Returns:
            The value of the first key in the response's ``data`` object,
            or None when ``data`` is empty.

        Raises:
            DgraphClientError: If Dgraph reports GraphQL errors.
            httpx.HTTPError: If the request fails at the HTTP level.
        """
        try:
            response = await self.client.post(
                self.endpoint,
                json={"query": query, "variables": variables},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Dgraph at {self.endpoint}: {e}")
            raise

        errors = payload.get("errors") or []
        if errors:
            error = DgraphClientError(errors, query, variables)
            logger.error(
                f"Dgraph rejected GraphQL request: {error}; "
                f"query={query!r} variables={variables!r}"
            )
            raise error

        data = payload.get("data") or {}
        return next(iter(data.values()), None)
