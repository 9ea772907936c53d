"""Dgraph GraphQL schema rendering and loading.

The bundled schema documents define the User, Account, Session and
VerificationToken types the store queries. The secure variant guards
every type with an @auth rule requiring the ``nextAuth`` JWT claim and
needs a ``# Dgraph.Authorization`` line telling Dgraph how to verify it.
"""

import json
import logging
from pathlib import Path

import httpx

from dgauth.adapters.dgraph.client import SUPPORTED_ALGORITHMS

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent / "graphql"
UNSECURE_SCHEMA = SCHEMA_DIR / "unsecure.schema.gql"
SECURE_SCHEMA = SCHEMA_DIR / "secure.schema.gql"

DEFAULT_ADMIN_URL = "http://localhost:8080/admin/schema"


def render_schema(
    jwt_algorithm: str | None = None,
    verification_key: str | None = None,
    header: str = "Authorization",
    namespace: str | None = None,
) -> str:
    """Return the schema text to load into Dgraph.

    Args:
        jwt_algorithm: None for the unsecure schema, else "HS256" or "RS256".
        verification_key: HS256 shared secret or RS256 PEM public key.
        header: Request header Dgraph reads the JWT from.
        namespace: Claims namespace, if the JWT nests its claims.

    Raises:
        ValueError: If the algorithm is unsupported or a secure schema is
            requested without a verification key.
    """
    if not jwt_algorithm:
        return UNSECURE_SCHEMA.read_text(encoding="utf-8")

    if jwt_algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported JWT algorithm: {jwt_algorithm}")
    if not verification_key:
        raise ValueError("A verification key is required for the secure schema")

    authorization = {
        "VerificationKey": verification_key,
        "Header": header,
        "Algo": jwt_algorithm,
    }
    if namespace:
        authorization["Namespace"] = namespace

    schema = SECURE_SCHEMA.read_text(encoding="utf-8")
    return f"{schema.rstrip()}\n\n# Dgraph.Authorization {json.dumps(authorization)}\n"


def admin_schema_url(endpoint: str | None = None) -> str:
    """Derive the admin schema URL from a GraphQL endpoint.

    ``http://host:8080/graphql`` becomes ``http://host:8080/admin/schema``.
    """
    if not endpoint:
        return DEFAULT_ADMIN_URL
    base = endpoint.rstrip("/")
    if base.endswith("/graphql"):
        base = base[: -len("/graphql")]
    return f"{base}/admin/schema"


async def load_schema(
    schema: str,
    endpoint: str | None = None,
    admin_url: str | None = None,
    auth_token: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = 30.0,
) -> bool:
    """Push a schema to Dgraph's admin endpoint.

    Args:
        schema: Schema text, usually from render_schema().
        endpoint: GraphQL endpoint the admin URL is derived from.
        admin_url: Explicit admin URL, overriding the derived one.
        auth_token: Optional API key sent as ``X-Auth-Token``.
        transport: Optional httpx transport (used by tests).
        timeout: Request timeout in seconds.

    Returns:
        True if Dgraph accepted the schema (HTTP 200), False otherwise.
    """
    url = admin_url or admin_schema_url(endpoint)
    headers = {"X-Auth-Token": auth_token} if auth_token else {}

    try:
        async with httpx.AsyncClient(
            timeout=timeout, transport=transport
        ) as client:
            response = await client.post(url, content=schema, headers=headers)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to load schema into {url}: {e}")
        return False

    logger.info(f"Loaded schema into {url}")
    return response.status_code == 200
