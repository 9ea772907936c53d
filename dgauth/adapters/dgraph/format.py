"""Translation between core records and Dgraph GraphQL payloads.

Dgraph returns DateTime values as RFC 3339 strings and names fields in
camelCase; the core speaks datetimes and snake_case. This module converts
in both directions and flattens nested ``user { id }`` links into
``user_id``.
"""

import re
from datetime import datetime, timezone
from typing import Any

from dgauth.core.models import Account, Session, User, VerificationToken

# Python attribute -> GraphQL field
USER_FIELDS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "email": "email",
    "image": "image",
    "email_verified": "emailVerified",
}

SESSION_FIELDS: dict[str, str] = {
    "id": "id",
    "session_token": "sessionToken",
    "expires": "expires",
}

ACCOUNT_FIELDS: dict[str, str] = {
    "id": "id",
    "type": "type",
    "provider": "provider",
    "provider_account_id": "providerAccountId",
    "expires_at": "expires_at",
    "token_type": "token_type",
    "scope": "scope",
    "access_token": "access_token",
    "refresh_token": "refresh_token",
    "id_token": "id_token",
    "session_state": "session_state",
}

VERIFICATION_TOKEN_FIELDS: dict[str, str] = {
    "identifier": "identifier",
    "token": "token",
    "expires": "expires",
}

_ISO_DATETIME = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})?$"
)


def parse_datetime(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp, or return None if it is not one.

    Fractions finer than microseconds are truncated and a trailing ``Z``
    is read as UTC.
    """
    match = _ISO_DATETIME.match(value)
    if match is None:
        return None
    text = match.group("base")
    if match.group("fraction"):
        text += "." + match.group("fraction")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset == "Z":
        offset = "+00:00"
    try:
        parsed = datetime.fromisoformat(text + (offset or ""))
    except ValueError:
        return None
    return parsed


def format_from(
    record: dict[str, Any] | None, only: tuple[str, ...] | None = None
) -> dict[str, Any] | None:
    """Convert date-time strings in a GraphQL record into datetimes.

    Args:
        record: A single GraphQL object, or None.
        only: Restrict conversion to these keys. Every string value is
            inspected when omitted.

    Returns:
        A shallow copy with nested objects left untouched, or None.
    """
    if record is None:
        return None
    formatted: dict[str, Any] = {}
    for key, value in record.items():
        if isinstance(value, str) and (only is None or key in only):
            parsed = parse_datetime(value)
            formatted[key] = parsed if parsed is not None else value
        else:
            formatted[key] = value
    return formatted


def format_to(value: Any) -> Any:
    """Recursively convert datetimes into RFC 3339 strings."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, dict):
        return {key: format_to(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [format_to(item) for item in value]
    return value


def _pick(record: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """Read known GraphQL fields from a record into Python attribute names."""
    return {attr: record.get(name) for attr, name in mapping.items()}


def _linked_user_id(record: dict[str, Any]) -> str | None:
    user = record.get("user")
    if isinstance(user, dict):
        return user.get("id")
    return record.get("userId")


def to_user(record: dict[str, Any] | None) -> User | None:
    """Build a User from a GraphQL user record."""
    formatted = format_from(record, only=("emailVerified",))
    if not formatted:
        return None
    return User(**_pick(formatted, USER_FIELDS))


def to_session(
    record: dict[str, Any] | None, user_id: str | None = None
) -> Session | None:
    """Build a Session, flattening its nested ``user { id }``.

    Returns None when the record is missing or has no linked user.
    """
    formatted = format_from(record, only=("expires",))
    if not formatted:
        return None
    owner = user_id or _linked_user_id(formatted)
    if not owner:
        return None
    return Session(user_id=owner, **_pick(formatted, SESSION_FIELDS))


def to_account(
    record: dict[str, Any] | None, user_id: str | None = None
) -> Account | None:
    """Build an Account, flattening its nested ``user { id }``."""
    formatted = format_from(record, only=())
    if not formatted:
        return None
    owner = user_id or _linked_user_id(formatted)
    if not owner:
        return None
    return Account(user_id=owner, **_pick(formatted, ACCOUNT_FIELDS))


def to_verification_token(
    record: dict[str, Any] | None,
) -> VerificationToken | None:
    """Build a VerificationToken from a GraphQL record."""
    formatted = format_from(record, only=("expires",))
    if not formatted:
        return None
    return VerificationToken(**_pick(formatted, VERIFICATION_TOKEN_FIELDS))


def to_input(
    values: dict[str, Any], mapping: dict[str, str]
) -> dict[str, Any]:
    """Build a GraphQL input object from Python attribute values.

    Drops None values and the ``id`` (Dgraph assigns ids) and nests a
    ``user_id`` as ``user: {id}``.
    """
    graphql_input: dict[str, Any] = {}
    for attr, value in values.items():
        if value is None or attr == "id":
            continue
        if attr == "user_id":
            graphql_input["user"] = {"id": value}
            continue
        graphql_input[mapping[attr]] = format_to(value)
    return graphql_input


def user_input(user: User) -> dict[str, Any]:
    return to_input(vars(user), USER_FIELDS)


def session_input(session: Session) -> dict[str, Any]:
    return to_input(vars(session), SESSION_FIELDS)


def account_input(account: Account) -> dict[str, Any]:
    return to_input(vars(account), ACCOUNT_FIELDS)


def verification_token_input(token: VerificationToken) -> dict[str, Any]:
    return to_input(vars(token), VERIFICATION_TOKEN_FIELDS)
