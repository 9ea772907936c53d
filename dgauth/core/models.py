"""Domain records for the dgauth storage adapter.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain. Identifiers are
assigned by the backing database; ``id`` is None until a record is stored.
"""

from dataclasses import dataclass, fields
from datetime import datetime


@dataclass
class User:
    """A person who can sign in.

    Uniqueness of ``email`` is enforced by the database, not here.
    """

    id: str | None = None
    name: str | None = None
    email: str | None = None
    image: str | None = None
    email_verified: datetime | None = None


@dataclass
class Session:
    """A database session tied to a single user."""

    session_token: str
    user_id: str
    expires: datetime
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate session invariants on creation."""
        if not self.session_token or not self.session_token.strip():
            raise ValueError("session_token must be a non-empty string")
        if not self.user_id or not self.user_id.strip():
            raise ValueError("user_id must be a non-empty string")


@dataclass
class Account:
    """A provider account (OAuth, email, credentials) linked to a user.

    The OAuth token fields keep the provider's snake_case names.
    """

    user_id: str
    type: str
    provider: str
    provider_account_id: str
    id: str | None = None
    expires_at: int | None = None
    token_type: str | None = None
    scope: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    id_token: str | None = None
    session_state: str | None = None

    def __post_init__(self) -> None:
        """Validate account invariants on creation."""
        for name in ("user_id", "type", "provider", "provider_account_id"):
            value = getattr(self, name)
            if not value or not str(value).strip():
                raise ValueError(f"{name} must be a non-empty string")


@dataclass(frozen=True)
class VerificationToken:
    """A single-use token for passwordless sign in."""

    identifier: str
    token: str
    expires: datetime

    def __post_init__(self) -> None:
        """Validate token invariants on creation."""
        if not self.identifier or not self.identifier.strip():
            raise ValueError("identifier must be a non-empty string")
        if not self.token or not self.token.strip():
            raise ValueError("token must be a non-empty string")


@dataclass(frozen=True)
class SessionAndUser:
    """A session together with the user that owns it."""

    session: Session
    user: User


def field_names(record_type: type) -> frozenset[str]:
    """Return the attribute names a record dataclass accepts."""
    return frozenset(f.name for f in fields(record_type))


def validate_changes(record_type: type, changes: dict[str, object]) -> None:
    """Reject partial updates naming attributes the record does not have.

    Raises:
        ValueError: If a key is unknown or tries to change the ``id``.
    """
    allowed = field_names(record_type) - {"id"}
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValueError(
            f"Unknown {record_type.__name__} fields: {', '.join(unknown)}"
        )


__all__ = [
    "Account",
    "Session",
    "SessionAndUser",
    "User",
    "VerificationToken",
    "field_names",
    "validate_changes",
]
