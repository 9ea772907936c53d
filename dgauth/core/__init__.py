"""Core domain for the dgauth storage adapter.

This package contains zero external dependencies: the authentication
records and the storage port. All backend integrations are handled by
the adapters package.
"""

from .models import (
    Account,
    Session,
    SessionAndUser,
    User,
    VerificationToken,
)
from .ports import AuthStorePort

__all__ = [
    "Account",
    "AuthStorePort",
    "Session",
    "SessionAndUser",
    "User",
    "VerificationToken",
]
