"""Port interfaces for the dgauth storage adapter.

These abstract base classes define the boundary between the generic
authentication-storage contract and the backends that implement it.
Implementations live in the adapters/ package.

Port Interface Categories:

1. **Driven Ports** (callers reach out to storage adapters)
   - AuthStorePort: Persist and query users, sessions, accounts and
     verification tokens

Every operation returns None for records that do not exist instead of
raising. Backends raise only when they are unreachable or reject a request.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Account, Session, SessionAndUser, User, VerificationToken


# ============================================================================
# DRIVEN PORTS
# ============================================================================


class AuthStorePort(ABC):
    """Port for persisting authentication records.

    Adapters implementing this port translate each operation into the
    backend's native query language and reshape the results into the core
    records. Uniqueness (user email, session token, provider account) is
    the backend's responsibility.
    """

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """Create and persist a new user.

        Args:
            user: User to create. Any ``id`` on it is ignored; the backend
                assigns one.

        Returns:
            The stored user, including its assigned id.

        Raises:
            Exception: If the backend is unavailable or rejects the user.
        """

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        """Retrieve a user by id.

        Returns:
            User if found, None otherwise.
        """

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None:
        """Retrieve a user by email address.

        Returns:
            User if found, None otherwise.
        """

    @abstractmethod
    async def get_user_by_account(
        self, provider: str, provider_account_id: str
    ) -> User | None:
        """Retrieve the user owning a provider account.

        Args:
            provider: Provider name (e.g. "github").
            provider_account_id: The account id assigned by the provider.

        Returns:
            The owning User, or None if no such account is linked.
        """

    @abstractmethod
    async def update_user(self, user_id: str, **changes: Any) -> User | None:
        """Apply a partial update to a user.

        Args:
            user_id: Id of the user to update.
            **changes: User attribute names mapped to new values. None
                values are ignored.

        Returns:
            The updated User, or None if the user does not exist.

        Raises:
            ValueError: If a change names an unknown attribute.
        """

    @abstractmethod
    async def delete_user(self, user_id: str) -> User | None:
        """Delete a user together with their sessions and accounts.

        Returns:
            The deleted User, or None if the user did not exist.
        """

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @abstractmethod
    async def link_account(self, account: Account) -> Account:
        """Link a provider account to an existing user.

        Returns:
            The stored Account, including its assigned id.
        """

    @abstractmethod
    async def unlink_account(
        self, provider: str, provider_account_id: str
    ) -> Account | None:
        """Remove a provider account.

        Returns:
            The removed Account, or None if it was not linked.
        """

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_session(self, session: Session) -> Session:
        """Create a session for an existing user.

        Returns:
            The stored Session.
        """

    @abstractmethod
    async def get_session_and_user(
        self, session_token: str
    ) -> SessionAndUser | None:
        """Retrieve a session and its owner by session token.

        Returns:
            SessionAndUser, or None if the session does not exist or has
            no user attached.
        """

    @abstractmethod
    async def update_session(
        self, session_token: str, **changes: Any
    ) -> Session | None:
        """Apply a partial update to a session (usually ``expires``).

        Returns:
            The updated Session, or None if the session does not exist.

        Raises:
            ValueError: If a change names an unknown attribute.
        """

    @abstractmethod
    async def delete_session(self, session_token: str) -> Session | None:
        """Delete a session by token.

        Returns:
            The deleted Session, or None if it did not exist.
        """

    # ------------------------------------------------------------------
    # Verification tokens
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_verification_token(
        self, verification_token: VerificationToken
    ) -> VerificationToken:
        """Persist a verification token.

        Returns:
            The stored VerificationToken.
        """

    @abstractmethod
    async def use_verification_token(
        self, identifier: str, token: str
    ) -> VerificationToken | None:
        """Consume a verification token.

        The token is deleted, so a second call with the same arguments
        returns None.

        Returns:
            The consumed VerificationToken, or None if it did not exist.
        """

    async def close(self) -> None:
        """Release resources held by the adapter. No-op by default."""
