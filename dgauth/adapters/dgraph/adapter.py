"""Dgraph authentication store adapter.

Implements AuthStorePort by issuing one GraphQL document per operation
against Dgraph's generated API (addUser, queryAccount, updateSession, ...)
and reshaping the results into core records.
"""

import logging
from typing import TYPE_CHECKING, Any

from dgauth.adapters.dgraph import format as fmt
from dgauth.adapters.dgraph.client import DgraphClient
from dgauth.adapters.dgraph.fragments import Fragments
from dgauth.core.models import (
    Account,
    Session,
    SessionAndUser,
    User,
    VerificationToken,
    validate_changes,
)
from dgauth.core.ports import AuthStorePort

if TYPE_CHECKING:
    from dgauth.config import Settings

logger = logging.getLogger(__name__)


CREATE_USER = """
mutation ($input: [AddUserInput!]!) {
  addUser(input: $input) {
    user {
      ...UserFragment
    }
  }
}
"""

GET_USER = """
query ($id: ID!) {
  getUser(id: $id) {
    ...UserFragment
  }
}
"""

GET_USER_BY_EMAIL = """
query ($email: String = "") {
  queryUser(filter: { email: { eq: $email } }) {
    ...UserFragment
  }
}
"""

GET_USER_BY_ACCOUNT = """
query ($provider: String = "", $providerAccountId: String = "") {
  queryAccount(
    filter: {
      provider: { eq: $provider }
      providerAccountId: { eq: $providerAccountId }
    }
  ) {
    id
    user {
      ...UserFragment
    }
  }
}
"""

UPDATE_USER = """
mutation ($id: [ID!]!, $input: UserPatch) {
  updateUser(input: { filter: { id: $id }, set: $input }) {
    user {
      ...UserFragment
    }
  }
}
"""

DELETE_USER = """
mutation ($id: [ID!]!) {
  deleteUser(filter: { id: $id }) {
    numUids
    user {
      ...UserFragment
      accounts {
        id
      }
      sessions {
        id
      }
    }
  }
}
"""

DELETE_USER_LINKS = """
mutation ($accounts: [ID!]!, $sessions: [ID!]!) {
  deleteAccount(filter: { id: $accounts }) {
    numUids
  }
  deleteSession(filter: { id: $sessions }) {
    numUids
  }
}
"""

LINK_ACCOUNT = """
mutation ($input: [AddAccountInput!]!) {
  addAccount(input: $input) {
    account {
      ...AccountFragment
      user {
        id
      }
    }
  }
}
"""

UNLINK_ACCOUNT = """
mutation ($provider: String = "", $providerAccountId: String = "") {
  deleteAccount(
    filter: {
      provider: { eq: $provider }
      providerAccountId: { eq: $providerAccountId }
    }
  ) {
    numUids
    account {
      ...AccountFragment
      user {
        id
      }
    }
  }
}
"""

CREATE_SESSION = """
mutation ($input: [AddSessionInput!]!) {
  addSession(input: $input) {
    session {
      ...SessionFragment
      user {
        id
      }
    }
  }
}
"""

GET_SESSION_AND_USER = """
query ($sessionToken: String = "") {
  querySession(filter: { sessionToken: { eq: $sessionToken } }) {
    ...SessionFragment
    user {
      ...UserFragment
    }
  }
}
"""

UPDATE_SESSION = """
mutation ($sessionToken: String = "", $input: SessionPatch) {
  updateSession(
    input: { filter: { sessionToken: { eq: $sessionToken } }, set: $input }
  ) {
    session {
      ...SessionFragment
      user {
        id
      }
    }
  }
}
"""

DELETE_SESSION = """
mutation ($sessionToken: String = "") {
  deleteSession(filter: { sessionToken: { eq: $sessionToken } }) {
    numUids
    session {
      ...SessionFragment
      user {
        id
      }
    }
  }
}
"""

CREATE_VERIFICATION_TOKEN = """
mutation ($input: [AddVerificationTokenInput!]!) {
  addVerificationToken(input: $input) {
    verificationToken {
      ...VerificationTokenFragment
    }
  }
}
"""

USE_VERIFICATION_TOKEN = """
mutation ($identifier: String = "", $token: String = "") {
  deleteVerificationToken(
    filter: { identifier: { eq: $identifier }, token: { eq: $token } }
  ) {
    numUids
    verificationToken {
      ...VerificationTokenFragment
    }
  }
}
"""


def _first(records: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    """Return the first record of a Dgraph result list, if any."""
    if not records:
        return None
    return records[0]


class DgraphAuthStore(AuthStorePort):
    """Dgraph-backed authentication store via the GraphQL API."""

    def __init__(self, client: DgraphClient, fragments: Fragments | None = None):
        """Initialize the Dgraph store.

        Args:
            client: Configured DgraphClient. The store closes it on close().
            fragments: Optional fragment overrides selecting extra fields.
        """
        self.client = client
        self.fragments = fragments or Fragments()

    @classmethod
    def from_settings(
        cls, settings: "Settings", fragments: Fragments | None = None
    ) -> "DgraphAuthStore":
        """Build a store and its client from application settings."""
        client = DgraphClient(
            endpoint=settings.dgraph_endpoint,
            auth_token=settings.dgraph_auth_token,
            jwt_secret=settings.dgraph_jwt_secret or None,
            jwt_algorithm=settings.dgraph_jwt_algorithm,
            auth_header=settings.dgraph_auth_header,
            jwt_namespace=settings.dgraph_jwt_namespace or None,
            timeout=settings.request_timeout_seconds,
        )
        return cls(client, fragments=fragments)

    async def close(self) -> None:
        """Close the underlying GraphQL client."""
        await self.client.close()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(self, user: User) -> User:
        """Create a user; Dgraph assigns the id."""
        result = await self.client.run(
            CREATE_USER + self.fragments.user,
            {"input": [fmt.user_input(user)]},
        )
        created = fmt.to_user(_first((result or {}).get("user")))
        if created is None:
            raise ValueError("Dgraph did not return the created user")
        logger.debug(f"Created user {created.id}")
        return created

    async def get_user(self, user_id: str) -> User | None:
        """Look up a user by id."""
        result = await self.client.run(
            GET_USER + self.fragments.user, {"id": user_id}
        )
        return fmt.to_user(result)

    async def get_user_by_email(self, email: str) -> User | None:
        """Look up a user by email address."""
        result = await self.client.run(
            GET_USER_BY_EMAIL + self.fragments.user, {"email": email}
        )
        return fmt.to_user(_first(result))

    async def get_user_by_account(
        self, provider: str, provider_account_id: str
    ) -> User | None:
        """Look up the user owning a provider account."""
        result = await self.client.run(
            GET_USER_BY_ACCOUNT + self.fragments.user,
            {"provider": provider, "providerAccountId": provider_account_id},
        )
        account = _first(result)
        if account is None:
            return None
        return fmt.to_user(account.get("user"))

    async def update_user(self, user_id: str, **changes: Any) -> User | None:
        """Apply a partial update to a user."""
        validate_changes(User, changes)
        patch = fmt.to_input(changes, fmt.USER_FIELDS)
        if not patch:
            return await self.get_user(user_id)

        result = await self.client.run(
            UPDATE_USER + self.fragments.user,
            {"id": [user_id], "input": patch},
        )
        return fmt.to_user(_first((result or {}).get("user")))

    async def delete_user(self, user_id: str) -> User | None:
        """Delete a user, then the accounts and sessions linked to them."""
        result = await self.client.run(
            DELETE_USER + self.fragments.user, {"id": [user_id]}
        )
        deleted = _first((result or {}).get("user"))
        if deleted is None:
            return None

        account_ids = [a["id"] for a in deleted.get("accounts") or []]
        session_ids = [s["id"] for s in deleted.get("sessions") or []]
        if account_ids or session_ids:
            await self.client.run(
                DELETE_USER_LINKS,
                {"accounts": account_ids, "sessions": session_ids},
            )
            logger.debug(
                f"Deleted {len(account_ids)} accounts and {len(session_ids)} "
                f"sessions of user {user_id}"
            )
        return fmt.to_user(deleted)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def link_account(self, account: Account) -> Account:
        """Link a provider account to a user."""
        result = await self.client.run(
            LINK_ACCOUNT + self.fragments.account,
            {"input": [fmt.account_input(account)]},
        )
        linked = fmt.to_account(
            _first((result or {}).get("account")), user_id=account.user_id
        )
        if linked is None:
            raise ValueError("Dgraph did not return the linked account")
        return linked

    async def unlink_account(
        self, provider: str, provider_account_id: str
    ) -> Account | None:
        """Remove a provider account."""
        result = await self.client.run(
            UNLINK_ACCOUNT + self.fragments.account,
            {"provider": provider, "providerAccountId": provider_account_id},
        )
        record = _first((result or {}).get("account"))
        account = fmt.to_account(record)
        if record is not None and account is None:
            logger.warning(
                f"Deleted account {record.get('id')} that had no user attached"
            )
        return account

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def create_session(self, session: Session) -> Session:
        """Create a session for a user."""
        result = await self.client.run(
            CREATE_SESSION + self.fragments.session,
            {"input": [fmt.session_input(session)]},
        )
        created = fmt.to_session(
            _first((result or {}).get("session")), user_id=session.user_id
        )
        if created is None:
            raise ValueError("Dgraph did not return the created session")
        return created

    async def get_session_and_user(
        self, session_token: str
    ) -> SessionAndUser | None:
        """Look up a session and its owner by token."""
        result = await self.client.run(
            GET_SESSION_AND_USER + self.fragments.session + self.fragments.user,
            {"sessionToken": session_token},
        )
        record = _first(result)
        if record is None:
            return None

        user = fmt.to_user(record.get("user"))
        if user is None or not user.id:
            logger.warning(f"Session {record.get('id')} has no user attached")
            return None
        session = fmt.to_session(record, user_id=user.id)
        return SessionAndUser(session=session, user=user)

    async def update_session(
        self, session_token: str, **changes: Any
    ) -> Session | None:
        """Apply a partial update to a session."""
        validate_changes(Session, changes)
        patch = fmt.to_input(changes, fmt.SESSION_FIELDS)
        if not patch:
            existing = await self.get_session_and_user(session_token)
            return existing.session if existing else None

        result = await self.client.run(
            UPDATE_SESSION + self.fragments.session,
            {"sessionToken": session_token, "input": patch},
        )
        return fmt.to_session(_first((result or {}).get("session")))

    async def delete_session(self, session_token: str) -> Session | None:
        """Delete a session by token."""
        result = await self.client.run(
            DELETE_SESSION + self.fragments.session,
            {"sessionToken": session_token},
        )
        record = _first((result or {}).get("session"))
        session = fmt.to_session(record)
        if record is not None and session is None:
            logger.warning(
                f"Deleted session {record.get('id')} that had no user attached"
            )
        return session

    # ------------------------------------------------------------------
    # Verification tokens
    # ------------------------------------------------------------------

    async def create_verification_token(
        self, verification_token: VerificationToken
    ) -> VerificationToken:
        """Persist a verification token."""
        result = await self.client.run(
            CREATE_VERIFICATION_TOKEN + self.fragments.verification_token,
            {"input": [fmt.verification_token_input(verification_token)]},
        )
        created = fmt.to_verification_token(
            _first((result or {}).get("verificationToken"))
        )
        return created or verification_token

    async def use_verification_token(
        self, identifier: str, token: str
    ) -> VerificationToken | None:
        """Delete a verification token and return it."""
        result = await self.client.run(
            USE_VERIFICATION_TOKEN + self.fragments.verification_token,
            {"identifier": identifier, "token": token},
        )
        return fmt.to_verification_token(
            _first((result or {}).get("verificationToken"))
        )
