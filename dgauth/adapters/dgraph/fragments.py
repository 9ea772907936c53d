"""GraphQL fragments selecting the fields of each record type.

Callers may select extra fields (for example a custom ``role`` on User)
by passing their own fragment text, provided the fragment keeps its name.
"""

from dataclasses import dataclass

USER_FRAGMENT = """
fragment UserFragment on User {
  email
  id
  image
  name
  emailVerified
}
"""

ACCOUNT_FRAGMENT = """
fragment AccountFragment on Account {
  id
  type
  provider
  providerAccountId
  expires_at
  token_type
  scope
  access_token
  refresh_token
  id_token
  session_state
}
"""

SESSION_FRAGMENT = """
fragment SessionFragment on Session {
  expires
  id
  sessionToken
}
"""

VERIFICATION_TOKEN_FRAGMENT = """
fragment VerificationTokenFragment on VerificationToken {
  identifier
  token
  expires
}
"""


@dataclass(frozen=True)
class Fragments:
    """The fragment set a DgraphAuthStore appends to its documents."""

    user: str = USER_FRAGMENT
    account: str = ACCOUNT_FRAGMENT
    session: str = SESSION_FRAGMENT
    verification_token: str = VERIFICATION_TOKEN_FRAGMENT

    def __post_init__(self) -> None:
        """Ensure overrides keep the fragment names the documents spread."""
        expected = {
            "user": "UserFragment",
            "account": "AccountFragment",
            "session": "SessionFragment",
            "verification_token": "VerificationTokenFragment",
        }
        for attr, name in expected.items():
            if f"fragment {name} " not in getattr(self, attr):
                raise ValueError(f"{attr} fragment must be named {name}")
