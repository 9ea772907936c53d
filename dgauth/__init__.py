"""dgauth: authentication storage (users, sessions, accounts, verification
tokens) on top of Dgraph's GraphQL API."""

__version__ = "0.1.0"
