"""CLI command implementations for dgauth management.

Provides human-initiated actions through the command-line interface.

This adapter maps CLI commands (load-schema, user lookups, session and
account removal) onto AuthStorePort operations. It handles CLI-specific
formatting and error reporting.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from datetime import datetime
from typing import Any

from dgauth.adapters.dgraph.client import DgraphClientError
from dgauth.core.ports import AuthStorePort

logger = logging.getLogger(__name__)

SchemaLoader = Callable[[], Awaitable[bool]]


def _serialize(record: Any) -> dict[str, Any] | None:
    """Convert a record dataclass into a JSON-friendly dict."""
    if record is None:
        return None
    data = asdict(record)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
        elif isinstance(value, dict):
            data[key] = {
                k: v.isoformat() if isinstance(v, datetime) else v
                for k, v in value.items()
            }
    return data


class CLICommandHandler:
    """Handles CLI commands by delegating to AuthStorePort.

    Every command returns a dictionary with ``status`` ("success",
    "not_found" or "error") and ``operation`` keys plus a payload.
    """

    def __init__(
        self, store: AuthStorePort, schema_loader: SchemaLoader | None = None
    ):
        """Initialize the CLI command handler.

        Args:
            store: AuthStorePort implementation to execute commands.
            schema_loader: Coroutine function pushing the configured schema,
                returning True on success.
        """
        self.store = store
        self.schema_loader = schema_loader

    @staticmethod
    def _error(operation: str, error: Exception, **context: Any) -> dict[str, Any]:
        logger.error(f"Failed to {operation}: {error}")
        return {"status": "error", "operation": operation, "message": str(error), **context}

    @staticmethod
    def _result(
        operation: str, key: str, record: Any, **context: Any
    ) -> dict[str, Any]:
        return {
            "status": "success" if record is not None else "not_found",
            "operation": operation,
            key: _serialize(record),
            **context,
        }

    async def load_schema(self) -> dict[str, Any]:
        """Push the configured schema to Dgraph."""
        if self.schema_loader is None:
            return {
                "status": "error",
                "operation": "load_schema",
                "message": "No schema loader configured",
            }
        loaded = await self.schema_loader()
        return {
            "status": "success" if loaded else "error",
            "operation": "load_schema",
            "message": "Schema loaded" if loaded else "Schema load failed",
        }

    async def get_user(self, user_id: str) -> dict[str, Any]:
        """Show a user by id."""
        try:
            user = await self.store.get_user(user_id)
        except (DgraphClientError, ValueError) as e:
            return self._error("get_user", e, user_id=user_id)
        return self._result("get_user", "user", user, user_id=user_id)

    async def find_user(self, email: str) -> dict[str, Any]:
        """Show a user by email address."""
        try:
            user = await self.store.get_user_by_email(email)
        except (DgraphClientError, ValueError) as e:
            return self._error("find_user", e, email=email)
        return self._result("find_user", "user", user, email=email)

    async def get_session(self, session_token: str) -> dict[str, Any]:
        """Show a session and its owner."""
        try:
            found = await self.store.get_session_and_user(session_token)
        except (DgraphClientError, ValueError) as e:
            return self._error("get_session", e)
        return self._result("get_session", "session", found)

    async def delete_session(self, session_token: str) -> dict[str, Any]:
        """Delete a session (signs the user out of it)."""
        try:
            session = await self.store.delete_session(session_token)
        except (DgraphClientError, ValueError) as e:
            return self._error("delete_session", e)
        if session is not None:
            logger.info(f"Deleted session {session.id} of user {session.user_id}")
        return self._result("delete_session", "session", session)

    async def delete_user(self, user_id: str) -> dict[str, Any]:
        """Delete a user with their sessions and accounts."""
        try:
            user = await self.store.delete_user(user_id)
        except (DgraphClientError, ValueError) as e:
            return self._error("delete_user", e, user_id=user_id)
        if user is not None:
            logger.info(f"Deleted user {user_id}")
        return self._result("delete_user", "user", user, user_id=user_id)

    async def unlink_account(
        self, provider: str, provider_account_id: str
    ) -> dict[str, Any]:
        """Unlink a provider account from its user."""
        context = {"provider": provider, "provider_account_id": provider_account_id}
        try:
            account = await self.store.unlink_account(provider, provider_account_id)
        except (DgraphClientError, ValueError) as e:
            return self._error("unlink_account", e, **context)
        return self._result("unlink_account", "account", account, **context)


async def run_command(
    handler: CLICommandHandler, command: str, args: dict[str, Any]
) -> dict[str, Any]:
    """Dispatch a named command with its arguments to the handler.

    Raises:
        ValueError: If the command is unknown or a required argument is
            missing.
    """

    def require(*names: str) -> list[Any]:
        missing = [name for name in names if name not in args]
        if missing:
            raise ValueError(f"Missing required parameter: {', '.join(missing)}")
        return [args[name] for name in names]

    if command == "load-schema":
        return await handler.load_schema()
    elif command == "user":
        return await handler.get_user(*require("user_id"))
    elif command == "find-user":
        return await handler.find_user(*require("email"))
    elif command == "session":
        return await handler.get_session(*require("session_token"))
    elif command == "delete-session":
        return await handler.delete_session(*require("session_token"))
    elif command == "delete-user":
        return await handler.delete_user(*require("user_id"))
    elif command == "unlink-account":
        return await handler.unlink_account(
            *require("provider", "provider_account_id")
        )
    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")
