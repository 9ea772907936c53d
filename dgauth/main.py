"""Composition root for the dgauth storage adapter.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Dependency injection
- Entry point selection (load_schema or interactive CLI)
"""

import asyncio
import functools
import json
import logging
import sys
from typing import Any

from dgauth.adapters.cli.commands import CLICommandHandler, run_command
from dgauth.adapters.dgraph.adapter import DgraphAuthStore
from dgauth.adapters.dgraph.schema import load_schema, render_schema
from dgauth.config import Settings, load_settings


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Run interactive CLI loop.

    Provides a REPL-like interface for management commands.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            # Read command from stdin in a thread to avoid blocking
            command_line = await loop.run_in_executor(None, input, "dgauth> ")
            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            try:
                result = await run_command(cli_handler, command, args)
                print(json.dumps(result, indent=2, default=str))
            except ValueError as e:
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))
            except Exception as e:
                logger.error(f"Command execution error: {e}", exc_info=True)
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))

        except EOFError:
            # Ctrl+D to exit
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue
        except Exception as e:
            logger.error(f"CLI error: {e}", exc_info=True)


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  load-schema
    Push the configured schema to the Dgraph admin endpoint.

  user
    Show a user. Required: user_id
    Example: user {"user_id": "0x4e21"}

  find-user
    Show a user by email. Required: email
    Example: find-user {"email": "ada@example.com"}

  session
    Show a session and its user. Required: session_token

  delete-session
    Delete a session. Required: session_token

  delete-user
    Delete a user with their sessions and accounts. Required: user_id

  unlink-account
    Remove a provider account. Required: provider, provider_account_id
    Example: unlink-account {"provider": "github", "provider_account_id": "42"}

  help
    Show this help message.

  exit
    Exit the CLI.
    """
    print(help_text)


class JSONFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_object: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_object["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_object, default=str)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )


def build_schema_loader(settings: Settings):
    """Bind schema rendering and loading to the configured deployment."""
    jwt_algorithm = settings.dgraph_jwt_algorithm if settings.secure else None
    verification_key = settings.dgraph_jwt_verification_key
    if jwt_algorithm == "HS256" and not verification_key:
        # HS256 verifies with the signing secret itself
        verification_key = settings.dgraph_jwt_secret

    schema = render_schema(
        jwt_algorithm=jwt_algorithm,
        verification_key=verification_key or None,
        header=settings.dgraph_auth_header,
        namespace=settings.dgraph_jwt_namespace or None,
    )
    return functools.partial(
        load_schema,
        schema,
        endpoint=settings.dgraph_endpoint,
        admin_url=settings.dgraph_admin_url or None,
        auth_token=settings.dgraph_auth_token or None,
        timeout=settings.request_timeout_seconds,
    )


async def bootstrap() -> int:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate the Dgraph store and schema loader
    4. Select and start run mode

    Returns:
        Process exit code.
    """
    # Step 1: Load configuration
    settings = load_settings()

    # Step 2: Configure logging
    configure_logging(
        "DEBUG" if settings.debug else settings.log_level, settings.log_format
    )
    logger = logging.getLogger(__name__)
    logger.info("Loading dgauth...")

    # Step 3: Instantiate adapters
    schema_loader = build_schema_loader(settings)
    logger.info(
        f"Dgraph endpoint: {settings.dgraph_endpoint} "
        f"({'secure ' + settings.dgraph_jwt_algorithm if settings.secure else 'unsecure'})"
    )

    # Step 4: Select run mode and start
    if settings.run_mode == "load_schema":
        loaded = await schema_loader()
        return 0 if loaded else 1

    store = DgraphAuthStore.from_settings(settings)
    try:
        cli_handler = CLICommandHandler(store, schema_loader=schema_loader)
        await _run_cli_interactive(cli_handler)
    finally:
        await store.close()
    return 0


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error, or schema load failure
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        sys.exit(asyncio.run(bootstrap()))
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
