# Main Entry Point - API server
#
# Reads configuration from the environment (and .env), then serves the
# REST API with uvicorn. --host/--port override VAULT_HOST/VAULT_PORT.

import sys
import argparse

from . import __version__
from .config import Settings
from .core import get_audit_logger, EventType, EventSeverity


def main():
    """Main entry point for VaultKeeper."""
    parser = argparse.ArgumentParser(
        description="VaultKeeper - personal encrypted storage REST service",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Bind address (default: VAULT_HOST or 127.0.0.1)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (default: VAULT_PORT or 8080)"
    )

    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file (default: search the working directory)"
    )

    parser.add_argument(
        "--init-schema",
        action="store_true",
        help="Create database tables on startup"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"VaultKeeper v{__version__}"
    )

    args = parser.parse_args()

    try:
        settings = Settings.from_env(args.env_file)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if overrides:
        settings = settings.model_copy(update=overrides)

    audit = get_audit_logger(settings.audit_dir)

    from .api.main import start_api_server

    print(f"Starting VaultKeeper API on {settings.host}:{settings.port}...")
    try:
        start_api_server(settings, init_schema=args.init_schema)
    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        audit.log_event(
            event_type=EventType.SYSTEM_STOP,
            severity=EventSeverity.CRITICAL,
            message=f"VaultKeeper crashed: {str(e)}"
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
