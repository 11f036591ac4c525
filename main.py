"""Command-line interface for the insurance portal backend."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from portal.config import Settings, load_settings
from portal.database import DocumentStore, create_store
from portal.errors import StorageError

logger = logging.getLogger("insurance_portal.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Insurance portal backend utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Bind address for the API (default: HOST or 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the API (default: PORT or 4000)",
    )

    subparsers.add_parser("init-db", help="Create the document store indexes")
    subparsers.add_parser("contacts", help="Print stored contact messages")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "contacts"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(settings: Settings, *, host: str | None, port: int | None) -> None:
    from portal.service import create_app
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting insurance portal API on http://%s:%s", bind_host, bind_port)

    app = create_app(settings=settings)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


def _open_persistent_store(settings: Settings) -> DocumentStore | None:
    if not settings.mongodb_uri:
        print(
            "MONGODB_URI is not set; this command needs a persistent document store.",
            file=sys.stderr,
        )
        return None
    return create_store(settings)


def _initialise_database(store: DocumentStore) -> int:
    try:
        store.ensure_indexes()
    except StorageError as exc:
        print(f"Failed to initialise the document store: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()
    print("Document store initialisation complete.")
    return 0


def _list_contacts(store: DocumentStore) -> int:
    try:
        contacts = store.list_contacts()
    except StorageError as exc:
        print(f"Failed to fetch contact messages: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()

    if not contacts:
        print("No contact messages have been stored.")
        return 0

    print(f"{len(contacts)} contact message(s) found:")
    print(f"{'Received':<20}  {'Name':<24}  {'Email':<32}  Message")
    print("-" * 100)
    for contact in contacts:
        received = contact.created_at.strftime("%Y-%m-%d %H:%M:%S")
        summary = contact.message.replace("\n", " ")
        if len(summary) > 40:
            summary = summary[:37] + "..."
        print(f"{received:<20}  {contact.name:<24}  {contact.email:<32}  {summary}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    if args.command == "serve":
        _serve(settings, host=args.host, port=args.port)
        return 0
    if args.command in ("init-db", "contacts"):
        store = _open_persistent_store(settings)
        if store is None:
            return 1
        if args.command == "init-db":
            return _initialise_database(store)
        return _list_contacts(store)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
