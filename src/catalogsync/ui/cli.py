from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, cast

from dotenv import load_dotenv

from catalogsync.app import (
    ParsedCatalog,
    lock_tenant,
    parse_catalog_objects,
    reconcile_catalog,
    release_tenant,
)
from catalogsync.config import (
    ConfigurationError,
    configure_logging,
    get_sync_config,
)
from catalogsync.domain.errors import SemaphoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile provider catalogs into tenant documents")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Reconcile a Square catalog export")
    sync.add_argument("--tenant", type=str, required=True, help="Tenant id to reconcile into")
    sync.add_argument(
        "--input",
        type=Path,
        required=True,
        help="JSON file holding a list of catalog objects or an object with "
        "'objects' and optional 'related_objects'",
    )
    sync.add_argument(
        "--lock-name",
        type=str,
        help="Semaphore guarding the run (defaults to config)",
    )

    for name, help_text in (
        ("lock", "Acquire a tenant semaphore"),
        ("release", "Release a tenant semaphore"),
    ):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("--tenant", type=str, required=True, help="Tenant id")
        command.add_argument(
            "--lock-name",
            type=str,
            help="Semaphore name (defaults to config)",
        )

    return parser.parse_args(list(argv))


def _load_payload(path: Path) -> tuple[ParsedCatalog, ParsedCatalog]:
    try:
        raw: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(raw, list):
        objects_raw: object = raw
        related_raw: object = []
    elif isinstance(raw, dict):
        document = cast("dict[str, object]", raw)
        objects_raw = document.get("objects", [])
        related_raw = document.get("related_objects", [])
    else:
        raise ValueError("Catalog input must be a JSON list or object")
    if not isinstance(objects_raw, list) or not isinstance(related_raw, list):
        raise ValueError("'objects' and 'related_objects' must be lists")

    objects = parse_catalog_objects(cast("list[object]", objects_raw))
    related = parse_catalog_objects(cast("list[object]", related_raw))
    return objects, related


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        sync_config = get_sync_config()
        objects = ParsedCatalog()
        related = ParsedCatalog()
        if parsed_args.command == "sync":
            objects, related = _load_payload(parsed_args.input)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    lock_name = parsed_args.lock_name or sync_config.lock_name
    try:
        if parsed_args.command == "sync":
            result = reconcile_catalog(
                objects.objects,
                parsed_args.tenant,
                related.objects,
                config=replace(sync_config, lock_name=lock_name),
                rejected={**related.rejected, **objects.rejected},
            )
            for object_id, message in result.failures.items():
                log.warning("Object %s failed: %s", object_id, message)
            if result.failures:
                sys.exit(1)
        elif parsed_args.command == "lock":
            if not lock_tenant(parsed_args.tenant, lock_name):
                log.warning(
                    "Semaphore %s for tenant %s is already held", lock_name, parsed_args.tenant
                )
                sys.exit(1)
            log.info("Acquired %s for tenant %s", lock_name, parsed_args.tenant)
        elif parsed_args.command == "release":
            release_tenant(parsed_args.tenant, lock_name)
            log.info("Released %s for tenant %s", lock_name, parsed_args.tenant)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except SemaphoreUnavailableError as exc:
        log.warning("%s", exc)
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
