"""Command-line entry point for syncing Bill.com identity data.

This module serves as a CLI wrapper around bill_connector.core services.
Every flag falls back to its BATON_BILL_* environment variable.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bill_connector.config import apply_overrides, load_settings, validate_config
from bill_connector.core.bill import SANDBOX_BASE_URL, BillError
from bill_connector.core.connector import new_connector
from bill_connector.core.snapshot import SnapshotWriter, verify_snapshot
from bill_connector.core.sync_service import SyncService

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _id_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bill.com identity connector")
    parser.add_argument("--username", help="Bill.com username ($BATON_BILL_USERNAME)")
    parser.add_argument("--password", help="Bill.com password ($BATON_BILL_PASSWORD)")
    parser.add_argument("--organization-ids", type=_id_list,
                        help="Comma-separated organization ids to sync ($BATON_BILL_ORGANIZATION_IDS)")
    parser.add_argument("--developer-key", help="Bill.com developer key ($BATON_BILL_DEVELOPER_KEY)")
    parser.add_argument("--base-url", help="API base URL ($BATON_BILL_BASE_URL)")
    parser.add_argument("--sandbox", action="store_true", help="Use the Bill.com sandbox API")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        help="Logging level ($BATON_BILL_LOG_LEVEL, default: INFO)")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("validate", help="Check credentials against Bill.com")
    sub.add_parser("orgs", help="List organizations visible to the user")

    ss = sub.add_parser("sync", help="Sync organizations, users and roles to a snapshot file")
    ss.add_argument("--file", help="Snapshot path ($BATON_BILL_SNAPSHOT_PATH)")
    ss.add_argument("--signing-key", help="HMAC key for record signatures")

    sv = sub.add_parser("verify", help="Verify snapshot signatures")
    sv.add_argument("--file", help="Snapshot path ($BATON_BILL_SNAPSHOT_PATH)")
    sv.add_argument("--signing-key", help="HMAC key for record signatures")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return

    # Before load_settings(), which logs
    log_level = args.log_level or os.environ.get("BATON_BILL_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        parser.error(f"invalid log level {log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except RuntimeError as e:
        parser.error(str(e))

    config = apply_overrides(
        settings,
        username=args.username,
        password=args.password,
        organization_ids=args.organization_ids or None,
        developer_key=args.developer_key,
        base_url=args.base_url or (SANDBOX_BASE_URL if args.sandbox else None),
        request_timeout=args.timeout,
        log_level=log_level,
        snapshot_path=getattr(args, "file", None),
        snapshot_signing_key=getattr(args, "signing_key", None),
    )

    if args.cmd == "verify":
        total, valid = verify_snapshot(config.snapshot_path, config.snapshot_signing_key)
        if total == 0:
            print(f"[verify] Error: snapshot not found or empty: {config.snapshot_path}", file=sys.stderr)
            sys.exit(1)
        print(f"Snapshot: {valid}/{total} records with valid signatures")
        sys.exit(0 if total == valid else 1)

    try:
        validate_config(config, require_organizations=args.cmd != "orgs")
    except ValueError as e:
        parser.error(str(e))

    connector = new_connector(config)

    if args.cmd == "validate":
        try:
            connector.validate()
        except BillError as e:
            print(f"[validate] Error: {e}", file=sys.stderr)
            sys.exit(1)
        print("[validate] Credentials OK", file=sys.stderr)
    elif args.cmd == "orgs":
        try:
            organizations = connector.client.get_organizations()
        except BillError as e:
            print(f"[orgs] Error: {e}", file=sys.stderr)
            sys.exit(1)
        for organization in organizations:
            print(f"{organization.id}\t{organization.name}")
    elif args.cmd == "sync":
        try:
            with SnapshotWriter(config.snapshot_path, config.snapshot_signing_key) as writer:
                stats = SyncService(connector, writer).run()
        except BillError as e:
            print(f"[sync] Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(
            f"[sync] Wrote {config.snapshot_path}: {stats.resources} resources, "
            f"{stats.entitlements} entitlements, {stats.grants} grants",
            file=sys.stderr,
        )
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
