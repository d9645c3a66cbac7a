"""Command-line helper for Azure AD group and membership administration.

This module serves as a CLI wrapper around azure_directory.DirectoryClient.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from azure_directory import DirectoryClient, DirectoryError
from azure_directory.config import load_settings


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _print_records(records) -> None:
    _print_json([record.to_dict() for record in records])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Azure AD directory helper")
    parser.add_argument("--tenant", help="Defaults to AZURE_TENANT_ID")
    parser.add_argument("--client-id", help="Defaults to AZURE_CLIENT_ID")
    parser.add_argument("--client-secret", default=None,
                        help="Defaults to /run/secrets/azure_client_secret or AZURE_CLIENT_SECRET")
    parser.add_argument("--base-uri", help="Defaults to GRAPH_BASE_URI")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="cmd")

    sg = sub.add_parser("get-group")
    lookup = sg.add_mutually_exclusive_group(required=True)
    lookup.add_argument("--id")
    lookup.add_argument("--display-name")
    lookup.add_argument("--mail-nickname")

    sc = sub.add_parser("create-group")
    sc.add_argument("--display-name", required=True)
    sc.add_argument("--description", default="")
    sc.add_argument("--owner", action="append", default=[])
    sc.add_argument("--member", action="append", default=[])

    sd = sub.add_parser("set-description")
    sd.add_argument("--group-id", required=True)
    sd.add_argument("--description", required=True)

    for name in ("members", "owners", "empty-group"):
        sp = sub.add_parser(name)
        sp.add_argument("--group-id", required=True)

    for name in ("user-groups", "get-user"):
        sp = sub.add_parser(name)
        sp.add_argument("--user-id", required=True)

    for name in ("add-member", "remove-member"):
        sp = sub.add_parser(name)
        sp.add_argument("--group-id", required=True)
        sp.add_argument("--user-id", required=True)

    sa = sub.add_parser("app-groups")
    sa.add_argument("--app-id", required=True)

    sr = sub.add_parser("assign-app")
    sr.add_argument("--group-id", required=True)
    sr.add_argument("--app-id", required=True)
    sr.add_argument("--role-id", required=True)

    return parser


def run(client: DirectoryClient, args: argparse.Namespace) -> int:
    """Execute one subcommand. Returns the process exit code."""
    if args.cmd == "get-group":
        if args.id:
            group = client.get_group_by_id(args.id)
        elif args.display_name:
            group = client.get_group_by_display_name(args.display_name)
        else:
            group = client.get_group_by_mail_nickname(args.mail_nickname)
        if group is None:
            print("[directory] Group not found", file=sys.stderr)
            return 1
        _print_json(group.to_dict())
    elif args.cmd == "create-group":
        group = client.create_group(args.display_name, args.description, args.owner, args.member)
        _print_json(group.to_dict())
    elif args.cmd == "set-description":
        if not client.set_group_description(args.group_id, args.description):
            print(f"[directory] Unable to update group {args.group_id}", file=sys.stderr)
            return 1
    elif args.cmd == "members":
        _print_records(client.get_group_members(args.group_id))
    elif args.cmd == "owners":
        _print_records(client.get_group_owners(args.group_id))
    elif args.cmd == "empty-group":
        client.empty_group(args.group_id)
        print(f"[directory] Group {args.group_id} emptied")
    elif args.cmd == "user-groups":
        _print_records(client.get_user_groups(args.user_id))
    elif args.cmd == "get-user":
        user = client.get_user_by_id(args.user_id)
        if user is None:
            print("[directory] User not found", file=sys.stderr)
            return 1
        _print_json(user.to_dict())
    elif args.cmd == "add-member":
        client.add_user_to_group(args.user_id, args.group_id)
        print(f"[directory] Added {args.user_id} to {args.group_id}")
    elif args.cmd == "remove-member":
        client.remove_user_from_group(args.user_id, args.group_id)
        print(f"[directory] Removed {args.user_id} from {args.group_id}")
    elif args.cmd == "app-groups":
        _print_records(client.get_enterprise_app_groups(args.app_id))
    elif args.cmd == "assign-app":
        client.add_group_to_enterprise_app(args.group_id, args.app_id, args.role_id)
        print(f"[directory] Assigned {args.group_id} to application {args.app_id}")
    return 0


def main() -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(
            tenant_id=args.tenant,
            client_id=args.client_id,
            client_secret=args.client_secret,
            base_uri=args.base_uri,
        )
    except (RuntimeError, ValueError) as e:
        print(f"[directory] Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        with DirectoryClient.from_settings(settings) as client:
            code = run(client, args)
    except DirectoryError as e:
        print(f"[directory] Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
