"""Operator CLI for exercising the session provisioner through the gateway logic.

Runs the same SessionProxy the REST layer uses, against a provisioner URL:

    python scripts/session_cli.py --url http://openam:8080/openam login --username pmorris
    python scripts/session_cli.py validate --token AQIC...
    python scripts/session_cli.py attributes --token AQIC... --format atom
"""
from __future__ import annotations
import argparse
import getpass
import json
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from session_gateway.core import documents
from session_gateway.core.errors import GatewayError
from session_gateway.core.models import Credentials
from session_gateway.core.provisioner import ProvisionerClient, REQUEST_TIMEOUT
from session_gateway.core.session_proxy import SessionProxy


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="APIUS session provisioner helper")
    parser.add_argument("--url", default=os.environ.get("PROVISIONER_URL", "http://localhost:8080/openam"))
    parser.add_argument("--timeout", type=float, default=REQUEST_TIMEOUT)

    sub = parser.add_subparsers(dest="cmd")

    login = sub.add_parser("login", help="Create a session and print its token")
    login.add_argument("--username", required=True)
    login.add_argument("--password", default=os.environ.get("PROVISIONER_PASSWORD"),
                       help="Prompted for when omitted")

    for name, help_text in (
        ("validate", "Check a token (refreshes its idle timeout)"),
        ("identity", "Print the username behind a token"),
        ("logout", "Invalidate a token"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--token", required=True)

    authz = sub.add_parser("authorize", help="Policy check for a resource")
    authz.add_argument("--token", required=True)
    authz.add_argument("--uri", required=True)
    authz.add_argument("--method", default="GET")

    attrs = sub.add_parser("attributes", help="Print session attributes and roles")
    attrs.add_argument("--token", required=True)
    attrs.add_argument("--format", choices=["json", "xml", "atom"], default="json")

    return parser


def run(args, proxy: SessionProxy) -> int:
    """Execute one sub-command; returns the process exit code."""
    if args.cmd == "login":
        password = args.password or getpass.getpass("Password: ")
        token = proxy.create_session(Credentials(args.username, password)).unwrap()
        print(token)
    elif args.cmd == "validate":
        valid = proxy.validate(args.token).unwrap()
        print("valid" if valid else "invalid")
        return 0 if valid else 2
    elif args.cmd == "authorize":
        allowed = proxy.is_authorized(args.token, args.uri, args.method.upper()).unwrap()
        print("allowed" if allowed else "denied")
        return 0 if allowed else 2
    elif args.cmd == "identity":
        print(proxy.get_identifier(args.token).unwrap())
    elif args.cmd == "attributes":
        bundle = proxy.get_attributes(args.token).unwrap()
        if args.format == "json":
            print(json.dumps(bundle.to_dict(), indent=2))
        elif args.format == "atom":
            print(documents.attributes_to_atom(bundle).decode("utf-8"))
        else:
            print(documents.attributes_to_xml(bundle).decode("utf-8"))
    elif args.cmd == "logout":
        proxy.logout(args.token).unwrap()
        print("logged out")
    return 0


def main(argv=None) -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        sys.exit(1)

    with ProvisionerClient(args.url, timeout=args.timeout) as client:
        try:
            code = run(args, SessionProxy(client))
        except GatewayError as e:
            print(f"[{args.cmd}] Error: {e.kind.title} ({e.http_status}): {e.message}", file=sys.stderr)
            sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
