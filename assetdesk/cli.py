#!/usr/bin/env python3
"""
assetdesk

Purpose:
  Talk to a running AssetDesk server from a terminal.
  - login:      start a session with email + password.
  - assets:     list assets, optionally filtered by text, type and status.
  - stock:      list stock lines, optionally filtered by text, category and level.
  - low-stock:  list only the lines at or below their reorder threshold.
  - dashboard:  print the dashboard counters and trends.

API:
  Base: http://localhost:8089/api/v1 (override with --base-url or ASSETDESK_URL)
  Login:  POST /auth/login            -> body: {"email": "...", "password": "..."}
  List:   GET  /assets?q=&type=&status=
          GET  /stock?q=&category=&level=
          GET  /stock/low
  Summary: GET /dashboard

Examples:
  assetdesk login admin@example.com --password secret
  assetdesk assets -q dell --status assigned
  assetdesk low-stock
  ASSETDESK_URL=http://inventory.local/api/v1 assetdesk dashboard

Exit codes:
  0 = success
  1 = handled application error
  2 = network/HTTP error
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, Optional, Sequence

import requests

DEFAULT_BASE_URL = "http://localhost:8089/api/v1"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="assetdesk", description="Command-line client for the AssetDesk API.")
    p.add_argument("--base-url", default=os.getenv("ASSETDESK_URL", DEFAULT_BASE_URL),
                   help=f"Base API URL (default: {DEFAULT_BASE_URL})")
    p.add_argument("--timeout", type=float, default=15.0,
                   help="HTTP timeout in seconds (default: 15)")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Verbose logging to stderr.")
    sub = p.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Start a session.")
    login.add_argument("email")
    login.add_argument("--password", default=os.getenv("ASSETDESK_PASSWORD"),
                       help="Password (default: env ASSETDESK_PASSWORD).")

    assets = sub.add_parser("assets", help="List assets.")
    assets.add_argument("-q", "--query", default=None)
    assets.add_argument("--type", dest="asset_type", default="all",
                        choices=["all", "desktop", "laptop", "printer", "other"])
    assets.add_argument("--status", default="all",
                        choices=["all", "available", "assigned", "maintenance", "retired"])

    stock = sub.add_parser("stock", help="List stock items.")
    stock.add_argument("-q", "--query", default=None)
    stock.add_argument("--category", default="all")
    stock.add_argument("--level", default="all", choices=["all", "low", "adequate"])

    sub.add_parser("low-stock", help="List stock items that need reordering.")
    sub.add_parser("dashboard", help="Show dashboard counters and trends.")
    return p


def vprint(enabled: bool, *args: Any) -> None:
    if enabled:
        print(*args, file=sys.stderr)


class ApiError(Exception):
    """The server answered, but with an error envelope."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(f"{code} ({status_code}): {message}")
        self.status_code = status_code
        self.code = code


def api_call(session: requests.Session, method: str, base_url: str, path: str, *,
             timeout: float, verbose: bool, params: Optional[Dict[str, Any]] = None,
             payload: Optional[Dict[str, Any]] = None) -> Any:
    url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    vprint(verbose, f"{method} {url} params={params}")
    r = session.request(method, url, params=params, json=payload, timeout=timeout,
                        headers={"Accept": "application/json"})
    if r.status_code >= 400:
        # Envelope errors are the application's answer; anything else is HTTP trouble.
        try:
            body = r.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and "code" in body:
            raise ApiError(r.status_code, str(body["code"]), str(body.get("message", "")))
        r.raise_for_status()
    return r.json()


def _drop_all(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v not in (None, "", "all")}


def run(args: argparse.Namespace, session: requests.Session) -> Any:
    call = lambda method, path, **kw: api_call(  # noqa: E731
        session, method, args.base_url, path, timeout=args.timeout, verbose=args.verbose, **kw
    )
    if args.command == "login":
        if not args.password:
            raise ValueError("No password supplied (use --password or env ASSETDESK_PASSWORD).")
        return call("POST", "auth/login", payload={"email": args.email, "password": args.password})
    if args.command == "assets":
        return call("GET", "assets", params=_drop_all(
            {"q": args.query, "type": args.asset_type, "status": args.status}))
    if args.command == "stock":
        return call("GET", "stock", params=_drop_all(
            {"q": args.query, "category": args.category, "level": args.level}))
    if args.command == "low-stock":
        return call("GET", "stock/low")
    if args.command == "dashboard":
        data = call("GET", "dashboard")
        return {"stats": data.get("stats"), "trends": data.get("trends")}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None, session: Optional[requests.Session] = None) -> int:
    args = build_parser().parse_args(argv)
    session = session or requests.Session()
    try:
        result = run(args, session)
    except requests.exceptions.RequestException as e:
        print(f"NETWORK_ERROR: {e}", file=sys.stderr)
        return 2
    except ApiError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
