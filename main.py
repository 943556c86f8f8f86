#!/usr/bin/env python3
"""
authgate -- command-line client for the authgate API.

Usage:
  python main.py register --full-name "Ann Lee" --email ann@x.com --username annlee
  python main.py login annlee
  python main.py me
  python main.py status
  python main.py logout

Passwords are prompted for (never taken from argv) unless --password is given.
The session (token + profile snapshot) is kept in SESSION_FILE, by default
~/.authgate/session.json.

Environment variables:
  API_URL       Base URL of the API (default http://localhost:5000/api).
  SESSION_FILE  Where the local session is stored.
"""

import argparse
import getpass
import sys
import time
from typing import Any, Callable, Optional

from client.api import AuthClient
from client.guard import FormResult, SessionGuard
from client.storage import FileSessionStorage, SessionStorage
from core.config import get_settings


def _print_profile(profile: dict) -> None:
    print(f"  Name:     {profile.get('full_name', '')}")
    print(f"  Username: {profile.get('username', '')}")
    print(f"  Email:    {profile.get('email', '')}")
    if profile.get("created_at"):
        print(f"  Joined:   {profile['created_at']}")


def _print_result(result: FormResult) -> int:
    if result.ok:
        print(f"  {result.message or 'Success'}")
        return 0
    for field_name, message in result.field_errors.items():
        print(f"  [!] {field_name}: {message}")
    if result.message:
        print(f"  [!] {result.message}")
    return 1


def _blocking_schedule(delay: float, callback: Callable[[], None]) -> None:
    # A CLI has no event loop; wait out the delay so the message stays visible.
    time.sleep(delay)
    callback()


def build_guard(
    api_url: str,
    storage: SessionStorage,
    http: Any = None,
    redirect_delay: float = 2.0,
    schedule: Optional[Callable[[float, Callable[[], None]], None]] = None,
) -> SessionGuard:
    """Wire a SessionGuard for terminal use. Navigation just announces the target view."""
    return SessionGuard(
        AuthClient(api_url, session=http),
        storage,
        navigate=lambda path: print(f"  -> {path}"),
        schedule=schedule or _blocking_schedule,
        redirect_delay=redirect_delay,
    )


def main(argv: Optional[list[str]] = None, http: Any = None, storage: Optional[SessionStorage] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="authgate",
        description="Register, log in, and inspect the current session against an authgate API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py register --full-name "Ann Lee" --email ann@x.com --username annlee
  python main.py login ann@x.com
  python main.py me
        """,
    )
    parser.add_argument(
        "--api-url",
        default=settings.api_url,
        metavar="URL",
        help=f"API base URL (default: {settings.api_url})",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    reg = sub.add_parser("register", help="Create an account and start a session")
    reg.add_argument("--full-name", required=True)
    reg.add_argument("--email", required=True)
    reg.add_argument("--username", required=True)
    reg.add_argument("--password", help="Password (prompted for when omitted)")

    log = sub.add_parser("login", help="Log in with a username or email")
    log.add_argument("identifier", help="Username or email")
    log.add_argument("--password", help="Password (prompted for when omitted)")

    sub.add_parser("me", help="Show the profile of the current session")
    sub.add_parser("status", help="Show whether a session is stored locally")
    sub.add_parser("logout", help="Forget the local session")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    guard = build_guard(
        args.api_url,
        storage if storage is not None else FileSessionStorage(settings.session_file),
        http=http,
        redirect_delay=settings.redirect_delay_seconds,
    )

    if args.command == "register":
        if guard.on_entry_view_enter():
            print("  Already logged in. Run 'logout' first.")
            return 1
        password = args.password
        confirm = args.password
        if password is None:
            password = getpass.getpass("Password: ")
            confirm = getpass.getpass("Confirm password: ")
        return _print_result(guard.submit_register(args.full_name, args.email, args.username, password, confirm))

    if args.command == "login":
        if guard.on_entry_view_enter():
            print("  Already logged in. Run 'logout' first.")
            return 1
        password = args.password if args.password is not None else getpass.getpass("Password: ")
        return _print_result(guard.submit_login(args.identifier, password))

    if args.command == "me":
        rendered: list[dict] = []
        profile = guard.on_protected_view_enter(
            render=rendered.append,
            show_error=lambda message: print(f"  [!] {message}"),
        )
        if profile is None:
            return 1
        _print_profile(profile)
        return 0

    if args.command == "status":
        if guard.is_authenticated():
            snapshot = guard.storage.get_snapshot() or {}
            print(f"  Session stored for {snapshot.get('username') or 'unknown user'}")
            return 0
        print("  No session stored.")
        return 1

    # logout
    guard.logout()
    print("  Logged out.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
