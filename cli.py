#!/usr/bin/env python3
"""
Command-line interface for the Pending Order email.

Usage:
    uv run python cli.py [command] [options]

Commands:
    demo        Place an order and show the email it triggers
    settings    Show or change the email settings
    trigger     Send the email for an existing order
    test        Run the test suite
    serve       Start the API server

Examples:
    uv run python cli.py demo --format multipart --show-body
    uv run python cli.py settings show
    uv run python cli.py settings set recipient "ops@example.com, owner@example.com"
    uv run python cli.py trigger 7
    uv run python cli.py serve
"""

import argparse
import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional


def _load_email(data_dir: Optional[Path], persist: bool = False):
    from pending_order import add_pending_order_email
    from shop_emails.data_store import OrderRepository
    from shop_emails.registry import EmailRegistry
    from shop_emails.settings import OptionsStore

    return add_pending_order_email(
        EmailRegistry(),
        orders=OrderRepository(data_dir),
        options=OptionsStore(data_dir, persist=persist),
    )


def run_demo(email_format: str, show_body: bool) -> None:
    """Run the demo for one format, or all of them."""
    from pending_order.demo import run_all_formats_demo, run_pending_order_demo
    from shop_emails.models import EmailType

    if email_format == "all":
        run_all_formats_demo(show_body=show_body)
    else:
        run_pending_order_demo(EmailType(email_format), show_body=show_body)


def run_settings(action: str, key: Optional[str], value: Optional[str], data_dir: Optional[Path]) -> None:
    """Show the settings, or save one setting to options.json."""
    from shop_emails.settings import SettingsError, update_email_settings

    email = _load_email(data_dir, persist=(action == "set"))

    if action == "set":
        if key is None or value is None:
            print("settings set requires KEY and VALUE")
            sys.exit(1)
        try:
            update_email_settings(email.options, email.id, email.form_fields(), {key: value})
        except SettingsError as e:
            print(f"Error: {e}")
            sys.exit(1)

    print(f"{email.title} ({email.id})")
    for name, current in email.settings.current().items():
        print(f"  {name:<20} {json.dumps(current)}")


def run_trigger(order_id: str, data_dir: Optional[Path]) -> None:
    """Trigger the email for an order and print the result."""
    email = _load_email(data_dir)
    notification = email.on_order_created(order_id)
    if notification is None:
        print(f"No email sent for order {order_id}")
        sys.exit(1)

    print(f"To:      {', '.join(notification.recipients)}")
    print(f"Subject: {notification.subject}")
    for name, header in notification.headers.items():
        print(f"{name}: {header}")
    print()
    print(notification.body)


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = ["uv", "run", "pytest"] + args
    subprocess.run(cmd)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    cmd = ["uv", "run", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Pending Order email CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo
  %(prog)s demo --format plain --show-body
  %(prog)s settings show
  %(prog)s settings set email_type multipart
  %(prog)s trigger 7
  %(prog)s test -v
  %(prog)s serve --reload
        """,
    )
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory with orders.json and options.json")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    demo_parser = subparsers.add_parser("demo", help="Place an order and show the email")
    demo_parser.add_argument(
        "--format",
        dest="email_format",
        choices=["plain", "html", "multipart", "all"],
        default="html",
        help="Email format to demonstrate",
    )
    demo_parser.add_argument("--show-body", action="store_true", help="Print the message bodies")

    settings_parser = subparsers.add_parser("settings", help="Show or change email settings")
    settings_parser.add_argument("action", choices=["show", "set"])
    settings_parser.add_argument("key", nargs="?", help="Setting name (for set)")
    settings_parser.add_argument("value", nargs="?", help="Setting value (for set)")

    trigger_parser = subparsers.add_parser("trigger", help="Send the email for an existing order")
    trigger_parser.add_argument("order_id", help="Order id")

    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    if args.command in ("settings", "trigger"):
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s | %(name)s | %(message)s")

    if args.command == "demo":
        run_demo(args.email_format, args.show_body)
    elif args.command == "settings":
        run_settings(args.action, args.key, args.value, args.data_dir)
    elif args.command == "trigger":
        run_trigger(args.order_id, args.data_dir)
    elif args.command == "test":
        run_tests(args.pytest_args)
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
