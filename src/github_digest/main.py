"""Main entry point for the GitHub digest relay."""

import argparse
import asyncio
import logging
import sys

from .config import Config, load_config
from .db import SubscriberStore
from .digest.sender import SmtpMailer, send_test_email
from .dispatch import DigestDispatcher
from .sources.github import GitHubEventSource

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def build_dispatcher(config: Config) -> DigestDispatcher:
    return DigestDispatcher(
        GitHubEventSource.from_config(config),
        SubscriberStore.from_config(config),
        SmtpMailer.from_config(config),
        max_concurrent_sends=config.max_concurrent_sends,
    )


def run_server(config: Config, host: str, port: int | None):
    """Serve the HTTP API with uvicorn."""
    import uvicorn
    from .web.app import create_app

    uvicorn.run(create_app(config), host=host, port=port or config.port, log_level=config.log_level.lower())


def run_send(config: Config) -> int:
    """Send the digest to every subscriber once."""
    dispatcher = build_dispatcher(config)
    try:
        result = asyncio.run(dispatcher.dispatch_all())
    finally:
        dispatcher.close()
    print(f"Sent {result.sent}/{result.attempted}")
    for email in result.failed:
        print(f"  FAILED: {email}")
    return 0 if not result.failed else 1


def run_send_to(config: Config, email: str) -> int:
    dispatcher = build_dispatcher(config)
    try:
        asyncio.run(dispatcher.send_to_one(email))
    finally:
        dispatcher.close()
    print(f"Digest sent to {email}")
    return 0


def run_preview(config: Config) -> int:
    dispatcher = build_dispatcher(config)
    try:
        digest = asyncio.run(dispatcher.preview())
    finally:
        dispatcher.close()
    print(digest.body_text)
    return 0


def run_component_test(config: Config, component: str) -> int:
    if component == "email":
        print("Testing email delivery...")
        success = send_test_email(SmtpMailer.from_config(config), config.mail_user)
        print("SUCCESS" if success else "FAILED")
        return 0 if success else 1

    if component == "feed":
        print("Testing event feed...")
        source = GitHubEventSource.from_config(config)
        try:
            events = source.fetch_events()
        finally:
            source.close()
        print(f"Fetched {len(events)} events")
        return 0

    print("Testing database connection...")
    store = SubscriberStore.from_config(config)
    try:
        subscribers = store.list_subscribers()
    finally:
        store.close()
    print(f"Connected! {len(subscribers)} subscribers")
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="GitHub Digest - email the latest public GitHub events")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, help="Port to listen on (default: PORT or 4000)")

    subparsers.add_parser("send", help="Send the digest to all subscribers")

    send_to_parser = subparsers.add_parser("send-to", help="Send the digest to one address")
    send_to_parser.add_argument("email", help="Recipient address")

    subparsers.add_parser("preview", help="Print the digest without sending it")

    test_parser = subparsers.add_parser("test", help="Test components")
    test_parser.add_argument("component", choices=["email", "feed", "db"], help="Component to test")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config = load_config()
    setup_logging(config.log_level)

    if args.command == "serve":
        run_server(config, args.host, args.port)
        return 0
    if args.command == "send":
        return run_send(config)
    if args.command == "send-to":
        return run_send_to(config, args.email)
    if args.command == "preview":
        return run_preview(config)
    return run_component_test(config, args.component)


if __name__ == "__main__":
    sys.exit(main())
