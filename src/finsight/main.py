"""Command-line entry point."""
import sys
import argparse

import uvicorn

from finsight.api import create_app
from finsight.budget.models import format_amount
from finsight.chat import ChatSession
from finsight.chat.responses import random_tip
from finsight.config import Config, ConfigManager, get_settings
from finsight.container import ServiceContainer
from finsight.utils.auth import issue_token
from finsight.utils.logger import configure_logging, get_logger

logger = get_logger()


def _load_and_validate_config() -> Config:
    """Load configuration from the environment, exiting when it is incomplete."""
    config_manager = ConfigManager()
    config = config_manager.load_config()

    is_valid, message = config_manager.validate_config(config)
    if not is_valid:
        logger.critical(f"Invalid configuration: {message}")
        sys.exit(1)

    logger.info("Configuration loaded successfully")
    return config


def serve_command(host: str = None, port: int = None) -> None:
    """Run the HTTP API."""
    settings = get_settings()
    config = _load_and_validate_config()
    app = create_app(config, settings)

    host = host or settings.server_host
    port = port or settings.server_port
    logger.info(f"{settings.app_name} API listening on {host}:{port}")
    uvicorn.run(app, host=host, port=port)


def issue_token_command(user_id: str) -> None:
    """Print a bearer token for a user."""
    config = _load_and_validate_config()
    print(issue_token(user_id, config.service_key, get_settings().token_ttl_hours))


def seed_budget_command(user_id: str) -> None:
    """Create the starter budget categories for a user."""
    container = ServiceContainer(_load_and_validate_config(), get_settings())
    created = container.fund_service.seed_defaults(user_id)
    print(f"✓ Created {created} budget categories for user: {user_id}")

    for category in container.fund_service.get_categories(user_id):
        print(f"  {category.name:<20} ${format_amount(category.allocated):>10} (spent: ${format_amount(category.spent)})")


def chat_command(user_id: str) -> None:
    """Interactive budget chat in the terminal."""
    container = ServiceContainer(_load_and_validate_config(), get_settings())
    container.ensure_budget(user_id)
    session = ChatSession(container.interpreter, user_id)

    print(session.messages[0].content)
    print(f"Tip: {random_tip()}")
    print("(type 'exit' to quit)")

    while True:
        try:
            text = input("\nyou> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if text.strip().lower() in ("exit", "quit"):
            break

        reply = session.send(text)
        if reply is not None:
            print(f"\nfinsight> {reply.content}")
            for insight in reply.insights:
                print(f"  - {insight.title}: {insight.description}")
            for receipt in reply.receipts:
                print(f"  - {receipt.file_name} {receipt.full_url}")


def main():
    """Main entry point for FinSight."""
    parser = argparse.ArgumentParser(description="FinSight personal finance backend")
    parser.add_argument(
        "command",
        nargs="?",
        choices=["serve", "issue-token", "seed-budget", "chat"],
        default="serve",
        help="Command to execute (default: serve)"
    )
    parser.add_argument(
        "--user",
        help="User ID (for issue-token, seed-budget and chat commands)"
    )
    parser.add_argument("--host", help="Bind address for serve")
    parser.add_argument("--port", type=int, help="Port for serve")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_max_file_size_mb, settings.log_backup_count)

    if args.command != "serve" and not args.user:
        parser.error(f"--user is required for {args.command}")

    try:
        if args.command == "issue-token":
            issue_token_command(args.user)
        elif args.command == "seed-budget":
            seed_budget_command(args.user)
        elif args.command == "chat":
            chat_command(args.user)
        else:
            serve_command(args.host, args.port)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.critical(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
