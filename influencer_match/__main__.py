"""Main entry point for Bitcoin Influencer Match."""

import argparse
import sys
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from .categorizer import Categorizer, build_openai_client
from .storage.database import Database, PersistenceError
from .storage.models import CreatorProfile
from .utils.config import get_config, get_settings
from .utils.logger import setup_logging


def load_creator_file(path: Path) -> list:
    """Read creator profiles from a YAML file.

    The file holds either a list of creators or a mapping with a
    ``creators`` list.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("creators", [])

    return [CreatorProfile(**entry) for entry in data]


def init_db():
    """Create database tables."""
    config = get_config()
    setup_logging()

    db = Database(config.database.url, echo=config.database.echo)
    logger.info(f"Database ready ({db.count_creators()} creators)")


def seed_creators(path: Path):
    """Insert or update creators from a YAML file.

    Args:
        path: YAML file with creator profiles
    """
    config = get_config()
    setup_logging()

    profiles = load_creator_file(path)
    db = Database(config.database.url, echo=config.database.echo)

    for profile in profiles:
        db.upsert_creator(profile)

    logger.info(f"Seeded {len(profiles)} creators from {path} ({db.count_creators()} total)")


def categorize(description: str):
    """Categorize one product description and print the label.

    Args:
        description: Product description
    """
    config = get_config()
    setup_logging(log_file="")

    client = build_openai_client(get_settings(), config.openai)
    result = Categorizer(client, config.openai).categorize(description)

    if result.degraded:
        logger.warning(f"Categorization degraded ({result.reason})")
    print(result.category.value)


def run_api():
    """Run the FastAPI server."""
    import uvicorn

    config = get_config()
    setup_logging()

    logger.info("=" * 80)
    logger.info("Bitcoin Influencer Match API - Starting")
    logger.info("=" * 80)

    uvicorn.run(
        "influencer_match.api.main:create_app",
        factory=True,
        host=config.api.host,
        port=config.api.port,
        log_level="info",
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Bitcoin Influencer Match")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("api", help="Run the API server")

    subparsers.add_parser("init-db", help="Create database tables")

    seed_parser = subparsers.add_parser("seed", help="Load creators from a YAML file")
    seed_parser.add_argument("path", type=Path, help="YAML file with creator profiles")

    categorize_parser = subparsers.add_parser("categorize", help="Categorize a product description")
    categorize_parser.add_argument("description", help="Product description")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "api":
            run_api()
        elif args.command == "init-db":
            init_db()
        elif args.command == "seed":
            seed_creators(args.path)
        elif args.command == "categorize":
            categorize(args.description)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except (OSError, PersistenceError, ValidationError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
