#!/usr/bin/env python3
"""
Database initialization script for the Prompt Release Service.
Creates missing tables and seeds the default environments; existing data is kept.
"""
import logging
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.absolute()
sys.path.insert(0, str(project_root))

logger = logging.getLogger("init_db")


def init_db(database_url=None):
    """Create tables that don't exist yet and make sure dev/stage/prod exist."""
    # Import here to ensure the path is set correctly
    from prompt_release.app.core.config import settings
    from prompt_release.app.core.logger import setup_logging
    from prompt_release.app.database import create_db_engine, create_session_factory
    from prompt_release.app.database import init_db as create_tables
    from prompt_release.app.services import PromptEngine

    setup_logging()
    database_url = database_url or settings.DATABASE_URL

    logger.info("Creating tables if they don't exist...")
    engine = create_db_engine(database_url)
    try:
        create_tables(engine)
        prompt_engine = PromptEngine(create_session_factory(engine))
        prompt_engine.seed_environments()
        environments = prompt_engine.publications.list_environments()
    finally:
        engine.dispose()

    logger.info(
        "Environments: " + ", ".join(f"{env.key} ({env.name})" for env in environments)
    )
    return environments


if __name__ == "__main__":
    print("=" * 60)
    print("Prompt Release Service - Database Initialization")
    print("=" * 60)
    print("This only creates tables and environments that don't exist.")
    print("No existing data will be modified or deleted.")
    print("-" * 60)

    try:
        init_db(sys.argv[1] if len(sys.argv) > 1 else None)
    except Exception as e:
        logger.exception(f"Database initialization failed: {e}")
        sys.exit(1)
    print("\nDatabase initialization completed successfully!")
