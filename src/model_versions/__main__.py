"""Entry point: apply the versions schema to the configured database."""

import asyncio
import logging
import sys

from model_versions.config import get_database_url, get_db_path, get_log_level, get_table_name
from model_versions.db.connection import create_connection


async def _migrate() -> None:
    logger = logging.getLogger(__name__)
    table_name = get_table_name()
    target = get_database_url() or get_db_path()
    logger.info("Applying versions schema (table %s) to %s", table_name, target)
    db = await create_connection(table_name=table_name)
    await db.close()
    logger.info("Versions schema is up to date")


def main() -> None:
    """Create the versions table if it does not exist."""
    # Log to stderr so stdout stays clean for callers
    logging.basicConfig(
        level=getattr(logging, get_log_level()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(_migrate())


if __name__ == "__main__":
    main()
