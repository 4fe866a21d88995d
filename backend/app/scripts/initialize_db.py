"""
Initialize Database Script
Creates the schema on a fresh database and stamps Alembic, otherwise migrates to head.
Usage: python -m app.scripts.initialize_db
"""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

import app.models  # noqa: F401  registers models with Base.metadata
from app.config import get_settings
from app.database import Base, Database

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "alembic.ini"


async def initialize_db(database: Database, alembic_ini: Path = ALEMBIC_INI) -> bool:
    """
    Returns True when the schema was created from scratch.
    """
    async with database.engine.begin() as conn:
        def check_if_fresh(sync_conn):
            return "users" not in inspect(sync_conn).get_table_names()

        is_fresh_install = await conn.run_sync(check_if_fresh)
        logger.info(f"Is fresh install? {is_fresh_install}")

        if is_fresh_install:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("All tables created.")

    # Alembic runs outside the transaction so it sees the committed tables
    alembic_cfg = Config(str(alembic_ini))
    alembic_cfg.set_main_option("sqlalchemy.url", database.url.replace("%", "%%"))
    alembic_cfg.attributes["configure_logger"] = False
    if is_fresh_install:
        await asyncio.to_thread(command.stamp, alembic_cfg, "head")
        logger.info("Alembic stamped to head.")
    else:
        await asyncio.to_thread(command.upgrade, alembic_cfg, "head")
        logger.info("Head revision reached.")

    return is_fresh_install


async def main():
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        await initialize_db(database)
    finally:
        await database.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
