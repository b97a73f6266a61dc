import asyncio
import os

import asyncpg

from streaming_catalog.db.postgres import create_users_table
from streaming_catalog.logger import logger


async def main():
    pool = await asyncpg.create_pool(os.environ["POSTGRES_URI"])

    logger.info("creating database tables")
    await create_users_table(pool)
    await pool.close()
    logger.info("created all required tables")


if __name__ == "__main__":
    asyncio.run(main())
