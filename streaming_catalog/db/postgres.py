"""
Functions to interact with PostgreSQL database.
"""

from pathlib import Path
from typing import Optional

import asyncpg

from streaming_catalog.models import StoredUser, User

SQL_DIR = Path(__file__).resolve().parents[2] / "sql"


async def create_users_table(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as connection:
        await connection.execute((SQL_DIR / "create_users.sql").read_text())


def _row_to_stored_user(row) -> StoredUser:
    return StoredUser(
        user=User(user_id=row["user_id"], email=row["email"], name=row["name"]),
        password_hash=row["password_hash"],
    )


async def insert_user(pool: asyncpg.Pool, email: str, name: str, password_hash: str) -> User:
    """
    Insert a new user. Raises asyncpg.UniqueViolationError when the email is taken.
    """
    async with pool.acquire() as connection:
        row = await connection.fetchrow(
            """
            INSERT INTO users (email, name, password_hash)
            VALUES ($1, $2, $3)
            RETURNING user_id, email, name
        """,
            email,
            name,
            password_hash,
        )
    return User(user_id=row["user_id"], email=row["email"], name=row["name"])


async def get_user_by_email(pool: asyncpg.Pool, email: str) -> Optional[StoredUser]:
    async with pool.acquire() as connection:
        row = await connection.fetchrow(
            "SELECT user_id, email, name, password_hash FROM users WHERE email = $1", email
        )
    if row is None:
        return None
    return _row_to_stored_user(row)

