"""
User credential persistence.
"""

from __future__ import annotations

import asyncpg

from core import db

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS users (
    username text PRIMARY KEY,
    password text NOT NULL
)
"""


class UserStore:
    def __init__(self, conn: asyncpg.Pool) -> None:
        self._conn = conn

    async def create_table(self) -> None:
        await db.execute(self._conn, CREATE_TABLE_SQL)

    async def get_user(self, username: str) -> dict | None:
        return await db.fetch_one(
            self._conn,
            """
            SELECT username, password
            FROM users
            WHERE username = $1
            """,
            username,
        )

    async def create_user(self, *, username: str, password_hash: str) -> None:
        """
        Insert a user. Raises asyncpg.UniqueViolationError if the name is taken.
        """
        await db.execute(
            self._conn,
            """
            INSERT INTO users (username, password)
            VALUES ($1, $2)
            """,
            username,
            password_hash,
        )


def get_user_store() -> UserStore:
    return UserStore(db.pool())
