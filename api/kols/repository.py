"""
KOL persistence (raw SQL).

Column names are the KOL wire names, quoted, so rows come back as dicts
keyed exactly like the JSON API.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

from .expression import UpdateDirective
from .validation import KolField

TABLE = "kols"
ID_COLUMN = "ID"

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS kols (
    "ID" text PRIMARY KEY,
    "Name" text NOT NULL,
    "Platform" text NOT NULL,
    "Sex" text NOT NULL,
    "Categories" text[] NOT NULL DEFAULT '{}',
    "Tel" text NOT NULL,
    "Link" text NOT NULL,
    "Followers" text NOT NULL,
    "Photo Cost / Kols" double precision NOT NULL,
    "VDO Cost / Kols" double precision NOT NULL,
    "ER%" text NOT NULL
)
"""

_COLUMNS = [ID_COLUMN] + [f.value for f in KolField]
_SELECT_COLUMNS = ", ".join(db.quote_ident(c) for c in _COLUMNS)


def render_update(directive: UpdateDirective) -> tuple[str, list[Any]]:
    """
    Turn a directive into one UPDATE statement and its positional arguments.

    `$1` is always the record id; each assignment adds one more parameter in
    assignment order.
    """
    args: list[Any] = [directive.record_id]
    set_clauses: list[str] = []
    returning: list[str] = []

    for name_ph, value_ph in directive.assignments:
        column = db.quote_ident(directive.names[name_ph])
        args.append(directive.values[value_ph])
        set_clauses.append(f"{column} = ${len(args)}")
        returning.append(column)

    sql = (
        f"UPDATE {TABLE} SET {', '.join(set_clauses)} "
        f"WHERE {db.quote_ident(ID_COLUMN)} = $1 "
        f"RETURNING {', '.join(returning)}"
    )
    return sql, args


class KolStore:
    def __init__(self, conn: asyncpg.Pool) -> None:
        self._conn = conn

    async def create_table(self) -> None:
        await db.execute(self._conn, CREATE_TABLE_SQL)

    async def scan_all(self) -> list[dict[str, Any]]:
        return await db.fetch_all(self._conn, f"SELECT {_SELECT_COLUMNS} FROM {TABLE}")

    async def insert(self, record: dict[str, Any]) -> None:
        """
        Write a full record. An existing row with the same ID is overwritten.
        """
        placeholders = ", ".join(f"${i}" for i in range(1, len(_COLUMNS) + 1))
        overwrite = ", ".join(
            f"{db.quote_ident(c)} = EXCLUDED.{db.quote_ident(c)}" for c in _COLUMNS[1:]
        )
        await db.execute(
            self._conn,
            f"""
            INSERT INTO {TABLE} ({_SELECT_COLUMNS})
            VALUES ({placeholders})
            ON CONFLICT ({db.quote_ident(ID_COLUMN)}) DO UPDATE
            SET {overwrite}
            """,
            *(record[c] for c in _COLUMNS),
        )

    async def apply_update(self, directive: UpdateDirective) -> dict[str, Any] | None:
        """
        Apply a directive and return the changed fields with their new values.

        Returns None when no record has the directive's id.
        """
        sql, args = render_update(directive)
        return await db.fetch_one(self._conn, sql, *args)

    async def remove(self, record_id: str) -> None:
        await db.execute(
            self._conn,
            f"DELETE FROM {TABLE} WHERE {db.quote_ident(ID_COLUMN)} = $1",
            record_id,
        )


def get_kol_store() -> KolStore:
    return KolStore(db.pool())
