"""
PostgreSQL access to the hosted backend.

Connects with psycopg. Reads made on behalf of a signed-in user run inside a
transaction that carries that user's JWT claims and the ``authenticated``
role, so the backend's row-level security policies apply on top of the
explicit filters each repository writes.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from vetshop.config import Settings, get_settings
from vetshop.exceptions import DatabaseError
from vetshop.logging_config import PerformanceTracker

logger = logging.getLogger(__name__)


class Database:
    def __init__(
        self,
        db_url: str | None = None,
        *,
        rls_role: str | None = "authenticated",
        connect_timeout: int = 10,
        settings: Settings | None = None,
    ) -> None:
        cfg = settings or get_settings()
        self._db_url = db_url or cfg.database_url
        self._rls_role = rls_role
        self._connect_timeout = connect_timeout

    @contextmanager
    def _cursor(self, user_id: str | None) -> Iterator[psycopg.Cursor]:
        with psycopg.connect(self._db_url, row_factory=dict_row, connect_timeout=self._connect_timeout) as conn:
            conn.read_only = True
            with conn.cursor() as cur:
                if user_id is not None and self._rls_role:
                    claims = json.dumps({"sub": user_id, "role": self._rls_role})
                    cur.execute("SELECT set_config('request.jwt.claims', %s, true)", (claims,))
                    # Role names can't be bound as parameters.
                    cur.execute(sql.SQL("SET LOCAL ROLE {}").format(sql.Identifier(self._rls_role)))
                yield cur

    def fetch_all(
        self,
        query: str,
        params: tuple = (),
        *,
        user_id: str | None = None,
        operation: str | None = None,
        table: str | None = None,
    ) -> list[dict[str, Any]]:
        """Run a read and return every row as a dict.

        Raises:
            DatabaseError: connection or query failure; the driver message is kept in ``detail``.
        """
        try:
            with PerformanceTracker("db_query", query_name=operation, table=table):
                with self._cursor(user_id) as cur:
                    cur.execute(query, params)
                    return list(cur.fetchall())
        except (psycopg.Error, OSError) as e:
            logger.error("Database query failed (%s on %s): %s", operation, table, e)
            raise DatabaseError(operation=operation, table=table, cause=str(e)) from e

    def fetch_one(
        self,
        query: str,
        params: tuple = (),
        *,
        user_id: str | None = None,
        operation: str | None = None,
        table: str | None = None,
    ) -> dict[str, Any] | None:
        rows = self.fetch_all(query, params, user_id=user_id, operation=operation, table=table)
        return rows[0] if rows else None
