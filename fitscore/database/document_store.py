from abc import ABC, abstractmethod
from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from fitscore.database.models import DocumentRecord, OrderBy


class BaseDocumentStore(ABC):
    """Contract for an append-only document store."""

    @abstractmethod
    def insert(self, collection: str, record: dict[str, Any]) -> str:
        """Append one record; the store assigns its id and timestamp.

        Returns:
            The id assigned to the new record.
        """

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: dict[str, Any],
        order_by: OrderBy,
        limit: int,
    ) -> list[DocumentRecord]:
        """Return at most limit records matching every filter, sorted by order_by."""


class PostgresDocumentStore(BaseDocumentStore):
    """Document store on a single JSONB table in PostgreSQL."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO documents (collection, data)
                    VALUES (%s, %s)
                    RETURNING id
                    """,
                    (collection, Jsonb(record)),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert into '{collection}' returned no id")
        return str(row[0])

    def query(
        self,
        collection: str,
        filters: dict[str, Any],
        order_by: OrderBy,
        limit: int,
    ) -> list[DocumentRecord]:
        direction = sql.SQL("DESC" if order_by.descending else "ASC")
        if order_by.field == "timestamp":
            sort_key = sql.SQL("created_at")
        else:
            sort_key = sql.SQL("data -> {}").format(sql.Literal(order_by.field))
        statement = sql.SQL(
            """
            SELECT id, collection, data, created_at
            FROM documents
            WHERE collection = %s
              AND data @> %s
            ORDER BY {sort_key} {direction}, id {direction}
            LIMIT %s
            """
        ).format(sort_key=sort_key, direction=direction)

        with self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(statement, (collection, Jsonb(filters), limit))
                rows = cur.fetchall()

        return [
            DocumentRecord(
                id=str(row["id"]),
                collection=row["collection"],
                timestamp=row["created_at"],
                data=row["data"] or {},
            )
            for row in rows
        ]
