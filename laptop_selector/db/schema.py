"""Table definitions for the laptop catalogue.

Tables are declared with SQLAlchemy Core so the same definitions serve both
for creating the schema and for the statements issued by the services.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Connection, Dialect, Engine
from sqlalchemy.schema import CreateTable, DropTable

from laptop_selector.errors import UnsupportedDialect

logger = logging.getLogger(__name__)

metadata = sa.MetaData()


def _device_table(name: str) -> sa.Table:
    return sa.Table(
        name,
        metadata,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("url", sa.String(length=255), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
    )


cpu_table = _device_table("cpu")
gpu_table = _device_table("gpu")

laptop_table = sa.Table(
    "laptop",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False, nullable=False),
    sa.Column("image", sa.String(length=255), nullable=False),
    sa.Column("description", sa.String(length=255), nullable=False),
    sa.Column("composition", sa.String(length=255), nullable=False),
    sa.Column("url", sa.String(length=255), nullable=False),
    sa.Column("price", sa.Integer(), nullable=False),
    sa.Column("cpu_id", sa.Integer(), nullable=False),
    sa.Column("gpu_id", sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(["cpu_id"], ["cpu.id"], name="fk_cpu", ondelete="CASCADE"),
    sa.ForeignKeyConstraint(["gpu_id"], ["gpu.id"], name="fk_gpu", ondelete="CASCADE"),
)

LAPTOP_FIELDS = tuple(c.name for c in laptop_table.columns)
DEVICE_FIELDS = tuple(c.name for c in cpu_table.columns)


def upsert_statement(dialect: Dialect, table: sa.Table, values: Dict[str, Any], update: Iterable[str]):
    """INSERT that updates ``update`` columns when the primary key already exists.

    SQLite and PostgreSQL use ``ON CONFLICT (id) DO UPDATE``; MySQL and MariaDB
    use ``ON DUPLICATE KEY UPDATE``.
    """
    name = dialect.name
    if name in ("sqlite", "postgresql"):
        if name == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            from sqlalchemy.dialects.postgresql import insert
        stmt = insert(table).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(table.primary_key.columns),
            set_={c: stmt.excluded[c] for c in update},
        )
    if name in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert

        stmt = insert(table).values(**values)
        return stmt.on_duplicate_key_update({c: stmt.inserted[c] for c in update})
    raise UnsupportedDialect(f"upsert is not supported for dialect {name!r} (sqlite, postgresql, mysql, mariadb)")


def _run(bind: Engine | Connection, statements) -> None:
    if isinstance(bind, Connection):
        for stmt in statements:
            bind.execute(stmt)
        return
    with bind.begin() as conn:
        for stmt in statements:
            conn.execute(stmt)


def create_schema(bind: Engine | Connection) -> None:
    """Create cpu, gpu and laptop tables if they do not exist yet.

    Every statement is ``CREATE TABLE IF NOT EXISTS``, so calling this on a
    database that already holds the tables is a no-op.
    """
    statements = [CreateTable(t, if_not_exists=True) for t in metadata.sorted_tables]
    _run(bind, statements)
    logger.info("Schema ready: %s", ", ".join(t.name for t in metadata.sorted_tables))


def drop_schema(bind: Engine | Connection) -> None:
    statements = [DropTable(t, if_exists=True) for t in reversed(metadata.sorted_tables)]
    _run(bind, statements)
    logger.info("Schema dropped")


def create_table_ddl(table: sa.Table = laptop_table, dialect: Optional[Dialect] = None) -> str:
    """Render the conditional CREATE TABLE statement for ``table``.

    Defaults to the SQLite dialect, the engine the catalogue ships with.
    """
    if dialect is None:
        from sqlalchemy.dialects import sqlite

        dialect = sqlite.dialect()
    return str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)).strip()
