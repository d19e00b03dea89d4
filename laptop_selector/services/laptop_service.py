from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, List, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from laptop_selector.db.schema import LAPTOP_FIELDS, cpu_table, gpu_table, laptop_table, upsert_statement
from laptop_selector.errors import translate_integrity_error

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(f for f in LAPTOP_FIELDS if f != "id")


@dataclass(frozen=True)
class Laptop:
    id: int
    image: str
    description: str
    composition: str
    url: str
    price: int
    cpu_id: int
    gpu_id: int


@dataclass(frozen=True)
class LaptopView:
    """A laptop together with the benchmark data of its CPU and GPU."""

    id: int
    image: str
    description: str
    composition: str
    url: str
    price: int
    cpu_id: int
    gpu_id: int
    cpu_score: int
    gpu_score: int
    cpu_name: str
    gpu_name: str


def _row_to_laptop(row) -> Laptop:
    return Laptop(**{f: getattr(row, f) for f in LAPTOP_FIELDS})


class LaptopService:
    def _execute(self, conn: Connection, stmt):
        try:
            return conn.execute(stmt)
        except IntegrityError as exc:
            raise translate_integrity_error(exc, table=laptop_table.name) from exc

    def insert_laptop(self, conn: Connection, laptop: Laptop) -> Laptop:
        self._execute(conn, sa.insert(laptop_table).values(**asdict(laptop)))
        logger.debug("Inserted laptop id=%s", laptop.id)
        return laptop

    def get_laptop(self, conn: Connection, laptop_id: int) -> Optional[Laptop]:
        row = conn.execute(sa.select(laptop_table).where(laptop_table.c.id == int(laptop_id))).one_or_none()
        return _row_to_laptop(row) if row is not None else None

    def list_laptops(self, conn: Connection) -> List[Laptop]:
        rows = conn.execute(sa.select(laptop_table).order_by(laptop_table.c.id.asc())).all()
        return [_row_to_laptop(r) for r in rows]

    def update_laptop(self, conn: Connection, laptop_id: int, **fields: Any) -> Optional[Laptop]:
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown laptop field(s): {', '.join(sorted(unknown))}")
        if fields:
            result = self._execute(
                conn,
                sa.update(laptop_table).where(laptop_table.c.id == int(laptop_id)).values(**fields),
            )
            if not result.rowcount:
                return None
        return self.get_laptop(conn, laptop_id)

    def delete_laptop(self, conn: Connection, laptop_id: int) -> int:
        result = conn.execute(sa.delete(laptop_table).where(laptop_table.c.id == int(laptop_id)))
        return int(result.rowcount or 0)

    def upsert_laptop(self, conn: Connection, laptop: Laptop) -> Laptop:
        """Insert ``laptop`` or overwrite the row with the same id.

        Listings without a composition must not erase one gathered earlier:
        the stored composition is kept in that case. A new laptop without
        composition is rejected by the NOT NULL constraint.
        """
        values = asdict(laptop)
        if not laptop.composition:
            values.pop("composition")
            result = self._execute(
                conn,
                sa.update(laptop_table).where(laptop_table.c.id == int(laptop.id)).values(**values),
            )
            if result.rowcount:
                logger.debug("Updated laptop id=%s, kept stored composition", laptop.id)
                return self.get_laptop(conn, laptop.id)
            # an empty composition is stored as missing, like an omitted column
            return self.insert_laptop(conn, replace(laptop, composition=None))

        stmt = upsert_statement(conn.dialect, laptop_table, values, _UPDATABLE_FIELDS)
        self._execute(conn, stmt)
        return laptop

    def list_laptop_views(self, conn: Connection) -> List[LaptopView]:
        stmt = (
            sa.select(
                laptop_table,
                cpu_table.c.score.label("cpu_score"),
                gpu_table.c.score.label("gpu_score"),
                cpu_table.c.name.label("cpu_name"),
                gpu_table.c.name.label("gpu_name"),
            )
            .join(cpu_table, laptop_table.c.cpu_id == cpu_table.c.id)
            .join(gpu_table, laptop_table.c.gpu_id == gpu_table.c.id)
            .order_by(laptop_table.c.id.asc())
        )
        return [
            LaptopView(
                **{f: getattr(r, f) for f in LAPTOP_FIELDS},
                cpu_score=int(r.cpu_score),
                gpu_score=int(r.gpu_score),
                cpu_name=str(r.cpu_name),
                gpu_name=str(r.gpu_name),
            )
            for r in conn.execute(stmt).all()
        ]
