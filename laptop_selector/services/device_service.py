from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from laptop_selector.db.schema import cpu_table, gpu_table, upsert_statement
from laptop_selector.errors import translate_integrity_error

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE_ID = 0


class DeviceKind(str, enum.Enum):
    CPU = "cpu"
    GPU = "gpu"


_TABLES = {
    DeviceKind.CPU: cpu_table,
    DeviceKind.GPU: gpu_table,
}

# Benchmark listings append clock speed ("@ 2.80GHz") to CPUs and memory/bus
# details (", 4 GB") to GPUs; matching works on the bare model name.
_NAME_CUT = {
    DeviceKind.CPU: "@",
    DeviceKind.GPU: ",",
}


@dataclass(frozen=True)
class Device:
    id: int
    name: str
    url: str
    score: int


def short_name(kind: DeviceKind, name: str) -> str:
    return str(name).split(_NAME_CUT[DeviceKind(kind)], 1)[0].strip()


def unknown_device(kind: DeviceKind) -> Device:
    return Device(id=UNKNOWN_DEVICE_ID, name=f"Unknown {DeviceKind(kind).value}", url="", score=0)


def _row_to_device(row) -> Device:
    return Device(id=int(row.id), name=str(row.name), url=str(row.url), score=int(row.score))


class DeviceService:
    def _table(self, kind: DeviceKind) -> sa.Table:
        return _TABLES[DeviceKind(kind)]

    def add_device(self, conn: Connection, kind: DeviceKind, device: Device) -> Device:
        table = self._table(kind)
        try:
            conn.execute(sa.insert(table).values(**asdict(device)))
        except IntegrityError as exc:
            raise translate_integrity_error(exc, table=table.name) from exc
        logger.debug("Added %s id=%s (%s)", table.name, device.id, device.name)
        return device

    def upsert_device(self, conn: Connection, kind: DeviceKind, device: Device) -> Device:
        table = self._table(kind)
        stmt = upsert_statement(conn.dialect, table, asdict(device), ("name", "url", "score"))
        try:
            conn.execute(stmt)
        except IntegrityError as exc:
            raise translate_integrity_error(exc, table=table.name) from exc
        return device

    def get_device(self, conn: Connection, kind: DeviceKind, device_id: int) -> Optional[Device]:
        table = self._table(kind)
        row = conn.execute(sa.select(table).where(table.c.id == int(device_id))).one_or_none()
        return _row_to_device(row) if row is not None else None

    def list_devices(self, conn: Connection, kind: DeviceKind, *, short_names: bool = True) -> List[Device]:
        """All devices of ``kind`` ordered by id.

        With ``short_names`` the benchmark suffix is stripped from each name,
        which is the form the composition matcher compares against.
        """
        table = self._table(kind)
        rows = conn.execute(sa.select(table).order_by(table.c.id.asc())).all()
        out = [_row_to_device(r) for r in rows]
        if short_names:
            out = [Device(id=d.id, name=short_name(kind, d.name), url=d.url, score=d.score) for d in out]
        return out

    def delete_device(self, conn: Connection, kind: DeviceKind, device_id: int) -> int:
        table = self._table(kind)
        result = conn.execute(sa.delete(table).where(table.c.id == int(device_id)))
        deleted = int(result.rowcount or 0)
        if deleted:
            logger.info("Deleted %s id=%s (laptops referencing it cascade)", table.name, device_id)
        return deleted

    def ensure_unknown_devices(self, conn: Connection) -> None:
        for kind in DeviceKind:
            if self.get_device(conn, kind, UNKNOWN_DEVICE_ID) is None:
                self.add_device(conn, kind, unknown_device(kind))
                logger.info("Seeded sentinel %s id=%s", kind.value, UNKNOWN_DEVICE_ID)
