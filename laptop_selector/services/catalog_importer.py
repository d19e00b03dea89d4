from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from sqlalchemy.engine import Engine

from laptop_selector.db.schema import DEVICE_FIELDS
from laptop_selector.errors import CatalogError, ConstraintViolation, ReferentialViolation
from laptop_selector.services.device_matcher import match_devices
from laptop_selector.services.device_service import Device, DeviceKind, DeviceService
from laptop_selector.services.laptop_service import Laptop, LaptopService

logger = logging.getLogger(__name__)

_LAPTOP_REQUIRED = ("id", "image", "description", "url", "price")


@dataclass(frozen=True)
class ImportReport:
    cpus: int = 0
    gpus: int = 0
    laptops: int = 0
    skipped: int = 0


def _entries(doc: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    raw = doc.get(key) or []
    if not isinstance(raw, list):
        raise CatalogError(f"'{key}' must be a list")
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise CatalogError(f"'{key}[{i}]' must be a mapping")
    return raw


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _device(item: Mapping[str, Any], where: str) -> Device:
    missing = [f for f in DEVICE_FIELDS if f not in item]
    if missing:
        raise CatalogError(f"{where}: missing {', '.join(missing)}")
    nulls = [f for f in DEVICE_FIELDS if item[f] is None]
    if nulls:
        raise CatalogError(f"{where}: null {', '.join(nulls)}")
    try:
        return Device(id=int(item["id"]), name=str(item["name"]), url=str(item["url"]), score=int(item["score"]))
    except (TypeError, ValueError) as exc:
        raise CatalogError(f"{where}: {exc}") from exc


def _laptop_fields(item: Mapping[str, Any], where: str) -> Dict[str, Any]:
    """Convert one listing. Nulls are kept so the database rejects the row."""
    missing = [f for f in _LAPTOP_REQUIRED if f not in item]
    if missing:
        raise CatalogError(f"{where}: missing {', '.join(missing)}")
    composition = item.get("composition")
    try:
        return {
            "id": int(item["id"]),
            "image": _opt_str(item["image"]),
            "description": _opt_str(item["description"]),
            "composition": str(composition) if composition else "",
            "url": _opt_str(item["url"]),
            "price": _opt_int(item["price"]),
            "cpu_id": _opt_int(item.get("cpu_id")),
            "gpu_id": _opt_int(item.get("gpu_id")),
        }
    except (TypeError, ValueError) as exc:
        raise CatalogError(f"{where}: {exc}") from exc


class CatalogImporter:
    """Load CPU/GPU benchmark lists and laptop listings from a YAML catalogue.

    The whole document is converted before anything is written. Devices are
    upserted first. Laptops that carry no ``cpu_id``/``gpu_id`` are
    matched to devices from their composition text. Each laptop is written in
    its own transaction so one rejected listing does not undo the rest.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        min_ratio: float = 0.4,
        devices: Optional[DeviceService] = None,
        laptops: Optional[LaptopService] = None,
    ) -> None:
        self._engine = engine
        self._min_ratio = float(min_ratio)
        self._devices = devices or DeviceService()
        self._laptops = laptops or LaptopService()

    def load_file(self, path: str | Path) -> ImportReport:
        p = Path(path)
        with p.open("r", encoding="utf-8") as fh:
            try:
                doc = yaml.safe_load(fh)
            except yaml.YAMLError as exc:
                raise CatalogError(f"{p}: invalid YAML ({exc})") from exc
        logger.info("Importing catalogue %s", p)
        return self.load(doc)


    def load(self, doc: Any) -> ImportReport:
        if doc is None:
            doc = {}
        if not isinstance(doc, dict):
            raise CatalogError("Catalogue must be a mapping with cpus/gpus/laptops lists")

        cpu_items = [_device(item, f"cpus[{i}]") for i, item in enumerate(_entries(doc, "cpus"))]
        gpu_items = [_device(item, f"gpus[{i}]") for i, item in enumerate(_entries(doc, "gpus"))]
        laptop_items = [_laptop_fields(item, f"laptops[{i}]") for i, item in enumerate(_entries(doc, "laptops"))]

        with self._engine.begin() as conn:
            self._devices.ensure_unknown_devices(conn)
            for d in cpu_items:
                self._devices.upsert_device(conn, DeviceKind.CPU, d)
            for d in gpu_items:
                self._devices.upsert_device(conn, DeviceKind.GPU, d)
            cpus = self._devices.list_devices(conn, DeviceKind.CPU)
            gpus = self._devices.list_devices(conn, DeviceKind.GPU)
        logger.info("Devices loaded: %d cpu, %d gpu", len(cpu_items), len(gpu_items))

        imported = 0
        skipped = 0
        for fields in laptop_items:
            laptop = self._laptop(fields, cpus, gpus)
            try:
                with self._engine.begin() as conn:
                    self._laptops.upsert_laptop(conn, laptop)
            except (ConstraintViolation, ReferentialViolation) as exc:
                skipped += 1
                logger.warning("Skipping laptop id=%s: %s", laptop.id, exc)
                continue
            imported += 1

        report = ImportReport(cpus=len(cpu_items), gpus=len(gpu_items), laptops=imported, skipped=skipped)
        logger.info("Catalogue import done: %s", report)
        return report

    def _laptop(self, fields: Dict[str, Any], cpus: List[Device], gpus: List[Device]) -> Laptop:
        cpu_id = fields["cpu_id"]
        gpu_id = fields["gpu_id"]
        if cpu_id is None or gpu_id is None:
            cpu, gpu = match_devices(fields["composition"], cpus, gpus, self._min_ratio)
            cpu_id = cpu.id if cpu_id is None else cpu_id
            gpu_id = gpu.id if gpu_id is None else gpu_id
        if not fields["composition"] or not fields["image"]:
            logger.info("Incomplete listing id=%s (composition or image missing)", fields["id"])
        return Laptop(**{**fields, "cpu_id": cpu_id, "gpu_id": gpu_id})
