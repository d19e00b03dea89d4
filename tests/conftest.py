from __future__ import annotations

from pathlib import Path
import sys

# Ensure repo root is importable
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))


import pytest

from laptop_selector.core.settings import Settings
from laptop_selector.db.session import connect
from laptop_selector.services.device_service import Device, DeviceKind, DeviceService
from laptop_selector.services.laptop_service import Laptop, LaptopService


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    db_path = tmp_path / "laptops.db"
    return Settings(
        database_url=f"sqlite:///{db_path}",
        db_echo=False,
        auto_create_db=True,
        seed_unknown_devices=True,
        match_min_ratio=0.4,
        default_cpu_priority=100,
        default_gpu_priority=0,
        default_quantity=10,
        log_level="INFO",
    )


@pytest.fixture()
def engine(settings: Settings):
    eng = connect(settings)
    yield eng
    eng.dispose()


@pytest.fixture()
def devices() -> DeviceService:
    return DeviceService()


@pytest.fixture()
def laptops() -> LaptopService:
    return LaptopService()


@pytest.fixture()
def seeded(engine, devices: DeviceService):
    """Two CPUs and two GPUs next to the id-0 sentinels."""
    with engine.begin() as conn:
        devices.add_device(conn, DeviceKind.CPU, Device(id=1, name="Intel Core i5-1235U @ 1.30GHz", url="https://cpu/1", score=13500))
        devices.add_device(conn, DeviceKind.CPU, Device(id=2, name="AMD Ryzen 7 5800H", url="https://cpu/2", score=21000))
        devices.add_device(conn, DeviceKind.GPU, Device(id=1, name="GeForce MX550, 2 GB", url="https://gpu/1", score=2700))
        devices.add_device(conn, DeviceKind.GPU, Device(id=2, name="GeForce RTX 3060 Laptop GPU", url="https://gpu/2", score=12800))
    return engine


def _make_laptop(laptop_id: int = 1, *, cpu_id: int = 1, gpu_id: int = 1, price: int = 999, **overrides) -> Laptop:
    values = dict(
        id=laptop_id,
        image=f"https://img/{laptop_id}.jpg",
        description=f"Laptop {laptop_id} / 15.6 IPS",
        composition="Intel Core i5-1235U (1.3 - 4.4 GHz) / RAM 16 GB / GeForce MX550",
        url=f"https://shop/laptop/{laptop_id}",
        price=price,
        cpu_id=cpu_id,
        gpu_id=gpu_id,
    )
    values.update(overrides)
    return Laptop(**values)


@pytest.fixture()
def make_laptop():
    return _make_laptop
