from __future__ import annotations

import pytest
import sqlalchemy as sa

from laptop_selector.errors import ConstraintViolation, ReferentialViolation
from laptop_selector.services.device_service import DeviceKind


def _count_laptops(engine) -> int:
    with engine.connect() as conn:
        return int(conn.execute(sa.text("SELECT COUNT(*) FROM laptop")).scalar())


def test_insert_and_get_round_trip(seeded, laptops, make_laptop):
    laptop = make_laptop(1, price=999)
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, laptop)

    with seeded.connect() as conn:
        assert laptops.get_laptop(conn, 1) == laptop
        assert laptops.get_laptop(conn, 42) is None


@pytest.mark.parametrize("overrides", [{"cpu_id": 99}, {"gpu_id": 99}])
def test_insert_with_unknown_device_fails(seeded, laptops, make_laptop, overrides):
    with pytest.raises(ReferentialViolation):
        with seeded.begin() as conn:
            laptops.insert_laptop(conn, make_laptop(1, **overrides))
    assert _count_laptops(seeded) == 0


@pytest.mark.parametrize("field", ["image", "description", "composition", "url", "price"])
def test_insert_with_missing_field_fails(seeded, laptops, make_laptop, field):
    with pytest.raises(ConstraintViolation):
        with seeded.begin() as conn:
            laptops.insert_laptop(conn, make_laptop(1, **{field: None}))
    assert _count_laptops(seeded) == 0


def test_insert_duplicate_id_fails(seeded, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1))
    with pytest.raises(ConstraintViolation):
        with seeded.begin() as conn:
            laptops.insert_laptop(conn, make_laptop(1))


def test_deleting_cpu_cascades_to_laptops(seeded, devices, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1, cpu_id=1, gpu_id=1, price=999))
        laptops.insert_laptop(conn, make_laptop(2, cpu_id=1, gpu_id=2))
        laptops.insert_laptop(conn, make_laptop(3, cpu_id=2, gpu_id=2))

    with seeded.begin() as conn:
        assert devices.delete_device(conn, DeviceKind.CPU, 1) == 1

    with seeded.connect() as conn:
        assert laptops.get_laptop(conn, 1) is None
        assert laptops.get_laptop(conn, 2) is None
        assert [l.id for l in laptops.list_laptops(conn)] == [3]
        orphans = conn.execute(
            sa.text("SELECT COUNT(*) FROM laptop WHERE cpu_id NOT IN (SELECT id FROM cpu)")
        ).scalar()
    assert orphans == 0


def test_deleting_gpu_cascades_to_laptops(seeded, devices, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1, cpu_id=1, gpu_id=1))
        laptops.insert_laptop(conn, make_laptop(2, cpu_id=2, gpu_id=2))

    with seeded.begin() as conn:
        devices.delete_device(conn, DeviceKind.GPU, 2)

    with seeded.connect() as conn:
        assert [l.id for l in laptops.list_laptops(conn)] == [1]


def test_deleting_unreferenced_device_keeps_laptops(seeded, devices, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1, cpu_id=1, gpu_id=1))

    with seeded.begin() as conn:
        assert devices.delete_device(conn, DeviceKind.CPU, 2) == 1
        assert devices.delete_device(conn, DeviceKind.GPU, 2) == 1

    with seeded.connect() as conn:
        assert laptops.list_laptops(conn) == [make_laptop(1, cpu_id=1, gpu_id=1)]


def test_update_laptop(seeded, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1))

    with seeded.begin() as conn:
        updated = laptops.update_laptop(conn, 1, price=1299, gpu_id=2)
    assert updated is not None
    assert (updated.price, updated.gpu_id) == (1299, 2)

    with seeded.begin() as conn:
        assert laptops.update_laptop(conn, 7, price=1) is None


def test_update_laptop_rejects_bad_values(seeded, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1))

    with pytest.raises(ReferentialViolation):
        with seeded.begin() as conn:
            laptops.update_laptop(conn, 1, cpu_id=123)
    with pytest.raises(ConstraintViolation):
        with seeded.begin() as conn:
            laptops.update_laptop(conn, 1, url=None)
    with pytest.raises(ValueError):
        with seeded.begin() as conn:
            laptops.update_laptop(conn, 1, colour="red")

    with seeded.connect() as conn:
        assert laptops.get_laptop(conn, 1) == make_laptop(1)


def test_delete_laptop(seeded, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(1))
        assert laptops.delete_laptop(conn, 1) == 1
        assert laptops.delete_laptop(conn, 1) == 0


def test_upsert_overwrites_and_keeps_composition(seeded, laptops, make_laptop):
    original = make_laptop(1, composition="AMD Ryzen 7 5800H / RTX 3060", cpu_id=2, gpu_id=2)
    with seeded.begin() as conn:
        laptops.upsert_laptop(conn, original)

    with seeded.begin() as conn:
        laptops.upsert_laptop(conn, make_laptop(1, composition="", price=500, cpu_id=2, gpu_id=2))

    with seeded.connect() as conn:
        stored = laptops.get_laptop(conn, 1)
    assert stored.price == 500
    assert stored.composition == "AMD Ryzen 7 5800H / RTX 3060"

    with seeded.begin() as conn:
        laptops.upsert_laptop(conn, make_laptop(1, composition="Intel / MX550", price=450))
    with seeded.connect() as conn:
        stored = laptops.get_laptop(conn, 1)
    assert (stored.composition, stored.price, stored.cpu_id) == ("Intel / MX550", 450, 1)


def test_upsert_new_laptop_without_composition_fails(seeded, laptops, make_laptop):
    with pytest.raises(ConstraintViolation):
        with seeded.begin() as conn:
            laptops.upsert_laptop(conn, make_laptop(5, composition=""))
    assert _count_laptops(seeded) == 0


def test_upsert_with_unknown_device_fails(seeded, laptops, make_laptop):
    with pytest.raises(ReferentialViolation):
        with seeded.begin() as conn:
            laptops.upsert_laptop(conn, make_laptop(5, gpu_id=77))


def test_list_laptop_views_joins_devices(seeded, laptops, make_laptop):
    with seeded.begin() as conn:
        laptops.insert_laptop(conn, make_laptop(2, cpu_id=2, gpu_id=2))
        laptops.insert_laptop(conn, make_laptop(1, cpu_id=1, gpu_id=1))

    with seeded.connect() as conn:
        views = laptops.list_laptop_views(conn)

    assert [v.id for v in views] == [1, 2]
    assert (views[0].cpu_score, views[0].gpu_score) == (13500, 2700)
    assert views[1].cpu_name == "AMD Ryzen 7 5800H"
    assert views[1].gpu_name == "GeForce RTX 3060 Laptop GPU"
