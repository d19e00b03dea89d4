"""Laptop selector core package."""

from .errors import CatalogError, ConstraintViolation, LaptopSelectorError, ReferentialViolation, UnsupportedDialect
from .services.device_service import Device, DeviceKind, DeviceService
from .services.laptop_service import Laptop, LaptopService, LaptopView

__all__ = [
    "CatalogError",
    "ConstraintViolation",
    "LaptopSelectorError",
    "ReferentialViolation",
    "UnsupportedDialect",
    "Device",
    "DeviceKind",
    "DeviceService",
    "Laptop",
    "LaptopService",
    "LaptopView",
]
