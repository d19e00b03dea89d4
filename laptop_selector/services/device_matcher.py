from __future__ import annotations

import difflib
import logging
from typing import List, Sequence, Tuple

from laptop_selector.services.device_service import Device

logger = logging.getLogger(__name__)


def composition_parts(composition: str | None) -> List[str]:
    """Split a listing composition into candidate device names.

    ``"Intel Core i5-1235U (1.3 - 4.4 GHz) / RAM 16 GB / GeForce MX550"``
    yields ``["Intel Core i5-1235U", "RAM 16 GB", "GeForce MX550"]``.
    """
    out: List[str] = []
    for part in str(composition or "").split("/"):
        name = part.split("(", 1)[0].strip()
        if name:
            out.append(name)
    return out


def _ratio(a: str, b: str) -> float:
    return difflib.SequenceMatcher(None, a.lower(), b.lower()).ratio()


def best_match(parts: Sequence[str], devices: Sequence[Device], min_ratio: float = 0.4) -> int:
    """Index of the device most similar to any of ``parts``.

    Falls back to 0 (the sentinel device when the list is ordered by id) if no
    similarity reaches ``min_ratio``.
    """
    best_index = 0
    best_ratio = float(min_ratio)
    found = False
    for index, device in enumerate(devices):
        for part in parts:
            ratio = _ratio(part, device.name)
            if ratio > best_ratio or (not found and ratio == best_ratio):
                best_ratio = ratio
                best_index = index
                found = True
    return best_index


def match_devices(
    composition: str | None,
    cpus: Sequence[Device],
    gpus: Sequence[Device],
    min_ratio: float = 0.4,
) -> Tuple[Device, Device]:
    if not cpus or not gpus:
        raise ValueError("CPU and GPU lists must not be empty")
    parts = composition_parts(composition)
    cpu = cpus[best_match(parts, cpus, min_ratio)]
    gpu = gpus[best_match(parts, gpus, min_ratio)]
    logger.debug("Matched composition %r with cpu %r and gpu %r", composition, cpu.name, gpu.name)
    return cpu, gpu
