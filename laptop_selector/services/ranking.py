from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from laptop_selector.services.laptop_service import LaptopView


@dataclass(frozen=True)
class LaptopPriorities:
    cpu: int = 100
    gpu: int = 0
    quantity: int = 10


@dataclass(frozen=True)
class ScoredLaptop:
    laptop: LaptopView
    total_score: int


def max_scores(views: Iterable[LaptopView]) -> Tuple[int, int]:
    max_cpu = 0
    max_gpu = 0
    for v in views:
        max_cpu = max(max_cpu, int(v.cpu_score))
        max_gpu = max(max_gpu, int(v.gpu_score))
    return max_cpu, max_gpu


def total_score(view: LaptopView, priorities: LaptopPriorities, maximums: Tuple[int, int]) -> int:
    """Weighted benchmark score, each device normalised to the best one in the list."""
    max_cpu, max_gpu = maximums
    score = 0
    if max_cpu > 0:
        score += int(view.cpu_score) * int(priorities.cpu) // max_cpu
    if max_gpu > 0:
        score += int(view.gpu_score) * int(priorities.gpu) // max_gpu
    return score


def value_key(price: int, score: int) -> int:
    """Price per unit of performance; lower is a better buy."""
    return int(price) * 1000 // (int(score) + 1)


def rank_laptops(views: Sequence[LaptopView], priorities: LaptopPriorities) -> List[ScoredLaptop]:
    maximums = max_scores(views)
    scored = [ScoredLaptop(laptop=v, total_score=total_score(v, priorities, maximums)) for v in views]
    scored.sort(key=lambda s: value_key(s.laptop.price, s.total_score))
    return scored[: max(0, int(priorities.quantity))]


def rank_by_cpu(views: Sequence[LaptopView]) -> List[LaptopView]:
    return sorted(views, key=lambda v: value_key(v.price, v.cpu_score))
