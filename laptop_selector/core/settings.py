from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(key: str, default: str = "1") -> bool:
    return os.getenv(key, default).strip().lower() not in ("0", "false", "no", "off")


def _env_int(key: str, default: str) -> int:
    raw = os.getenv(key, default)
    try:
        return int(str(raw).strip())
    except ValueError:
        return int(default)


def _env_float(key: str, default: str) -> float:
    raw = os.getenv(key, default)
    try:
        return float(str(raw).strip())
    except ValueError:
        return float(default)


@dataclass(frozen=True, slots=True)
class Settings:
    # Database
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./laptops.db"))
    db_echo: bool = field(default_factory=lambda: _env_bool("DB_ECHO", "0"))
    # Tables are created with CREATE TABLE IF NOT EXISTS, so leaving this on is safe for existing DBs.
    auto_create_db: bool = field(default_factory=lambda: _env_bool("AUTO_CREATE_DB", "1"))
    seed_unknown_devices: bool = field(default_factory=lambda: _env_bool("SEED_UNKNOWN_DEVICES", "1"))

    # Composition -> CPU/GPU matching
    match_min_ratio: float = field(default_factory=lambda: _env_float("MATCH_MIN_RATIO", "0.4"))

    # Ranking defaults used by the console table
    default_cpu_priority: int = field(default_factory=lambda: _env_int("DEFAULT_CPU_PRIORITY", "100"))
    default_gpu_priority: int = field(default_factory=lambda: _env_int("DEFAULT_GPU_PRIORITY", "0"))
    default_quantity: int = field(default_factory=lambda: _env_int("DEFAULT_QUANTITY", "10"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO")
