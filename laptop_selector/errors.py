from __future__ import annotations

from sqlalchemy.exc import IntegrityError

# SQLSTATE class 23 codes (PostgreSQL, MySQL connectors that expose sqlstate)
_SQLSTATE_NOT_NULL = "23502"
_SQLSTATE_FOREIGN_KEY = "23503"


class LaptopSelectorError(Exception):
    """Base class for errors raised by laptop_selector."""


class ConstraintViolation(LaptopSelectorError):
    """A required field was missing/null or a primary key was duplicated."""


class ReferentialViolation(LaptopSelectorError):
    """cpu_id or gpu_id does not reference an existing row."""


class CatalogError(LaptopSelectorError):
    """The catalogue document could not be interpreted."""


class UnsupportedDialect(LaptopSelectorError):
    """The database backend has no upsert statement we know how to build."""


def _sqlstate(exc: IntegrityError) -> str:
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return ""


def translate_integrity_error(exc: IntegrityError, *, table: str) -> LaptopSelectorError:
    """Map a driver IntegrityError onto the catalogue's error kinds."""
    code = _sqlstate(exc)
    message = str(exc.orig)
    lowered = message.lower()

    if code == _SQLSTATE_FOREIGN_KEY or "foreign key" in lowered:
        return ReferentialViolation(f"{table}: referenced cpu/gpu row does not exist ({message})")
    if code == _SQLSTATE_NOT_NULL or "not null" in lowered:
        return ConstraintViolation(f"{table}: required field is missing ({message})")
    return ConstraintViolation(f"{table}: {message}")
