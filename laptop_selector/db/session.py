from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import NullPool, StaticPool

from laptop_selector.core.settings import Settings
from laptop_selector.db.schema import create_schema

logger = logging.getLogger(__name__)


def _sqlite_file(database_url: str) -> Optional[Path]:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return None
    db = url.database or ""
    if not db or db == ":memory:" or db.startswith("file:"):
        return None
    return Path(db)


def create_db_engine(
    database_url: str,
    *,
    echo: bool = False,
    sqlite_check_same_thread: bool = False,
) -> Engine:
    """Create the SQLAlchemy engine for the catalogue database.

    Notes:
      - SQLite only enforces foreign keys (and therefore ON DELETE CASCADE) when
        PRAGMA foreign_keys is on, and the pragma is per connection, so it is
        applied on every connect.
      - In-memory SQLite lives inside a single connection; StaticPool keeps it.
    """
    is_sqlite = database_url.startswith("sqlite")

    connect_args: dict = {}
    if is_sqlite:
        if not sqlite_check_same_thread:
            connect_args["check_same_thread"] = False
        connect_args.setdefault("timeout", 5)

    engine_kwargs = dict(
        echo=echo,
        connect_args=connect_args,
    )
    if is_sqlite:
        if _sqlite_file(database_url) is None:
            engine_kwargs["poolclass"] = StaticPool
        else:
            # NullPool avoids "database is locked" from pooled file handles.
            engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute("PRAGMA busy_timeout=5000")
            finally:
                cursor.close()

    return engine


def connect(settings: Settings | None = None) -> Engine:
    """Open the catalogue database, creating tables on first use.

    Mirrors the ``AUTO_CREATE_DB`` / ``SEED_UNKNOWN_DEVICES`` switches in
    :class:`Settings`.
    """
    settings = settings or Settings()

    db_file = _sqlite_file(settings.database_url)
    if db_file is not None and not db_file.exists():
        logger.info("Creating database %s", settings.database_url)
        db_file.parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(settings.database_url, echo=settings.db_echo)

    if settings.auto_create_db:
        create_schema(engine)
        if settings.seed_unknown_devices:
            # local import: device_service imports db.schema, not db.session
            from laptop_selector.services.device_service import DeviceService

            with engine.begin() as conn:
                DeviceService().ensure_unknown_devices(conn)

    return engine
