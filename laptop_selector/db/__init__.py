"""Database package.

SQLAlchemy Core tables for cpu/gpu/laptop plus engine management.
"""

from .schema import cpu_table, create_schema, create_table_ddl, drop_schema, gpu_table, laptop_table, metadata
from .session import connect, create_db_engine

__all__ = [
    "metadata",
    "cpu_table",
    "gpu_table",
    "laptop_table",
    "create_schema",
    "drop_schema",
    "create_table_ddl",
    "connect",
    "create_db_engine",
]
