from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from laptop_selector.core.settings import Settings
from laptop_selector.db.session import connect
from laptop_selector.errors import LaptopSelectorError
from laptop_selector.services.catalog_importer import CatalogImporter
from laptop_selector.services.laptop_service import LaptopService
from laptop_selector.services.ranking import LaptopPriorities, rank_by_cpu, rank_laptops

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _setup_logging(settings: Settings) -> None:
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=LOG_FORMAT)


def _short_description(description: str) -> str:
    return str(description).split("/", 1)[0].strip()


def build_table(rows: Sequence[tuple]) -> Table:
    table = Table(show_header=True)
    table.add_column("Score", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Name")
    table.add_column("Url", overflow="fold")
    for score, price, description, url in rows:
        table.add_row(str(score), str(price), _short_description(description), str(url))
    return table


def table_main(
    argv: Optional[List[str]] = None,
    *,
    settings: Optional[Settings] = None,
    console: Optional[Console] = None,
) -> int:
    """Print laptops ordered by price per benchmark point."""
    parser = argparse.ArgumentParser(prog="laptop-table", description=table_main.__doc__)
    parser.add_argument("--cpu", type=int, default=None, help="CPU priority (0-1000)")
    parser.add_argument("--gpu", type=int, default=None, help="GPU priority (0-1000)")
    parser.add_argument("--limit", type=int, default=None, help="number of laptops to show")
    args = parser.parse_args(argv)

    settings = settings or Settings()
    _setup_logging(settings)
    console = console or Console()

    try:
        engine = connect(settings)
        with engine.connect() as conn:
            views = LaptopService().list_laptop_views(conn)
    except (LaptopSelectorError, SQLAlchemyError, OSError) as exc:
        logger.error("Failed to load laptops: %s", exc)
        return 1

    if args.cpu is None and args.gpu is None:
        ordered = rank_by_cpu(views)
        if args.limit is not None:
            ordered = ordered[: max(0, args.limit)]
        rows = [(v.cpu_score, v.price, v.description, v.url) for v in ordered]
    else:
        priorities = LaptopPriorities(
            cpu=settings.default_cpu_priority,
            gpu=settings.default_gpu_priority,
            quantity=settings.default_quantity,
        )
        if args.cpu is not None:
            priorities = replace(priorities, cpu=args.cpu)
        if args.gpu is not None:
            priorities = replace(priorities, gpu=args.gpu)
        if args.limit is not None:
            priorities = replace(priorities, quantity=args.limit)
        rows = [
            (s.total_score, s.laptop.price, s.laptop.description, s.laptop.url)
            for s in rank_laptops(views, priorities)
        ]

    console.print(build_table(rows))
    return 0


def import_main(
    argv: Optional[List[str]] = None,
    *,
    settings: Optional[Settings] = None,
    console: Optional[Console] = None,
) -> int:
    """Load a YAML catalogue of CPUs, GPUs and laptops into the database."""
    parser = argparse.ArgumentParser(prog="laptop-import", description=import_main.__doc__)
    parser.add_argument("catalogue", help="path to the YAML catalogue")
    args = parser.parse_args(argv)

    settings = settings or Settings()
    _setup_logging(settings)
    console = console or Console()

    try:
        engine = connect(settings)
        report = CatalogImporter(engine, min_ratio=settings.match_min_ratio).load_file(args.catalogue)
    except (LaptopSelectorError, SQLAlchemyError, OSError) as exc:
        logger.error("Import failed: %s", exc)
        return 1

    console.print(
        f"Imported {report.cpus} cpu, {report.gpus} gpu, {report.laptops} laptops "
        f"({report.skipped} skipped)"
    )
    return 0
