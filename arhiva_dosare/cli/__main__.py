from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from arhiva_dosare.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from arhiva_dosare.db.store import PostgresStore, RecordStore
from arhiva_dosare.documents.export import export_inventory
from arhiva_dosare.documents.labels import generate_labels
from arhiva_dosare.documents.registry import generate_registry
from arhiva_dosare.errors import ArchiveError
from arhiva_dosare.logging.error_log import ErrorLogBuffer, ErrorRecord
from arhiva_dosare.logging.init import log_summary, set_debug, setup_logging
from arhiva_dosare.models.config_models import AppConfig, DatabaseConfig
from arhiva_dosare.models.import_result import ImportStatus
from arhiva_dosare.services.importer import FILE_LEVEL, import_file
from arhiva_dosare.services.summary import render_summary_line

"""Operator entry point: ``python -m arhiva_dosare.cli <command>``.

Commands:
- import    spreadsheet -> inventory (validation, then insert/update/skip)
- labels    spine + cover labels for an inventory
- registry  inventory registry for a fonds
- export    round-trip spreadsheet of an inventory

Exit codes: 0 success, 1 fatal (config / connection), 2 import or document failure.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_FAILED = 2


def _resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Connection string resolution order:
    1. DATABASE_URL / PGDSN (a .env file is loaded first and overrides the process env)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of the config file
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _open_store(cfg: AppConfig) -> Iterator[RecordStore]:  # pragma: no cover (thin wrapper)
    """Connect and yield a PostgresStore.

    autocommit is on: the store issues BEGIN/COMMIT itself for atomic imports,
    and every write of a non-atomic import commits on its own.
    """
    conn = psycopg2.connect(_resolve_dsn(cfg.database))
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            yield PostgresStore(cur)
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="arhiva_dosare", description="Case-record import and label generation")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default {DEFAULT_CONFIG_PATH})")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a spreadsheet of case records into an inventory")
    imp.add_argument("--file", type=Path, required=True)
    imp.add_argument("--inventory", required=True)
    imp.add_argument("--overwrite", action="store_true", default=None, help="Update existing records")
    imp.add_argument("--user", help="Acting user id (elevated access is required to overwrite)")

    lbl = sub.add_parser("labels", help="Generate spine and cover labels for an inventory")
    lbl.add_argument("--inventory", required=True)
    lbl.add_argument("--out", type=Path, required=True)

    reg = sub.add_parser("registry", help="Generate the inventory registry of a fonds")
    reg.add_argument("--fonds", required=True)
    reg.add_argument("--out", type=Path, required=True)

    exp = sub.add_parser("export", help="Export an inventory to a spreadsheet")
    exp.add_argument("--inventory", required=True)
    exp.add_argument("--out", type=Path, required=True)
    return p.parse_args(argv)


def _load(args: argparse.Namespace) -> AppConfig:
    if args.config is not None:
        return load_config(args.config)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _run_import(
    args: argparse.Namespace,
    cfg: AppConfig,
    store: RecordStore,
    error_log: ErrorLogBuffer,
    logger: logging.Logger,
) -> int:
    try:
        elevated = bool(args.user) and store.has_elevated_access(args.user)
    except ArchiveError as e:
        logger.error(f"import {args.file.name}: role lookup for {args.user} failed: {e.message}")
        error_log.append(ErrorRecord.create(args.file.name, FILE_LEVEL, -1, e.error_type, e.message))
        return EXIT_FATAL
    outcome = import_file(
        args.file,
        args.inventory,
        store,
        cfg.import_settings,
        overwrite=args.overwrite,
        elevated=elevated,
        error_log=error_log,
    )
    log_summary(render_summary_line(outcome)[len("SUMMARY "):])
    return EXIT_SUCCESS if outcome.status is ImportStatus.SUCCESS else EXIT_FAILED


def _run_document(args: argparse.Namespace, cfg: AppConfig, store: RecordStore) -> Path | None:
    if args.command == "labels":
        return generate_labels(store, args.inventory, cfg.labels, args.out).path
    if args.command == "registry":
        return generate_registry(store, args.fonds, cfg.registry, args.out).path
    return export_inventory(store, args.inventory, args.out)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an empty list must not fall back to sys.argv (pytest arguments)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _load(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(Path(cfg.logs_directory))
    try:
        with _open_store(cfg) as store:
            if args.command == "import":
                return _run_import(args, cfg, store, error_log, logger)
            try:
                path = _run_document(args, cfg, store)
            except ArchiveError as e:
                logger.error(f"{args.command}: {e.message}")
                target = args.out.name
                error_log.append(ErrorRecord.create(target, FILE_LEVEL, -1, e.error_type, e.message))
                return EXIT_FAILED
            logger.info(f"{args.command}: {path if path else 'nothing to write'}")
            return EXIT_SUCCESS
    except psycopg2.Error as e:
        logger.error(f"database connection failed: {e}")
        return EXIT_FATAL
    finally:
        try:
            written = error_log.flush()
        except OSError as e:
            logger.warning(f"error log not written: {e}")
        else:
            if written is not None:
                logger.info(f"error log: {written}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
