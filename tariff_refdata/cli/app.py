from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, RefDataConfig, load_config
from ..db.reference_store import StoreError
from ..logging.init import log_summary, setup_logging
from ..models.actor import Actor
from ..models.dataset_kind import DatasetKind
from ..services.reference_data import ReferenceDataService
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m tariff_refdata.cli [--config PATH] [--debug] import KIND FILE [--clear] [--dry-run] [--actor ID]
    python -m tariff_refdata.cli [--config PATH] [--debug] show KIND [--limit N]
    python -m tariff_refdata.cli [--config PATH] [--debug] delete KIND --actor ID

Exit codes:
    0  success
    1  fatal: config error, unauthorized delete, store unavailable
    2  import finished with success=false
"""

__all__ = [
    "main",
    "EXIT_SUCCESS",
    "EXIT_FATAL",
    "EXIT_IMPORT_FAILED",
]

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_IMPORT_FAILED = 2


def _kind_arg(value: str) -> DatasetKind:
    try:
        return DatasetKind.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tariff_refdata", description="Tariff reference data importer")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a workbook as a reference dataset")
    imp.add_argument("kind", type=_kind_arg, help="tec | voc | tarifport (or A | B | C)")
    imp.add_argument("file", type=Path, help="Workbook path (.xlsx)")
    imp.add_argument("--clear", action="store_true", help="Delete the existing dataset before saving")
    imp.add_argument("--dry-run", action="store_true", help="Validate only, write nothing")
    imp.add_argument("--actor", default=None, help="Actor id (must be listed in authorized_actors)")

    show = sub.add_parser("show", help="Print the current dataset of a kind")
    show.add_argument("kind", type=_kind_arg)
    show.add_argument("--limit", type=int, default=10, help="Records to print (0 = all)")

    delete = sub.add_parser("delete", help="Delete the dataset of a kind")
    delete.add_argument("kind", type=_kind_arg)
    delete.add_argument("--actor", required=True)
    return p.parse_args(argv)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; values from the file win over the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _build_service(cfg: RefDataConfig) -> ReferenceDataService:
    return ReferenceDataService.from_config(cfg)


def _cmd_import(service: ReferenceDataService, cfg: RefDataConfig, args: argparse.Namespace, logger: logging.Logger) -> int:
    kind: DatasetKind = args.kind
    actor = Actor(actor_id=args.actor, can_mutate=cfg.can_mutate(args.actor))
    result = service.import_kind(kind, args.file, clear_existing=args.clear, actor=actor, dry_run=args.dry_run)
    for w in result.warnings:
        logger.warning(w)
    for e in result.errors:
        logger.error(e)
    run = service.last_run
    elapsed = run.elapsed_seconds if run is not None else 0.0
    summary_line = render_summary_line(kind, result, elapsed)
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS if result.success else EXIT_IMPORT_FAILED


def _cmd_show(service: ReferenceDataService, args: argparse.Namespace, logger: logging.Logger) -> int:
    kind: DatasetKind = args.kind
    try:
        dataset = service.get_reference_data(kind)
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    if dataset is None:
        logger.info(f"no dataset for kind={kind.value}")
        return EXIT_SUCCESS
    logger.info(
        f"kind={kind.value} source={dataset.source} records={len(dataset)} "
        f"updated_at={dataset.updated_at.isoformat() if dataset.updated_at else '-'}"
    )
    shown = dataset.records if args.limit <= 0 else dataset.records[: args.limit]
    for record in shown:
        print(json.dumps(record.to_dict(), ensure_ascii=False))
    return EXIT_SUCCESS


def _cmd_delete(service: ReferenceDataService, cfg: RefDataConfig, args: argparse.Namespace, logger: logging.Logger) -> int:
    kind: DatasetKind = args.kind
    if not cfg.can_mutate(args.actor):
        logger.error(f"actor {args.actor} is not authorized to modify reference data")
        return EXIT_FATAL
    try:
        service.delete_reference_data(kind)
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    logger.info(f"deleted kind={kind.value}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an empty list from tests must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    service = _build_service(cfg)
    if args.command == "import":
        return _cmd_import(service, cfg, args, logger)
    if args.command == "show":
        return _cmd_show(service, args, logger)
    return _cmd_delete(service, cfg, args, logger)
