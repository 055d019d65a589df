from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, parse_columns
from ..excel.reader import WorkbookReadError, iter_sheet_grids, load_report_file
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import RewriteConfig
from ..services.orchestrator import ProcessingError, describe_sheet, process_all, scan_report_files
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then config/rewrite.yml (or --config / REWRITER_CONFIG)
- Apply command line overrides (--columns, --seed)
- Rewrite every report of the source directory (or the given files)
- Print one SUMMARY line and exit with the code below
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

ENV_CONFIG = "REWRITER_CONFIG"
ENV_SEED = "REWRITER_SEED"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv.

    Values already present in the environment win unless ``override`` is set.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="inspection-rewriter",
        description="Rewrite measured values of inspection reports keeping their pass/fail status",
    )
    p.add_argument("files", nargs="*", type=Path, help="Report files (default: scan source_directory)")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--columns", default=None, help="Target columns, e.g. E,F,G (overrides config)")
    p.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print tolerance windows per row then exit")
    return p.parse_args(argv)


def _apply_overrides(cfg: RewriteConfig, args: argparse.Namespace) -> RewriteConfig:
    changes: dict[str, object] = {}
    if args.columns:
        changes["target_columns"] = parse_columns(args.columns)
    if args.seed is not None:
        changes["seed"] = args.seed
    elif os.getenv(ENV_SEED):
        try:
            changes["seed"] = int(os.environ[ENV_SEED])
        except ValueError as e:
            raise ConfigError(f"{ENV_SEED} must be an integer: {os.environ[ENV_SEED]!r}") from e
    return dataclasses.replace(cfg, **changes) if changes else cfg


def _inspect_data(cfg: RewriteConfig, files: list[Path]) -> int:
    if not files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            report = load_report_file(f)
        except WorkbookReadError as e:
            print(f"  read_error: {e}")
            continue
        for grid in iter_sheet_grids(report):
            rows = describe_sheet(grid, cfg.target_columns, cfg.layout)
            print(f"  SHEET: {grid.title} rows={len(rows)}")
            if not rows:
                continue
            df = pd.DataFrame([r.as_record() for r in rows])
            for line in df.to_string(index=False).splitlines():
                print(f"    {line}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: [] (テストからの呼び出し) と None を区別する
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    config_path = args.config or Path(os.getenv(ENV_CONFIG) or DEFAULT_CONFIG_PATH)
    try:
        cfg = _apply_overrides(load_config(config_path), args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.files:
        missing = [f for f in args.files if not f.is_file()]
        if missing:
            logger.error(f"file not found: {', '.join(str(m) for m in missing)}")
            return EXIT_FATAL
        files: list[Path] | None = list(args.files)
        logger.info(f"Processing {len(files)} report(s)")
    else:
        directory = Path(cfg.source_directory)
        if not directory.exists():
            logger.error(f"directory not found: {directory}")
            return EXIT_FATAL
        logger.info(f"Processing reports from: {directory}")
        files = None

    if args.inspect_data:
        if files is None:
            try:
                files = scan_report_files(Path(cfg.source_directory), cfg.output_suffix)
            except ProcessingError as e:
                logger.error(f"inspect: {e}")
                return EXIT_FATAL
        return _inspect_data(cfg, files)

    try:
        result = process_all(cfg, files=files)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary が "SUMMARY " を付与するので除去して渡す
    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
