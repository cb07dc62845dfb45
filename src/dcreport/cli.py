# src/dcreport/cli.py
"""
Command line entry for DC Report Manager.

Typical usage
-------------
python main.py                                   # desktop window
python main.py export reports/                   # one .xls per month
python main.py export reports/ --date 2025-10-01 --search sinha
python main.py export reports/ --input cases.tsv --zip
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dcreport.config import AppConfig, ConfigError, load_config
from dcreport.dataset_loader import load_case_file, load_embedded_dataset
from dcreport.export.xls_export import export_cases, export_cases_archive
from dcreport.logging_setup import LOG_LEVELS, configure_logging
from dcreport.logic.case_filter import FilterCondition, filter_cases

log = logging.getLogger(__name__)

ARCHIVE_NAME = "DC_Records.zip"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dcreport",
        description="Diagnostic-center DC report manager.",
    )
    p.add_argument("--config", default="", help="Path to a configuration JSON override.")
    p.add_argument("--log-level", default="INFO", choices=LOG_LEVELS, type=str.upper)

    sub = p.add_subparsers(dest="command")

    exp = sub.add_parser("export", help="Write monthly DC reports without opening the window.")
    exp.add_argument("out_dir", help="Directory the .xls files are written to.")
    exp.add_argument("--input", default="", help="Tab-separated case file (default: bundled dataset).")
    exp.add_argument("--search", default="", help="Free-text filter (name, referrer, test).")
    exp.add_argument("--date", default="", help="Only cases of this day, YYYY-MM-DD.")
    exp.add_argument("--referrer", default="", help="Only cases of this referrer.")
    exp.add_argument("--zip", action="store_true", help=f"Bundle the reports into {ARCHIVE_NAME}.")

    return p


def run_export(args: argparse.Namespace, config: AppConfig) -> int:
    if args.input:
        cases = load_case_file(Path(args.input), config)
    else:
        cases = load_embedded_dataset(config)

    cond = FilterCondition(search=args.search, date=args.date, referrer=args.referrer)
    visible = filter_cases(cases, cond)
    log.info("%d of %d cases match the filter", len(visible), len(cases))

    out_dir = Path(args.out_dir)
    if args.zip:
        report = export_cases_archive(visible, out_dir / ARCHIVE_NAME)
    else:
        report = export_cases(visible, out_dir)

    if report.is_empty:
        print(report.notice)
        return 0

    for path in report.files:
        print(path)
    return 0


def run_gui(config: AppConfig) -> int:
    # PySide6 is only imported when a window is actually needed
    from PySide6.QtWidgets import QApplication

    from dcreport.gui.main_window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    win = MainWindow(config=config)
    win.show()
    return app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.command != "export":
        return run_gui(config)

    try:
        return run_export(args, config)
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
