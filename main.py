#!/usr/bin/env python3
"""WeiDU Mod Packager: Entry Point"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from archive_writer import ArchiveWriter
from asset_fetcher import AssetFetcher
from errors import PackagerError
from package_builder import PackageBuilder
from package_options import parse_tokens

LOG_FILE_ENV = "WEIDU_PACKAGER_LOG"

logger = logging.getLogger("weidu_mod_packager")

# handlers installed by setup_logging
_handlers: list[logging.Handler] = []


def setup_logging(verbose: bool = False, log_file: str | Path | None = None) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter("%(levelname)-8s  %(message)s"))
    root.addHandler(console)
    _handlers.append(console)

    log_file = log_file or os.environ.get(LOG_FILE_ENV)
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path,
            maxBytes=1 * 1024 * 1024,  # 1 MB
            backupCount=2,
            encoding="utf-8",
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(asctime)s  %(levelname)-8s  %(message)s"))
        root.addHandler(handler)
        _handlers.append(handler)

    return logger


def install_crash_handler(logger: logging.Logger):
    def handle_exception(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical(
            "Unhandled exception:\n%s",
            "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
        )

    sys.excepthook = handle_exception


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Package a WeiDU mod into a distributable archive.",
        epilog="Parameters: type, arch, suffix, extra, naming, weidu, prefix_win, "
        "prefix_lin, prefix_mac, tp2_name, name_fmt, multi_autoupdate, "
        "case_sensitive, beautify, lower_case",
    )
    parser.add_argument(
        "params",
        nargs="*",
        metavar="key=value",
        help="Packaging parameter, e.g. type=windows or suffix=none",
    )
    parser.add_argument(
        "-C",
        "--directory",
        type=Path,
        default=Path("."),
        help="Directory to scan for mods (default: current directory)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Where to write the archives (default: the scan directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--log-file", help=f"Also log to this file (or ${LOG_FILE_ENV})")
    return parser.parse_args(argv)


def main(
    argv: Optional[Sequence[str]] = None,
    fetcher: Optional[AssetFetcher] = None,
    archive_writer: Optional[ArchiveWriter] = None,
) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        options = parse_tokens(args.params)
        for line in options.describe():
            logger.info(line)

        root = args.directory.expanduser().resolve()
        builder = PackageBuilder(
            root,
            options,
            output_dir=args.output_dir.expanduser().resolve() if args.output_dir else None,
            fetcher=fetcher,
            archive_writer=archive_writer,
            log_callback=logger.info,
        )
        results = builder.build_all()
        builder.write_package_name(results, Path.cwd())
        builder.write_github_output(results)
    except PackagerError as exc:
        logger.error("ERROR: %s", exc)
        return 1

    return 0


def run():
    install_crash_handler(logger)
    sys.exit(main())


if __name__ == "__main__":
    run()
