#!/usr/bin/env python3
"""
Command line entry point for dts-bundler.
"""

import sys
import logging
import argparse
from pathlib import Path

from .bundler import generate
from .config import setup_logging
from .config_loader import ConfigLoader, load_config
from .exceptions import BundlerError
from .progress_tracker import ProgressTracker

EOL_CHOICES = {'lf': '\n', 'crlf': '\r\n'}


def _indent(value: str) -> str:
    """Accept a number of spaces, ``tab``, or a literal indent string."""
    if value.isdigit():
        return ' ' * int(value)
    if value == 'tab':
        return '\t'
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dts-bundler",
        description="Bundle TypeScript declarations into a single .d.ts file"
    )
    parser.add_argument("files", nargs="*", help="Entry source or declaration files")
    parser.add_argument("-c", "--config", help="Options file (dts-bundler.json / dts-bundler.yaml)")
    parser.add_argument("--name", help="Package name prefixed to every module id")
    parser.add_argument("--base-dir", dest="base_dir", help="Directory module ids are relative to")
    parser.add_argument("--out", help="Output .d.ts file")
    parser.add_argument("--main", help="Module id re-exported as the package itself")
    parser.add_argument("--exclude", action="append", help="Glob of files to leave out (repeatable)")
    parser.add_argument("--extern", action="append", help="Reference path to write at the top (repeatable)")
    parser.add_argument("--eol", choices=sorted(EOL_CHOICES), help="Line terminator")
    parser.add_argument("--indent", type=_indent, help="Indent unit: spaces count, 'tab' or a literal string")
    parser.add_argument("--target", help="Language level passed to the compiler")
    parser.add_argument("--tsc", help="TypeScript compiler command")
    parser.add_argument("--timeout", type=float, help="Seconds before the compiler run is abandoned")
    parser.add_argument("--project", help="tsconfig.json to use instead of <base-dir>/tsconfig.json")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", dest="log_file", help="Also log to this file")
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    overrides = {
        'base_dir': args.base_dir,
        'name': args.name,
        'out': args.out,
        'main': args.main,
        'files': args.files or None,
        'excludes': args.exclude,
        'externs': args.extern,
        'eol': EOL_CHOICES.get(args.eol),
        'indent': args.indent,
        'target': args.target,
        'tsc': args.tsc,
        'timeout': args.timeout,
        'project': args.project,
    }
    config_path = Path(args.config) if args.config else ConfigLoader.find(Path.cwd())

    tracker = ProgressTracker()
    try:
        options = load_config(config_path, **overrides)
        logging.debug(f"Options: {options.to_dict()}")
        tracker.mark_compiling()
        generate(options, send_message=tracker)
    except BundlerError as e:
        tracker.mark_failed(e.__class__.__name__)
        logging.error(e.message)
        return 1
    except OSError as e:
        tracker.mark_failed(e.__class__.__name__)
        logging.error(f"Bundling failed: {e}")
        return 1

    tracker.mark_completed(options.out)
    summary = tracker.get_summary()
    logging.info(
        f"Bundled {summary['processed']} files ({summary['excluded']} excluded) "
        f"in {summary['elapsed_seconds']:.2f}s"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
