"""
CLI entry point for the gerbdata-info command.

Parses one or more Gerber files and prints format, units, aperture and
function counts and the bounding box of each.
"""

import argparse
import logging
import sys

from gerbdata import config as cfg
from gerbdata.config import TRACE
from gerbdata.gerber.parser import GerberParser

logger = logging.getLogger(__name__)

LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gerbdata-info", description="Summarize RS-274X (Gerber) files")
    parser.add_argument("files", nargs="+", help="Gerber files to read")
    parser.add_argument(
        "--ignore-invalid",
        action="store_true",
        default=cfg.IGNORE_INVALID_DEFAULT,
        help="Tolerate unknown codes and parameters",
    )
    parser.add_argument(
        "--ignore-blank",
        action="store_true",
        default=cfg.IGNORE_BLANK_DEFAULT,
        help="Leave draws with closed apertures out of the bounding box",
    )
    parser.add_argument(
        "--allow-missing-opcode",
        action="store_true",
        help="Accept coordinate data without an operation code for any function",
    )

    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE"
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Set specific log level")
    return parser


def resolve_log_level(args) -> int:
    if args.log_level:
        if args.log_level == "TRACE":
            return TRACE
        return getattr(logging, args.log_level)
    if args.verbose >= 3:
        return TRACE
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    if args.quiet:
        return logging.ERROR
    if cfg.TRACE_ENABLED:
        return TRACE
    # GERBDATA_LOG_LEVEL, falling back to WARNING when unrecognized
    level = getattr(logging, cfg.LOG_LEVEL_DEFAULT, None)
    return level if isinstance(level, int) else logging.WARNING


def _fmt_number(value) -> str:
    return "-" if value is None else f"{value:.6f}"


def summarize(path: str, document) -> list[str]:
    status = document.get_status()
    fmt = status["format"]
    lx, by, rx, ty = document.bounding_box()
    return [
        f"{path}:",
        f"  format:     {fmt['zero']}/{fmt['coordinates']} {fmt['format']['integer']}.{fmt['format']['decimal']}",
        f"  units:      {status['mode']}",
        f"  apertures:  {status['apertures']}",
        f"  macros:     {status['macros']}",
        f"  functions:  {status['functions']}",
        f"  bounds:     ({_fmt_number(lx)}, {_fmt_number(by)}) - ({_fmt_number(rx)}, {_fmt_number(ty)})",
        f"  size:       {_fmt_number(document.width())} x {_fmt_number(document.height())}",
    ]


def main(argv=None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=resolve_log_level(args),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    status = 0
    for path in args.files:
        parser = GerberParser(
            ignore_invalid_codes=args.ignore_invalid,
            ignore_blank_apertures=args.ignore_blank,
            require_operation_code=False if args.allow_missing_opcode else None,
        )
        document = parser.parse(path)
        if document is None:
            print(f"{path}: {parser.error}", file=sys.stderr)
            status = 1
            continue
        print("\n".join(summarize(path, document)))
    return status


def main_entry():
    """Entry point for the gerbdata-info command."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
