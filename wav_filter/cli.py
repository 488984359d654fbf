from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from . import __version__
from .config import FilterSettings, find_config, load_defaults
from .models import WavFilterError
from .pipeline import FilterPipeline

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

C_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",  # Cyan
    logging.INFO: "\033[37m",  # Light gray
    logging.WARNING: "\033[33m",  # Yellow
    logging.ERROR: "\033[31m",  # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}

logger = logging.getLogger(__name__)


class ShortPathFormatter(logging.Formatter):
    def __init__(self, fmt: str, roots: list[Path]) -> None:
        super().__init__(fmt)
        self.roots = [str(root) for root in roots if root]

    def _shorten(self, message: str) -> str:
        for root in self.roots:
            if not message:
                break
            message = message.replace(f"{root}/", "")
        return message

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        # Fatal errors keep the full path of the failing file.
        if record.levelno >= logging.ERROR:
            return message
        return self._shorten(message)


class ColorFormatter(ShortPathFormatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if not color:
            return message
        return f"{color}{message}{C_RESET}"


class WarningBufferHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.records: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.records.append(msg)


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {parsed}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wav-filter",
        description="Copy WAV files whose duration lies within a range, preserving relative paths",
    )
    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        help="Input directory containing WAV files (processed recursively)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output directory for filtered WAV files (relative paths are preserved)",
    )
    parser.add_argument(
        "-m",
        "--min-length",
        type=_non_negative_int,
        help="Minimum length in milliseconds (default: 0)",
    )
    parser.add_argument(
        "-M",
        "--max-length",
        type=_non_negative_int,
        help="Maximum length in milliseconds (default: no limit)",
    )
    parser.add_argument("--config", type=Path, help="YAML file with default settings")
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Log and skip files that cannot be read or copied instead of aborting",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report files that would be copied",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def collect_settings(args: argparse.Namespace) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    config_path = find_config(args.config)
    if config_path:
        values.update(load_defaults(config_path))
    overrides = {
        "input_root": args.input,
        "output_root": args.output,
        "min_length_ms": args.min_length,
        "max_length_ms": args.max_length,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    if args.skip_errors:
        values["fail_fast"] = False
    if args.dry_run:
        values["dry_run"] = True
    return values


def _configure_logging(level_name: str, roots: list[Path]) -> WarningBufferHandler:
    log_level = getattr(logging, level_name.upper(), logging.WARNING)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ColorFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(stream_handler)

    warn_buffer = WarningBufferHandler()
    warn_buffer.setFormatter(ShortPathFormatter(LOG_FORMAT, roots))
    root_logger.addHandler(warn_buffer)

    logging.getLogger("mutagen").setLevel(logging.WARNING)
    return warn_buffer


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        values = collect_settings(args)
    except WavFilterError as exc:
        raise SystemExit(str(exc))
    missing = [
        flag
        for key, flag in (("input_root", "-i/--input"), ("output_root", "-o/--output"))
        if key not in values
    ]
    if missing:
        parser.error(f"the following arguments are required: {', '.join(missing)}")
    try:
        settings = FilterSettings.build(values)
    except WavFilterError as exc:
        raise SystemExit(str(exc))

    warn_buffer = _configure_logging(args.log_level, [settings.input_root])
    try:
        settings.validate_input()
        result = FilterPipeline(settings).run()
    except WavFilterError as exc:
        logger.error("%s", exc)
        raise SystemExit(1)

    if settings.dry_run:
        print(f"Would copy {result.copied} WAV files to {settings.output_root}")
    else:
        print(f"Filtered and copied {result.copied} WAV files to {settings.output_root}")
    if result.failed:
        logger.warning("%d file(s) could not be processed", result.failed)
    if warn_buffer.records:
        print("\n\033[33mWarnings/Errors summary:\033[0m")
        for line in warn_buffer.records:
            print(f" - {line}")
