"""Command-line interface for external shuffle."""

import argparse
import logging
import sys

from external_shuffle.errors import ConfigurationError, ShuffleError
from external_shuffle.partition.types import DEFAULT_MAX_SPILL_UNITS
from external_shuffle.shuffler import main_shuffle
from external_shuffle.shuffler.shuffle import validate_encoding

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging to write to stderr."""
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="external-shuffle",
        description="Shuffle the lines of a file that may not fit in memory.",
    )

    parser.add_argument("input_file", help="Path to the input text file")
    parser.add_argument("output_file", help="Path to write the shuffled lines to")

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (same as --log-level DEBUG)",
    )

    parser.add_argument(
        "-t",
        "--max-spill-units",
        type=int,
        default=DEFAULT_MAX_SPILL_UNITS,
        help=f"Upper bound on the number of temporary files (default: {DEFAULT_MAX_SPILL_UNITS})",
    )

    parser.add_argument(
        "-c",
        "--charset",
        default="utf-8",
        help="Character encoding of the input and output (default: utf-8)",
    )

    parser.add_argument(
        "-z",
        "--gzip",
        action="store_true",
        help="Compress temporary files with gzip",
    )

    parser.add_argument(
        "-H",
        "--header",
        type=int,
        default=0,
        help="Number of leading header lines to drop (default: 0)",
    )

    parser.add_argument(
        "-s",
        "--store",
        default=None,
        help="Directory to hold temporary files (default: system temp dir)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible shuffle",
    )

    parser.add_argument(
        "--append",
        action="store_true",
        help="Append to the output file instead of overwriting it",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else getattr(logging, args.log_level)
    configure_logging(log_level)

    if args.max_spill_units <= 0:
        parser.error(f"--max-spill-units must be positive, got {args.max_spill_units}")
    if args.header < 0:
        parser.error(f"--header must not be negative, got {args.header}")
    try:
        validate_encoding(args.charset)
    except ConfigurationError:
        parser.error(f"unknown charset: {args.charset}")

    try:
        main_shuffle(
            args.input_file,
            args.output_file,
            max_spill_units=args.max_spill_units,
            header_lines=args.header,
            compress=args.gzip,
            encoding=args.charset,
            tmp_dir=args.store,
            seed=args.seed,
            append=args.append,
        )
    except (ShuffleError, OSError, UnicodeError) as exc:
        logger.error("Shuffle failed: %s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
