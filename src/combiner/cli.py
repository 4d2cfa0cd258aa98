# src/combiner/cli.py
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from combiner.config import (
    EMIT_BUFFERED,
    WALK_SIMPLE,
    CombinerConfig,
    build_config,
)
from combiner.core.matcher import MATCH_MODES
from combiner.core.pipeline import Combiner
from combiner.errors import CombinerError
from combiner.report import TOP_FILES_TO_SHOW, print_report
from combiner.utils.tokenizer import TokenizationScheme

logger = logging.getLogger("combiner")


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="combiner",
        description="Recursively combine the text files of a directory into one file and count its tokens.",
    )
    parser.add_argument("-d", "--directory", type=str, default=os.getcwd(), help="Directory to traverse (default: cwd)")
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: <directory>/combiner_<directory name>.txt)",
    )
    parser.add_argument(
        "-i", "--ignore",
        dest="ignore_patterns",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Pattern of paths to ignore; repeatable",
    )
    parser.add_argument(
        "-I", "--include",
        dest="include_patterns",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Only combine paths matching a pattern; repeatable",
    )
    parser.add_argument(
        "-t", "--tokenizer",
        type=str,
        default=None,
        help=f"Tokenizer ({', '.join(s.value for s in TokenizationScheme)}; default: cl100k_base)",
    )
    parser.add_argument("-c", "--config", type=str, default=None, help="TOML config file (default: <directory>/combiner.toml)")
    parser.add_argument("--match-mode", choices=MATCH_MODES, default=None, help="How patterns are matched (default: glob)")
    parser.add_argument("--simple-walk", action="store_true", help="Do not honour .gitignore/.ignore/.combinerignore")
    parser.add_argument("--buffered", action="store_true", help="Write all records after processing finishes")
    parser.add_argument("--sort", action="store_true", help="Write records sorted by path (implies --buffered)")
    parser.add_argument("--include-hidden", action="store_true", help="Include hidden files and directories")
    parser.add_argument("-j", "--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    parser.add_argument("--top", type=int, default=TOP_FILES_TO_SHOW, help="Files to list by token count")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every processed and skipped file")
    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def config_from_args(args: argparse.Namespace) -> CombinerConfig:
    overrides = {
        "output_file": args.output,
        "ignore_patterns": args.ignore_patterns,
        "include_patterns": args.include_patterns,
        "tokenizer": args.tokenizer,
        "match_mode": args.match_mode,
        "walk_mode": WALK_SIMPLE if args.simple_walk else None,
        "emission": EMIT_BUFFERED if args.buffered else None,
        "sort_output": True if args.sort else None,
        "include_hidden": True if args.include_hidden else None,
        "workers": args.workers,
    }
    config_file = Path(args.config).resolve() if args.config else None
    return build_config(Path(args.directory), overrides, config_file)


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
        logger.debug("Directory: %s", config.directory)
        logger.debug("Output file: %s", config.output_file)
        logger.debug("Ignore patterns: %s", config.ignore_patterns)
        logger.debug("Include patterns: %s", config.include_patterns)

        combiner = Combiner(config)
        result = combiner.run()
        print_report(result, tokenizer=combiner.tokenizer.scheme.value, limit=args.top)
        return 0

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 1

    except CombinerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
