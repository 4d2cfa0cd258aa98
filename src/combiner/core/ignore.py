# src/combiner/core/ignore.py
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILENAMES = (".gitignore", ".ignore", ".combinerignore")


def read_ignore_lines(ignore_file: Path) -> List[str]:
    try:
        with open(ignore_file, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", ignore_file, e)
        return []


def load_ignore_spec(
    root_dir: Path,
    filenames: Iterable[str] = IGNORE_FILENAMES,
    extra_patterns: Optional[List[str]] = None,
) -> pathspec.PathSpec:
    """
    Builds one gitwildmatch PathSpec from the ignore files found at the
    root, plus any extra patterns.
    """
    lines: List[str] = []
    for name in filenames:
        ignore_file = root_dir / name
        if ignore_file.is_file():
            lines.extend(read_ignore_lines(ignore_file))

    if extra_patterns:
        lines.extend(extra_patterns)

    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", lines)
    except Exception as e:
        # One bad line would otherwise discard every rule in the file
        logger.warning("Error parsing ignore rules in %s: %s", root_dir, e)
        return _load_valid_lines(lines)


def _load_valid_lines(lines: List[str]) -> pathspec.PathSpec:
    valid = []
    for line in lines:
        try:
            pathspec.PathSpec.from_lines("gitwildmatch", [line])
        except Exception as e:
            logger.warning("Skipping ignore rule %r: %s", line, e)
            continue
        valid.append(line)
    return pathspec.PathSpec.from_lines("gitwildmatch", valid)
