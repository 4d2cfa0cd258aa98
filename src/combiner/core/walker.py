# src/combiner/core/walker.py
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Optional, Tuple

import pathspec

from combiner.config import WALK_IGNORE_FILES, WALK_SIMPLE
from combiner.core.ignore import load_ignore_spec
from combiner.models import Entry

logger = logging.getLogger(__name__)


def _log_walk_error(error: OSError) -> None:
    logger.warning("Skipping %s: %s", error.filename or "<unknown>", error.strerror or error)


class Walker:
    """
    Lazily yields every directory and file below root_dir, depth first.
    The output file (or anything resolving to it) is never yielded; any
    other filtering is left to subclasses and to the admission filter.
    """

    def __init__(self, root_dir: Path, output_file: Optional[Path] = None):
        self.root_dir = Path(root_dir).resolve()
        self.output_file = Path(output_file).resolve() if output_file else None

    def _enter_dir(self, dir_abs_path: Path, rel_dir: str) -> None:
        pass

    def _prune_dir(self, rel_path: str) -> bool:
        return False

    def _skip_file(self, rel_path: str) -> bool:
        return False

    def _is_output(self, path: Path) -> bool:
        if self.output_file is None:
            return False
        if path == self.output_file:
            return True
        # Symlinks pointing at the output would feed the artifact back into itself
        return path.is_symlink() and path.resolve() == self.output_file

    def walk(self) -> Iterator[Entry]:
        # os.walk lets us edit dirs in place so pruned directories are never entered
        for root, dirs, files in os.walk(self.root_dir, onerror=_log_walk_error):
            root_path = Path(root)
            rel_root = root_path.relative_to(self.root_dir).as_posix()
            self._enter_dir(root_path, "" if rel_root == "." else rel_root)
            dirs.sort()
            files.sort()

            for d in list(dirs):
                dir_abs_path = root_path / d
                dir_rel_path = dir_abs_path.relative_to(self.root_dir).as_posix()
                if self._prune_dir(dir_rel_path):
                    dirs.remove(d)
                    continue
                yield Entry(path=dir_abs_path, rel_path=dir_rel_path, is_dir=True)

            for f in files:
                file_abs_path = root_path / f
                if self._is_output(file_abs_path):
                    continue
                rel_path = file_abs_path.relative_to(self.root_dir).as_posix()
                if self._skip_file(rel_path):
                    continue
                yield Entry(path=file_abs_path, rel_path=rel_path)


class SimpleWalker(Walker):
    """Unfiltered recursive descent."""


class IgnoreFileWalker(Walker):
    """
    Honours .gitignore/.ignore/.combinerignore in every directory it enters,
    each file's rules applying relative to its own directory, and never
    enters .git.
    """

    def __init__(self, root_dir: Path, output_file: Optional[Path] = None):
        super().__init__(root_dir, output_file)
        self._specs: Dict[str, pathspec.PathSpec] = {}

    def _enter_dir(self, dir_abs_path: Path, rel_dir: str) -> None:
        spec = load_ignore_spec(dir_abs_path)
        if len(spec) > 0:
            self._specs[rel_dir] = spec

    def _applicable_specs(self, rel_path: str) -> List[Tuple[str, pathspec.PathSpec]]:
        bases = []
        for parent in reversed(PurePosixPath(rel_path).parents):
            base = "" if str(parent) == "." else parent.as_posix()
            if base in self._specs:
                bases.append((base, self._specs[base]))
        return bases

    def _is_ignored(self, rel_path: str, suffix: str = "") -> bool:
        for base, spec in self._applicable_specs(rel_path):
            sub_path = rel_path[len(base) + 1:] if base else rel_path
            if spec.match_file(sub_path + suffix):
                return True
        return False

    def _prune_dir(self, rel_path: str) -> bool:
        if PurePosixPath(rel_path).name == ".git":
            return True
        # A trailing slash lets "build/" style rules match the directory itself
        return self._is_ignored(rel_path, "/")

    def _skip_file(self, rel_path: str) -> bool:
        return self._is_ignored(rel_path)


def get_walker(mode: str, root_dir: Path, output_file: Optional[Path] = None) -> Walker:
    if mode == WALK_IGNORE_FILES:
        return IgnoreFileWalker(root_dir, output_file)
    if mode == WALK_SIMPLE:
        return SimpleWalker(root_dir, output_file)
    raise ValueError(f"Unknown walk mode '{mode}'")
