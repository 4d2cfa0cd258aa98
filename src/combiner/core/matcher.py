# src/combiner/core/matcher.py
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import pathspec
from pathspec.patterns.gitwildmatch import GitWildMatchPatternError

logger = logging.getLogger(__name__)

GLOB = "glob"
SUBSTRING = "substring"
MATCH_MODES = (GLOB, SUBSTRING)


class PatternMatcher(ABC):
    """Decides whether a single ignore/include pattern matches a relative path."""

    @abstractmethod
    def matches(self, pattern: str, path: str) -> bool:
        ...


class SubstringMatcher(PatternMatcher):
    def matches(self, pattern: str, path: str) -> bool:
        return pattern in path


class GlobMatcher(PatternMatcher):
    """
    gitignore-style globbing (*, ?, [...], **). A pattern without a slash
    matches at any depth, and a matched directory takes everything below
    it, so 'node_modules' also rejects 'node_modules/pkg/index.js'.
    """

    def __init__(self):
        self._compiled: Dict[str, Optional[pathspec.PathSpec]] = {}
        self._lock = threading.Lock()

    def _compile(self, pattern: str) -> Optional[pathspec.PathSpec]:
        with self._lock:
            if pattern not in self._compiled:
                try:
                    self._compiled[pattern] = pathspec.PathSpec.from_lines("gitwildmatch", [pattern])
                except GitWildMatchPatternError as e:
                    logger.warning("Ignoring malformed pattern '%s': %s", pattern, e)
                    self._compiled[pattern] = None
            return self._compiled[pattern]

    def matches(self, pattern: str, path: str) -> bool:
        spec = self._compile(pattern)
        if spec is None:
            return False
        return spec.match_file(path.replace("\\", "/"))


def get_matcher(mode: str) -> PatternMatcher:
    if mode == GLOB:
        return GlobMatcher()
    if mode == SUBSTRING:
        return SubstringMatcher()
    raise ValueError(f"Unknown match mode '{mode}', expected one of {', '.join(MATCH_MODES)}")
