# src/combiner/utils/tokenizer.py
import logging
import threading
from enum import Enum
from typing import Dict, Union

import tiktoken

from combiner.errors import TokenizationError

logger = logging.getLogger(__name__)


class TokenizationScheme(str, Enum):
    O200K_BASE = "o200k_base"
    CL100K_BASE = "cl100k_base"
    P50K_BASE = "p50k_base"
    P50K_EDIT = "p50k_edit"
    R50K_BASE = "r50k_base"


DEFAULT_SCHEME = TokenizationScheme.CL100K_BASE

SCHEME_ALIASES: Dict[str, TokenizationScheme] = {
    "o200k": TokenizationScheme.O200K_BASE,
    "gpt-4o": TokenizationScheme.O200K_BASE,
    "cl100k": TokenizationScheme.CL100K_BASE,
    "gpt-4": TokenizationScheme.CL100K_BASE,
    "gpt-3.5-turbo": TokenizationScheme.CL100K_BASE,
    "p50k": TokenizationScheme.P50K_BASE,
    "codex": TokenizationScheme.P50K_BASE,
    "edit": TokenizationScheme.P50K_EDIT,
    "r50k": TokenizationScheme.R50K_BASE,
    "gpt2": TokenizationScheme.R50K_BASE,
    "gpt-3": TokenizationScheme.R50K_BASE,
}


def resolve_scheme(name: Union[str, TokenizationScheme, None]) -> TokenizationScheme:
    """
    Maps a scheme name or alias (case-insensitive) to a TokenizationScheme.
    Unknown names fall back to DEFAULT_SCHEME instead of raising.
    """
    if isinstance(name, TokenizationScheme):
        return name
    key = (name or "").strip().lower()
    try:
        return TokenizationScheme(key)
    except ValueError:
        pass
    if key in SCHEME_ALIASES:
        return SCHEME_ALIASES[key]
    logger.debug("Unknown tokenizer '%s', using %s", name, DEFAULT_SCHEME.value)
    return DEFAULT_SCHEME


class Tokenizer:
    """Read-only wrapper around a tiktoken encoding, safe to share across threads."""

    _encodings: Dict[TokenizationScheme, "tiktoken.Encoding"] = {}
    _lock = threading.Lock()

    def __init__(self, scheme: TokenizationScheme, encoding):
        self.scheme = scheme
        self.encoding = encoding

    @classmethod
    def get_encoding(cls, scheme: TokenizationScheme):
        with cls._lock:
            if scheme not in cls._encodings:
                try:
                    cls._encodings[scheme] = tiktoken.get_encoding(scheme.value)
                except Exception as e:
                    raise TokenizationError(scheme.value, e) from e
            return cls._encodings[scheme]

    @classmethod
    def for_scheme(cls, name: Union[str, TokenizationScheme, None]) -> "Tokenizer":
        scheme = resolve_scheme(name)
        return cls(scheme, cls.get_encoding(scheme))

    @classmethod
    def clear_cache(cls) -> None:
        with cls._lock:
            cls._encodings.clear()

    def count(self, text: str) -> int:
        """Counts tokens, letting special-token text like <|endoftext|> encode as such."""
        return len(self.encoding.encode(text, allowed_special="all"))
