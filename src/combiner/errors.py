# src/combiner/errors.py
from pathlib import Path
from typing import Optional, Union


class CombinerError(Exception):
    """Base exception for combiner errors."""


class ConfigError(CombinerError):
    """Invalid configuration file or option values."""


class TokenizationError(CombinerError):
    """The selected tokenizer could not be constructed."""

    def __init__(self, scheme: str, cause: Optional[BaseException] = None):
        self.scheme = scheme
        self.cause = cause
        message = f"Failed to load tokenizer '{scheme}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class OutputError(CombinerError):
    """The output destination cannot be created or written."""

    def __init__(self, path: Union[str, Path], cause: Optional[BaseException] = None):
        self.path = str(path)
        self.cause = cause
        message = f"Cannot write output file '{self.path}'"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class FileProcessingError(CombinerError):
    """A single file could not be read, decoded or measured."""

    def __init__(self, path: Union[str, Path], cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Failed to process file {self.path}: {self.reason}")

    @property
    def reason(self) -> str:
        if isinstance(self.cause, UnicodeDecodeError):
            return "not valid UTF-8"
        if isinstance(self.cause, OSError) and self.cause.strerror:
            return self.cause.strerror
        return str(self.cause) or type(self.cause).__name__
