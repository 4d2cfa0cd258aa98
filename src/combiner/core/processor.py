# src/combiner/core/processor.py
from pathlib import Path
from typing import Optional

from combiner.errors import FileProcessingError
from combiner.models import ProcessedFile
from combiner.utils.tokenizer import Tokenizer


def process_file(path: Path, tokenizer: Tokenizer, display_path: Optional[str] = None) -> ProcessedFile:
    """
    Reads one file as strict UTF-8, counts its tokens and measures its size.
    Any read, decode or stat failure is raised as FileProcessingError.
    """
    name = display_path or str(path)
    try:
        content = path.read_bytes().decode("utf-8")
        byte_size = path.stat().st_size
    except (OSError, UnicodeDecodeError) as e:
        raise FileProcessingError(name, e) from e

    return ProcessedFile(
        content=content,
        token_count=tokenizer.count(content),
        byte_size=byte_size,
    )
