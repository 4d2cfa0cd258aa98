# src/combiner/config.py
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from combiner.errors import ConfigError

DEFAULT_OUTPUT_PREFIX = "combiner_"
DEFAULT_CONFIG_FILENAME = "combiner.toml"
DEFAULT_TOKENIZER = "cl100k_base"

DEFAULT_TEXT_EXTENSIONS = [
    "txt", "md", "rs", "toml", "json", "yaml", "yml", "py", "js", "ts",
    "html", "css", "sh", "bash", "xml", "svg", "cpp", "c", "h", "hpp",
    "go", "java", "jsx", "tsx", "rst", "ini", "cfg", "sql",
]

DEFAULT_IGNORE_PATTERNS = [
    ".git",
    "node_modules",
    "target",
    "venv",
    ".venv",
    "__pycache__",
    "dist",
    "build",
    ".vscode",
    ".idea",
    "*.log",
]

# Substring mode matches anywhere in the path, so directory names need their slash
DEFAULT_SUBSTRING_IGNORE_PATTERNS = [".git/", "node_modules/", "target/", "__pycache__/"]

WALK_IGNORE_FILES = "ignore-files"
WALK_SIMPLE = "simple"
WALK_MODES = (WALK_IGNORE_FILES, WALK_SIMPLE)

EMIT_IMMEDIATE = "immediate"
EMIT_BUFFERED = "buffered"
EMISSION_MODES = (EMIT_IMMEDIATE, EMIT_BUFFERED)


@dataclass
class CombinerConfig:
    """Everything the combine pipeline needs for one run."""
    directory: Path
    output_file: Path
    ignore_patterns: List[str] = field(default_factory=list)
    include_patterns: List[str] = field(default_factory=list)
    tokenizer: str = DEFAULT_TOKENIZER
    match_mode: str = "glob"
    walk_mode: str = WALK_IGNORE_FILES
    emission: str = EMIT_IMMEDIATE
    sort_output: bool = False
    include_hidden: bool = False
    workers: Optional[int] = None
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_TEXT_EXTENSIONS))
    output_prefix: str = DEFAULT_OUTPUT_PREFIX

    def __post_init__(self):
        self.directory = Path(self.directory).resolve()
        self.output_file = Path(self.output_file).resolve()

    @property
    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1


# key in TOML -> (CombinerConfig attribute, expected type)
_FILE_KEYS = {
    "output_file": ("output_file", str),
    "ignore_patterns": ("ignore_patterns", list),
    "include_patterns": ("include_patterns", list),
    "tokenization_method": ("tokenizer", str),
    "tokenizer": ("tokenizer", str),
    "match_mode": ("match_mode", str),
    "walk_mode": ("walk_mode", str),
    "emission": ("emission", str),
    "sort_output": ("sort_output", bool),
    "include_hidden": ("include_hidden", bool),
    "workers": ("workers", int),
    "extensions": ("extensions", list),
    "output_prefix": ("output_prefix", str),
}


def load_config_file(config_file: Path) -> Dict[str, Any]:
    """
    Reads a combiner TOML file and returns its values keyed by
    CombinerConfig attribute name. Missing keys are simply absent.
    """
    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{config_file}': {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in '{config_file}': {e}") from e

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in _FILE_KEYS:
            raise ConfigError(f"Unknown key '{key}' in '{config_file}'")
        attr, expected = _FILE_KEYS[key]
        # bool is a subclass of int; reject `workers = true`
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(
                f"'{key}' in '{config_file}' must be of type {expected.__name__}, "
                f"got {type(value).__name__}"
            )
        if expected is list and not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' in '{config_file}' must be a list of strings")
        values[attr] = value
    return values


def find_config_file(root_dir: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file '{explicit}' not found")
        return explicit
    candidate = root_dir / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def merge_ignore_patterns(*groups: Optional[Iterable[str]]) -> List[str]:
    """Concatenates pattern lists, dropping blanks and duplicates while keeping order."""
    merged: List[str] = []
    for group in groups:
        for pattern in group or []:
            pattern = pattern.strip()
            if pattern and pattern not in merged:
                merged.append(pattern)
    return merged


def get_default_output_name(root_dir: Path, prefix: str = DEFAULT_OUTPUT_PREFIX) -> str:
    """Generates the output filename from the scanned directory's name."""
    folder_name = root_dir.name or "project"
    safe_name = folder_name.replace(" ", "_")
    return f"{prefix}{safe_name}.txt"


def determine_output_file(root_dir: Path, output: Optional[str], prefix: str) -> Path:
    if output:
        return Path(output).expanduser().resolve()
    return root_dir / get_default_output_name(root_dir, prefix)


def validate_config(config: CombinerConfig) -> CombinerConfig:
    if not config.directory.is_dir():
        raise ConfigError(f"Invalid directory '{config.directory}'")
    choices = {
        "match_mode": ("glob", "substring"),
        "walk_mode": WALK_MODES,
        "emission": EMISSION_MODES,
    }
    for name, allowed in choices.items():
        value = getattr(config, name)
        if value not in allowed:
            raise ConfigError(f"Invalid {name} '{value}', expected one of {', '.join(allowed)}")
    if config.workers is not None and config.workers < 1:
        raise ConfigError(f"workers must be at least 1, got {config.workers}")
    if not config.output_prefix:
        raise ConfigError("output_prefix must not be empty")
    return config


def build_config(
    directory: Path,
    overrides: Dict[str, Any],
    config_file: Optional[Path] = None,
) -> CombinerConfig:
    """
    Resolves the final configuration. Precedence is overrides (CLI) >
    config file > defaults; ignore patterns from every source are merged.
    """
    root_dir = Path(directory).resolve()
    config_path = find_config_file(root_dir, config_file)
    file_values = load_config_file(config_path) if config_path else {}

    known = {f.name for f in fields(CombinerConfig)}
    values = {k: v for k, v in file_values.items() if k in known}
    values.update({k: v for k, v in overrides.items() if v is not None and k in known})

    prefix = values.get("output_prefix", DEFAULT_OUTPUT_PREFIX)
    output_file = determine_output_file(root_dir, values.pop("output_file", None), prefix)

    if values.get("match_mode", "glob") == "substring":
        defaults = DEFAULT_SUBSTRING_IGNORE_PATTERNS
    else:
        defaults = DEFAULT_IGNORE_PATTERNS
    values["ignore_patterns"] = merge_ignore_patterns(
        overrides.get("ignore_patterns"),
        file_values.get("ignore_patterns"),
        defaults,
        [config_path.name] if config_path else None,
    )
    values["include_patterns"] = merge_ignore_patterns(
        overrides.get("include_patterns") or file_values.get("include_patterns")
    )
    values.pop("directory", None)

    config = CombinerConfig(directory=root_dir, output_file=output_file, **values)
    return validate_config(config)

