# UI Duplicates - Find near-duplicate components, hooks and functions
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Configuration file support for uidup.

Looks for .uiduprc or .uidup.toml in the analyzed directory or any parent.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

from .chunker import DEFAULT_MAX_LINES, DEFAULT_MIN_LINES, SPLIT_STRATEGIES
from .duplicate_finder import DEFAULT_GROUP_THRESHOLD, DEFAULT_QUERY_THRESHOLD, DEFAULT_TOP
from .embedder import DEFAULT_MAX_CHARS
from .indexer import DEFAULT_MAX_CHUNKS
from .models import ChunkKind


CONFIG_NAMES = [".uiduprc", ".uidup.toml"]
CONFIG_SECTION = "duplicates"
LIST_KEYS = ("exclude", "exclude_paths", "focus")


@dataclass
class Settings:
    """Effective options for one run, with documented defaults."""

    threshold: float = DEFAULT_GROUP_THRESHOLD
    query_threshold: float = DEFAULT_QUERY_THRESHOLD
    min_group: int = 2
    kind: Optional[str] = None
    exclude: List[str] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    focus: List[str] = field(default_factory=list)
    min_lines: int = DEFAULT_MIN_LINES
    max_lines: int = DEFAULT_MAX_LINES
    split: str = "auto"
    top: int = DEFAULT_TOP
    max_chunks: int = DEFAULT_MAX_CHUNKS
    max_chars: int = DEFAULT_MAX_CHARS
    model: Optional[str] = None
    verbose: bool = False


def validate_settings(settings: Settings) -> Settings:
    """
    Reject out-of-range options.

    Raises:
        ValueError: Naming the first offending option
    """
    for name in ("threshold", "query_threshold"):
        value = getattr(settings, name)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name} must be between 0 and 1, got {value}")

    if settings.min_group < 1:
        raise ValueError(f"min_group must be at least 1, got {settings.min_group}")
    if settings.min_lines < 1:
        raise ValueError(f"min_lines must be at least 1, got {settings.min_lines}")
    if settings.max_lines < settings.min_lines:
        raise ValueError(
            f"max_lines ({settings.max_lines}) must not be below "
            f"min_lines ({settings.min_lines})"
        )
    if settings.max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {settings.max_chars}")
    if settings.top < 1:
        raise ValueError(f"top must be at least 1, got {settings.top}")
    if settings.max_chunks < 1:
        raise ValueError(f"max_chunks must be at least 1, got {settings.max_chunks}")
    if settings.split not in SPLIT_STRATEGIES:
        raise ValueError(
            f"split must be one of {', '.join(SPLIT_STRATEGIES)}, got {settings.split!r}"
        )
    if settings.kind is not None:
        try:
            ChunkKind(settings.kind)
        except ValueError:
            valid = ", ".join(k.value for k in ChunkKind)
            raise ValueError(f"kind must be one of {valid}, got {settings.kind!r}")

    return settings


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for .uiduprc or .uidup.toml in start_path and parent directories.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent

    while True:
        for name in CONFIG_NAMES:
            config_path = current / name
            if config_path.is_file():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load the [duplicates] table from the nearest config file.

    Returns an empty dict if no config file is found or it cannot be read.

    Example config file (.uiduprc or .uidup.toml):
        [duplicates]
        threshold = 0.88
        min_group = 2
        kind = "component"
        exclude = ["**/*.stories.tsx"]
        exclude_paths = ["__generated__"]
        focus = ["src/components/*"]
        min_lines = 5
        max_lines = 120
        split = "auto"
        top = 10
        max_chunks = 15000
        model = "/path/to/embedding.gguf"
        verbose = true
    """
    config_path = find_config_file(path)

    if config_path is None:
        return {}

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # File unreadable or invalid TOML - return empty config
        return {}

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        return {}

    # exclude = "*.stories.tsx" means a one-pattern list
    for key in LIST_KEYS:
        if isinstance(section.get(key), str):
            section[key] = [section[key]]
    return section
