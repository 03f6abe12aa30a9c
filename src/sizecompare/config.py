# ============================================================================
# FILE: config.py
# RELPATH: asset_build_size_compare/src/sizecompare/config.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Immutable engine options merged from defaults and overrides
# ============================================================================

"""
Configuration for Asset Build Size Compare.

Options are merged once from ``DEFAULT_OPTIONS`` and caller overrides and
validated on construction. Both the camelCase keys used by build-tool
configs (``compressionLevel``) and snake_case keys are accepted.
"""

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from sizecompare.exceptions import ConfigLoadError, ConfigValidationError
from sizecompare.models import CompressionType, Snapshot

TOOL_NAME = "asset-build-size-compare"

# Inclusive (min, max) level per compression type. ``none`` ignores the level.
LEVEL_RANGES = {
    CompressionType.GZIP: (1, 9),
    CompressionType.BROTLI: (1, 11),
}

# Level 6 is the common server default for both gzip and brotli.
DEFAULT_OPTIONS: Dict[str, Any] = {
    "compression": "gzip",
    "compression_level": 6,
    "pattern": "**/*.{mjs,js,jsx,css,html}",
    "exclude": "",
    "filename": "",
    "write_file": True,
    "column_width": 20,
    "on_save": None,
}

# Accepted spellings for each option
KEY_ALIASES = {
    "compressionLevel": "compression_level",
    "writeFile": "write_file",
    "columnWidth": "column_width",
    "save": "on_save",
    "onSave": "on_save",
}


def default_filename(compression: Union[str, CompressionType]) -> str:
    """Return the history filename used when none is configured."""
    value = compression.value if isinstance(compression, CompressionType) else compression
    return f".{TOOL_NAME}-data-{value}.json"


@dataclass(frozen=True)
class SizeOptions:
    """
    Options for one engine instance.

    Attributes:
        compression: Algorithm used to measure artifacts
        compression_level: gzip level (1-9) or brotli quality (1-11)
        pattern: Include glob
        exclude: Exclude glob; empty string disables exclusion
        filename: History file location, relative to the working directory
        write_file: Whether history is read from and written to disk
        column_width: Minimum name column width in the console report
        on_save: Optional callback receiving every new Snapshot; may be async
    """
    compression: CompressionType = CompressionType.GZIP
    compression_level: int = 6
    pattern: str = DEFAULT_OPTIONS["pattern"]
    exclude: str = ""
    filename: str = ""
    write_file: bool = True
    column_width: int = 20
    on_save: Optional[Callable[[Snapshot], Union[None, Awaitable[None]]]] = None

    def __post_init__(self) -> None:
        self._validate_compression()
        self._validate_level()
        self._validate_patterns()
        self._validate_flags()
        if not self.filename:
            object.__setattr__(self, "filename", default_filename(self.compression))

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping[str, Any]] = None) -> "SizeOptions":
        """
        Merge overrides onto the defaults.

        Args:
            overrides: Option values keyed by camelCase or snake_case name

        Returns:
            Validated SizeOptions

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        merged = dict(DEFAULT_OPTIONS)
        for key, value in (overrides or {}).items():
            name = KEY_ALIASES.get(key, key)
            if name not in DEFAULT_OPTIONS:
                raise ConfigValidationError(key, value, "Unknown option")
            merged[name] = value
        if merged["exclude"] is None:
            merged["exclude"] = ""
        if merged["filename"] is None:
            merged["filename"] = ""
        return cls(**merged)

    def with_overrides(self, **changes: Any) -> "SizeOptions":
        """Return a copy with some options replaced and re-validated."""
        if "compression" in changes and "filename" not in changes:
            # A defaulted filename follows the compression type
            if self.filename == default_filename(self.compression):
                changes["filename"] = ""
        return replace(self, **changes)

    def history_path(self, cwd: Optional[Path] = None) -> Path:
        """Resolve the history file against ``cwd`` (default: process cwd)."""
        path = Path(self.filename)
        if path.is_absolute():
            return path
        return (Path(cwd) if cwd else Path.cwd()) / path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compression": self.compression.value,
            "compressionLevel": self.compression_level,
            "pattern": self.pattern,
            "exclude": self.exclude,
            "filename": self.filename,
            "writeFile": self.write_file,
            "columnWidth": self.column_width,
        }

    # ------------------------------------------------------------------
    # validation
    # ------------------------------------------------------------------

    def _validate_compression(self) -> None:
        value = self.compression
        if isinstance(value, CompressionType):
            return
        try:
            object.__setattr__(self, "compression", CompressionType(str(value).lower()))
        except ValueError:
            valid = [c.value for c in CompressionType]
            raise ConfigValidationError(
                "compression",
                value,
                f"Must be one of: {', '.join(valid)}"
            )

    def _validate_level(self) -> None:
        value = self.compression_level
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError("compressionLevel", value, "Must be an integer")
        bounds = LEVEL_RANGES.get(self.compression)
        if bounds is None:
            return
        low, high = bounds
        if not low <= value <= high:
            raise ConfigValidationError(
                "compressionLevel",
                value,
                f"Must be between {low} and {high} for {self.compression.value}"
            )

    def _validate_patterns(self) -> None:
        if not isinstance(self.pattern, str) or not self.pattern.strip():
            raise ConfigValidationError("pattern", self.pattern, "Must be a non-empty glob string")
        if not isinstance(self.exclude, str):
            raise ConfigValidationError("exclude", self.exclude, "Must be a glob string")
        if not isinstance(self.filename, (str, Path)):
            raise ConfigValidationError("filename", self.filename, "Must be a path string")
        object.__setattr__(self, "filename", str(self.filename))

    def _validate_flags(self) -> None:
        if not isinstance(self.write_file, bool):
            raise ConfigValidationError("writeFile", self.write_file, "Must be true or false")
        width = self.column_width
        if isinstance(width, bool) or not isinstance(width, int) or width < 0:
            raise ConfigValidationError("columnWidth", width, "Must be a non-negative integer")
        if self.on_save is not None and not callable(self.on_save):
            raise ConfigValidationError("save", self.on_save, "Must be callable")


def load_options(config_file: Union[str, Path], **overrides: Any) -> SizeOptions:
    """
    Load options from a JSON config file.

    Keyword overrides win over values from the file.

    Raises:
        ConfigLoadError: If the file cannot be read or is not a JSON object
        ConfigValidationError: If any option is invalid
    """
    path = Path(config_file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigLoadError(str(path), "File not found")
    except json.JSONDecodeError as e:
        raise ConfigLoadError(str(path), f"Invalid JSON: {e}")
    except OSError as e:
        raise ConfigLoadError(str(path), str(e))

    if not isinstance(data, dict):
        raise ConfigLoadError(str(path), "Top-level value must be an object")

    data.update(overrides)
    return SizeOptions.from_mapping(data)


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: exceptions.py, models.py
# TESTS: tests/unit/test_config.py
# ============================================================================
