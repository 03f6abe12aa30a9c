# ============================================================================
# SOURCEFILE: models.py
# RELPATH: asset_build_size_compare/src/sizecompare/models.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Core data models for artifacts, size deltas and snapshots
# ============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

# filename -> compressed size in bytes
SizeMap = Dict[str, int]

T = TypeVar("T")


def _as_int(value: Any) -> Any:
    """Turn integral floats (e.g. ``40.0`` from a hand-edited file) into ints."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class CompressionType(Enum):
    NONE = "none"
    GZIP = "gzip"
    BROTLI = "brotli"


class ArtifactKind(Enum):
    CHUNK = "chunk"
    ASSET = "asset"


@dataclass(frozen=True)
class Artifact:
    """
    A single output produced by the host build.

    Attributes:
        file_name: Output path relative to the build output directory
        content: Emitted code or asset source; text is measured as UTF-8
        kind: CHUNK for code chunks, ASSET for everything else
    """
    file_name: str
    content: Union[bytes, str]
    kind: ArtifactKind = ArtifactKind.ASSET

    def __post_init__(self) -> None:
        if not self.file_name:
            raise ValueError("Artifact file_name cannot be empty")
        if not isinstance(self.content, (bytes, str)):
            raise TypeError("Artifact content must be bytes or str")
        # Keep names in POSIX form so they line up with history entries
        object.__setattr__(self, "file_name", self.file_name.replace("\\", "/"))

    @property
    def is_chunk(self) -> bool:
        return self.kind is ArtifactKind.CHUNK

    def data(self) -> bytes:
        """Return the artifact content as bytes."""
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content


@dataclass(frozen=True)
class FileDelta:
    """
    Size change of one file between the baseline and the current build.

    ``diff`` is always ``size - previous``; it is derived, never passed in.
    """
    filename: str
    previous: int
    size: int
    diff: int = field(init=False)

    def __post_init__(self) -> None:
        if not self.filename:
            raise ValueError("FileDelta filename cannot be empty")
        for name in ("previous", "size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Invalid {name}: {value!r}. Must be non-negative integer")
        object.__setattr__(self, "diff", self.size - self.previous)

    @property
    def changed(self) -> bool:
        return self.diff != 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "previous": self.previous,
            "size": self.size,
            "diff": self.diff,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FileDelta":
        """Build a FileDelta from its persisted form; a stored ``diff`` is recomputed."""
        if not isinstance(data, Mapping):
            raise TypeError("file entry must be an object")
        return cls(
            filename=data["filename"],
            previous=_as_int(data.get("previous") or 0),
            size=_as_int(data.get("size") or 0),
        )


@dataclass(frozen=True)
class Snapshot:
    """
    One persisted measurement event.

    Attributes:
        timestamp: Milliseconds since the epoch at creation
        compression_type: Compression used for every size in ``files``
        compression_level: Level or quality used
        files: Per-file deltas in reconciliation order
    """
    timestamp: int
    compression_type: CompressionType
    compression_level: int
    files: Tuple[FileDelta, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise ValueError(f"Invalid timestamp: {self.timestamp!r}")
        if not isinstance(self.compression_type, CompressionType):
            object.__setattr__(self, "compression_type", CompressionType(self.compression_type))
        object.__setattr__(self, "files", tuple(self.files))

    @property
    def has_changes(self) -> bool:
        """True when at least one file changed size."""
        return any(delta.changed for delta in self.files)

    def size_map(self) -> SizeMap:
        return to_size_map(self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "compressionType": self.compression_type.value,
            "compressionLevel": self.compression_level,
            "files": [delta.to_dict() for delta in self.files],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        if not isinstance(data, Mapping):
            raise TypeError("snapshot must be an object")
        files = data.get("files") or []
        if not isinstance(files, list):
            raise TypeError("snapshot files must be a list")
        return cls(
            timestamp=_as_int(data["timestamp"]),
            compression_type=CompressionType(data.get("compressionType", "gzip")),
            compression_level=_as_int(data.get("compressionLevel", 6)),
            files=tuple(FileDelta.from_dict(entry) for entry in files),
        )


def to_size_map(files: Iterable[FileDelta]) -> SizeMap:
    """
    Convert deltas into a SizeMap of their current sizes.

    Zero-size entries are left out so empty artifacts never become part of
    a baseline.
    """
    result: SizeMap = {}
    for delta in files:
        if delta.size:
            result[delta.filename] = delta.size
    return result


class ReadStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    DISABLED = "disabled"


@dataclass(frozen=True)
class ReadResult(Generic[T]):
    """
    Outcome of a recoverable read.

    ``value`` holds the fallback (for history: an empty list) whenever the
    status is not OK, so callers can use it unconditionally.
    """
    status: ReadStatus
    value: T
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.OK

    @classmethod
    def success(cls, value: T) -> "ReadResult[T]":
        return cls(ReadStatus.OK, value)

    @classmethod
    def failure(cls, status: ReadStatus, fallback: T, error: Optional[Exception] = None) -> "ReadResult[T]":
        return cls(status, fallback, error)


def sort_newest_first(snapshots: Iterable[Snapshot]) -> List[Snapshot]:
    """Order snapshots by timestamp, newest first."""
    return sorted(snapshots, key=lambda snap: snap.timestamp, reverse=True)


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: None (core data structures)
# TESTS: tests/unit/test_models.py
# ============================================================================
