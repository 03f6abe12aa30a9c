# ============================================================================
# SOURCEFILE: store.py
# RELPATH: asset_build_size_compare/src/sizecompare/store.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Snapshot history persistence and baseline loading
# ============================================================================

"""
Snapshot Store.

The history file is a JSON array of snapshots, newest first. Reading it
never fails: a missing, unreadable or malformed file is reported through a
``ReadResult`` and treated as empty history. Single entries that do not
parse are skipped when reading and written back unchanged when a new
snapshot is prepended. Writing failures are fatal.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from sizecompare.compression import measure_async
from sizecompare.config import SizeOptions
from sizecompare.exceptions import ArtifactReadError, HistoryReadError, HistoryWriteError
from sizecompare.logging import StructuredLogger, get_logger
from sizecompare.models import (
    ReadResult,
    ReadStatus,
    SizeMap,
    Snapshot,
    sort_newest_first,
)
from sizecompare.reconcile import changed_files
from sizecompare.selector import ArtifactSelector


def read_artifact(path: Path) -> bytes:
    """
    Read one artifact from disk.

    Raises:
        ArtifactReadError: If the file cannot be read
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ArtifactReadError(str(path), e.strerror or str(e))


def discover_files(directory: Path) -> List[str]:
    """
    List files below ``directory`` as sorted POSIX paths relative to it.

    A missing directory yields an empty list.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []
    names = []
    for path in directory.rglob("*"):
        if path.is_file():
            names.append(path.relative_to(directory).as_posix())
    return sorted(names)


class SnapshotStore:
    """Loads baselines from and appends snapshots to one history file."""

    def __init__(self,
                 path: Union[str, Path],
                 options: SizeOptions,
                 logger: Optional[StructuredLogger] = None):
        """
        Initialize store.

        Args:
            path: History file location
            options: Engine options (compression settings, write_file)
            logger: Structured logger (defaults to the global one)
        """
        self.path = Path(path)
        self.options = options
        self.logger = logger or get_logger()

    # ------------------------------------------------------------------
    # reading
    # ------------------------------------------------------------------

    def _load_entries(self) -> ReadResult[List[Any]]:
        """Read the history file as a raw JSON array."""
        if not self.options.write_file:
            return ReadResult.failure(ReadStatus.DISABLED, [])

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            error = HistoryReadError(str(self.path), e.strerror or str(e))
            return ReadResult.failure(ReadStatus.NOT_FOUND, [], error)
        except UnicodeDecodeError as e:
            return ReadResult.failure(ReadStatus.PARSE_ERROR, [], HistoryReadError(str(self.path), str(e)))

        try:
            data = json.loads(text)
        except ValueError as e:
            return ReadResult.failure(ReadStatus.PARSE_ERROR, [], HistoryReadError(str(self.path), f"Invalid JSON: {e}"))
        if not isinstance(data, list):
            error = HistoryReadError(str(self.path), "history must be a JSON array")
            return ReadResult.failure(ReadStatus.PARSE_ERROR, [], error)
        return ReadResult.success(data)

    def _parse_entries(self, entries: List[Any]) -> Tuple[List[Snapshot], List[Any]]:
        """
        Parse each stored snapshot on its own.

        Returns:
            (snapshots newest first, raw entries that could not be parsed)
        """
        snapshots: List[Snapshot] = []
        rejected: List[Any] = []
        for index, entry in enumerate(entries):
            try:
                snapshots.append(Snapshot.from_dict(entry))
            except (ValueError, TypeError, KeyError) as e:
                rejected.append(entry)
                self.logger.log_read_degraded(f"{self.path}[{index}]", f"{type(e).__name__}: {e}")
        return sort_newest_first(snapshots), rejected

    def read_history(self) -> ReadResult[List[Snapshot]]:
        """
        Read the persisted history, newest first.

        Stored order is not trusted; snapshots are re-sorted by timestamp.
        A file that is not a JSON array reads as empty. Inside a valid array,
        entries that do not describe a snapshot are skipped and logged; the
        status stays OK and ``error`` says how many were skipped. When
        writing is disabled the file is not consulted at all.
        """
        raw = self._load_entries()
        if not raw.ok:
            return ReadResult.failure(raw.status, [], raw.error)

        snapshots, rejected = self._parse_entries(raw.value)
        error = None
        if rejected:
            error = HistoryReadError(str(self.path), f"skipped {len(rejected)} malformed snapshot(s)")
        return ReadResult(ReadStatus.OK, snapshots, error)

    def latest(self) -> Optional[Snapshot]:
        history = self.read_history().value
        return history[0] if history else None

    async def load_baseline(self, output_dir: Optional[Union[str, Path]], selector: ArtifactSelector) -> SizeMap:
        """
        Return the SizeMap to compare the current build against.

        The newest stored snapshot wins. Without usable history the output
        directory is scanned and every selected file measured; files that
        cannot be read are left out. With no output directory the baseline
        is empty.
        """
        result = await asyncio.to_thread(self.read_history)
        if result.ok and result.value:
            baseline = result.value[0].size_map()
            self.logger.log_baseline_loaded("history", len(baseline), result.status.value)
            return baseline

        if output_dir is None:
            baseline: SizeMap = {}
            source = "empty"
        else:
            baseline = await self.scan(output_dir, selector)
            source = "scan"
        self.logger.log_baseline_loaded(source, len(baseline), result.status.value)
        return baseline

    async def scan(self, directory: Union[str, Path], selector: ArtifactSelector) -> SizeMap:
        """Measure every selected file below ``directory`` concurrently."""
        directory = Path(directory)
        names = selector.select(await asyncio.to_thread(discover_files, directory))
        sizes = await asyncio.gather(*(self._measure_file(directory / name, name) for name in names))
        return {name: size for name, size in zip(names, sizes) if size is not None}

    async def _measure_file(self, path: Path, name: str) -> Optional[int]:
        try:
            data = await asyncio.to_thread(read_artifact, path)
        except ArtifactReadError as e:
            self.logger.log_read_degraded(name, e.reason)
            return None
        size = await measure_async(data, self.options.compression, self.options.compression_level)
        self.logger.log_file_measured(name, len(data), size, self.options.compression.value)
        return size

    # ------------------------------------------------------------------
    # writing
    # ------------------------------------------------------------------

    def persist(self, snapshot: Snapshot) -> bool:
        """
        Prepend ``snapshot`` to the history file.

        Nothing happens when no file changed size, or when writing is
        disabled. Stored entries that cannot be parsed are written back
        untouched after the parsed ones.

        Returns:
            True if the history file was written

        Raises:
            HistoryWriteError: If the file cannot be written
        """
        if not snapshot.has_changes:
            self.logger.log_snapshot_skipped(str(self.path), "no size changes")
            return False

        if not self.options.write_file:
            self.logger.log_snapshot_skipped(str(self.path), "writing disabled")
            return False

        raw = self._load_entries()
        history, rejected = self._parse_entries(raw.value)
        payload = [snapshot.to_dict()] + [snap.to_dict() for snap in history] + rejected

        self._write(payload)
        changed = len(changed_files(snapshot.files))
        self.logger.log_snapshot_persisted(str(self.path), len(snapshot.files), changed, len(payload))
        return True

    async def persist_async(self, snapshot: Snapshot) -> bool:
        return await asyncio.to_thread(self.persist, snapshot)

    def _write(self, entries: List[Any]) -> None:
        payload = json.dumps(entries, separators=(",", ":"), ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload + "\n", encoding="utf-8")
        except OSError as e:
            self.logger.log_error(str(e), type(e).__name__, str(self.path))
            raise HistoryWriteError(str(self.path), e.strerror or str(e))


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: compression.py, config.py, logging.py, models.py, reconcile.py, selector.py
# TESTS: tests/unit/test_store.py
# ============================================================================
