# ============================================================================
# SOURCEFILE: tracker.py
# RELPATH: asset_build_size_compare/src/sizecompare/tracker.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Build hook engine - baseline, measure, reconcile, report, persist
# ============================================================================

"""
Size tracking engine.

A build is handled in two explicit steps:

    tracker = SizeTracker(SizeOptions.from_mapping({"compression": "brotli"}))
    await tracker.begin_build(output_dir, artifacts)   # baseline from history or disk
    result = await tracker.finish_build(artifacts)     # measure, report, persist

``generate_bundle`` runs both steps; ``run`` does the same synchronously.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from rich.console import Console

from sizecompare.compression import measure_async
from sizecompare.config import SizeOptions
from sizecompare.exceptions import SizeCompareError
from sizecompare.logging import StructuredLogger, get_logger
from sizecompare.models import Artifact, ArtifactKind, SizeMap, Snapshot
from sizecompare.reconcile import reconcile
from sizecompare.report import ReportLine, ReportPrinter
from sizecompare.selector import ArtifactSelector, single_chunk_name
from sizecompare.store import SnapshotStore


def resolve_output_dir(dir: Optional[Union[str, Path]] = None,
                       file: Optional[Union[str, Path]] = None) -> Path:
    """
    Return the build output directory: ``dir`` if given, else the parent of ``file``.

    Raises:
        ValueError: If neither is given
    """
    if dir:
        return Path(dir).resolve()
    if file:
        return Path(file).resolve().parent
    raise ValueError("Either an output directory or an output file is required")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class BuildResult:
    """
    Everything one build produced.

    Attributes:
        snapshot: The new snapshot (persisted or not)
        lines: Formatted report lines
        written: Whether the history file was updated
        single_chunk: Whether the single-chunk override was active
    """
    snapshot: Snapshot
    lines: List[ReportLine] = field(default_factory=list)
    written: bool = False
    single_chunk: bool = False

    @property
    def files(self):
        return self.snapshot.files


class SizeTracker:
    """
    Tracks compressed artifact sizes across builds.

    State between ``begin_build`` and ``finish_build`` lives on the instance:
    the baseline SizeMap and whether this is a single-chunk build.
    """

    def __init__(self,
                 options: Optional[SizeOptions] = None,
                 *,
                 cwd: Optional[Union[str, Path]] = None,
                 logger: Optional[StructuredLogger] = None,
                 console: Optional[Console] = None):
        """
        Initialize tracker.

        Args:
            options: Engine options (defaults when None)
            cwd: Directory the history filename is resolved against
            logger: Structured logger (defaults to the global one)
            console: rich Console for the report
        """
        self.options = options or SizeOptions()
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.logger = logger or get_logger()
        self.printer = ReportPrinter(console)
        self.store = SnapshotStore(self.options.history_path(self.cwd), self.options, self.logger)

        self.baseline: Optional[SizeMap] = None
        self.is_single_chunk = False
        self.selector: Optional[ArtifactSelector] = None

    @property
    def history_path(self) -> Path:
        return self.store.path

    async def begin_build(self, output_dir: Optional[Union[str, Path]], artifacts: Mapping[str, Artifact]) -> SizeMap:
        """
        Capture the baseline before the new artifacts are written.

        Args:
            output_dir: Build output directory in its pre-build state, scanned
                when there is no history; None means an empty baseline
            artifacts: Produced artifacts keyed by file name

        Returns:
            The baseline SizeMap
        """
        self.is_single_chunk = single_chunk_name(artifacts) is not None
        self.selector = ArtifactSelector.for_build(artifacts, self.options.pattern, self.options.exclude)
        self.logger.log_build_start(
            str(output_dir or ""), len(artifacts), self.is_single_chunk, self.selector.pattern
        )
        try:
            self.baseline = await self.store.load_baseline(output_dir, self.selector)
        except SizeCompareError as e:
            self.logger.log_error(str(e), type(e).__name__)
            raise
        return self.baseline

    async def measure_artifacts(self, artifacts: Mapping[str, Artifact]) -> SizeMap:
        """Measure the selected artifacts concurrently, keeping selection order."""
        if self.selector is None:
            raise RuntimeError("begin_build() must be called before measuring artifacts")
        names = self.selector.select(artifacts.keys())
        sizes = await asyncio.gather(*(self._measure(name, artifacts[name]) for name in names))
        return dict(zip(names, sizes))

    async def _measure(self, name: str, artifact: Artifact) -> int:
        data = artifact.data()
        size = await measure_async(data, self.options.compression, self.options.compression_level)
        self.logger.log_file_measured(name, len(data), size, self.options.compression.value)
        return size

    async def finish_build(self, artifacts: Mapping[str, Artifact]) -> BuildResult:
        """
        Compare the new artifacts with the baseline, print the report and
        persist a snapshot when anything changed.

        Raises:
            RuntimeError: If ``begin_build`` was not called
            SizeCompareError: On unsupported compression or history write failure
        """
        if self.baseline is None:
            raise RuntimeError("begin_build() must be called before finish_build()")

        try:
            after = await self.measure_artifacts(artifacts)
        except SizeCompareError as e:
            self.logger.log_error(str(e), type(e).__name__)
            raise

        files = reconcile(self.baseline, after)
        snapshot = Snapshot(
            timestamp=now_ms(),
            compression_type=self.options.compression,
            compression_level=self.options.compression_level,
            files=tuple(files),
        )
        lines = self.printer.print_report(files, self.options, self.is_single_chunk)

        if self.options.on_save is not None:
            saved = self.options.on_save(snapshot)
            if inspect.isawaitable(saved):
                await saved
        written = await self.store.persist_async(snapshot)

        result = BuildResult(snapshot, lines, written, self.is_single_chunk)
        self.baseline = None
        return result

    async def generate_bundle(self, output_dir: Optional[Union[str, Path]], artifacts: Mapping[str, Artifact]) -> BuildResult:
        """Build hook: capture the baseline then measure and record this build."""
        await self.begin_build(output_dir, artifacts)
        return await self.finish_build(artifacts)

    def run(self, output_dir: Optional[Union[str, Path]], artifacts: Mapping[str, Artifact]) -> BuildResult:
        """Synchronous wrapper around :meth:`generate_bundle`."""
        return asyncio.run(self.generate_bundle(output_dir, artifacts))


def artifacts_from_mapping(contents: Mapping[str, Union[bytes, str]],
                           chunk_names: Optional[List[str]] = None) -> Dict[str, Artifact]:
    """
    Wrap raw ``name -> content`` pairs as Artifacts.

    Names listed in ``chunk_names`` become chunks, the rest assets.
    """
    chunks = set(chunk_names or [])
    return {
        name: Artifact(name, content, ArtifactKind.CHUNK if name in chunks else ArtifactKind.ASSET)
        for name, content in contents.items()
    }


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: compression, config, logging, models, reconcile, report, selector, store
# TESTS: tests/unit/test_tracker.py, tests/integration/test_build_flow.py
# ============================================================================
