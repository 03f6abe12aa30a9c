# ============================================================================
# SOURCEFILE: test_tracker.py
# RELPATH: asset_build_size_compare/tests/unit/test_tracker.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Unit tests for the build hook engine
# ============================================================================

import asyncio
import json
from pathlib import Path

import pytest

from sizecompare.compression import measure
from sizecompare.config import SizeOptions
from sizecompare.exceptions import UnsupportedCompressionError
from sizecompare import compression
from sizecompare.logging import LogEvent
from sizecompare.models import Artifact, ArtifactKind, CompressionType
from sizecompare.tracker import (
    SizeTracker,
    artifacts_from_mapping,
    now_ms,
    resolve_output_dir,
)


@pytest.fixture
def make_tracker(tmp_path, memory_logger, quiet_console):
    def _make(options=None):
        return SizeTracker(options or SizeOptions(), cwd=tmp_path, logger=memory_logger, console=quiet_console)
    return _make


class TestResolveOutputDir:

    def test_dir_wins(self, tmp_path):
        assert resolve_output_dir(tmp_path / "dist", tmp_path / "other" / "bundle.js") == (tmp_path / "dist").resolve()

    def test_parent_of_file(self, tmp_path):
        assert resolve_output_dir(file=tmp_path / "out" / "bundle.js") == (tmp_path / "out").resolve()

    def test_neither(self):
        with pytest.raises(ValueError):
            resolve_output_dir()


class TestArtifactsFromMapping:

    def test_kinds(self):
        artifacts = artifacts_from_mapping({"a.js": "x", "a.css": b"y"}, chunk_names=["a.js"])

        assert artifacts["a.js"].kind is ArtifactKind.CHUNK
        assert artifacts["a.css"].kind is ArtifactKind.ASSET


class TestBuildLifecycle:
    """Tests for begin_build / finish_build."""

    def test_finish_without_begin(self, make_tracker, sample_artifacts):
        with pytest.raises(RuntimeError):
            asyncio.run(make_tracker().finish_build(sample_artifacts))

    def test_measure_without_begin(self, make_tracker, sample_artifacts):
        with pytest.raises(RuntimeError):
            asyncio.run(make_tracker().measure_artifacts(sample_artifacts))

    def test_first_build_without_history(self, make_tracker, sample_artifacts, tmp_path):
        tracker = make_tracker()

        result = tracker.run(None, sample_artifacts)

        assert [d.filename for d in result.files] == ["main.js", "vendor.js", "styles.css"]
        assert all(d.previous == 0 and d.diff == d.size for d in result.files)
        assert result.written
        assert tracker.history_path == tmp_path / ".asset-build-size-compare-data-gzip.json"
        assert tracker.history_path.exists()

    def test_second_identical_build_is_noop(self, make_tracker, sample_artifacts):
        make_tracker().run(None, sample_artifacts)
        before = make_tracker().history_path.read_bytes()

        second = make_tracker().run(None, sample_artifacts)

        assert not second.written
        assert all(d.diff == 0 for d in second.files)
        assert make_tracker().history_path.read_bytes() == before

    def test_sizes_are_compressed_sizes(self, make_tracker, sample_artifacts):
        result = make_tracker().run(None, sample_artifacts)

        main = result.files[0]
        assert main.size == measure(sample_artifacts["main.js"].data(), CompressionType.GZIP, 6)

    def test_growth_against_history(self, make_tracker, sample_artifacts):
        make_tracker().run(None, sample_artifacts)
        grown = dict(sample_artifacts)
        grown["main.js"] = Artifact("main.js", sample_artifacts["main.js"].content + "// tail\n" * 50, ArtifactKind.CHUNK)
        del grown["styles.css"]

        result = make_tracker().run(None, grown)

        by_name = {d.filename: d for d in result.files}
        assert by_name["main.js"].diff > 0
        assert by_name["styles.css"].size == 0
        assert by_name["styles.css"].diff < 0
        assert by_name["vendor.js"].diff == 0
        assert result.written

    def test_baseline_scanned_from_output_dir(self, make_tracker, sample_artifacts, output_dir):
        tracker = make_tracker()

        result = tracker.run(output_dir, sample_artifacts)

        assert [d.filename for d in result.files] == [
            "assets/chunk.mjs", "main.js", "styles.css", "vendor.js"
        ]
        by_name = {d.filename: d for d in result.files}
        assert by_name["main.js"].diff == 0
        assert by_name["styles.css"].diff == 0
        assert by_name["assets/chunk.mjs"].size == 0
        assert by_name["vendor.js"].previous == 0

    def test_single_chunk_override(self, make_tracker, single_chunk_artifacts):
        options = SizeOptions(pattern="**/*.css")
        tracker = make_tracker(options)

        result = tracker.run(None, single_chunk_artifacts)

        assert result.single_chunk
        assert [d.filename for d in result.files] == ["bundle.a1b2c3.js"]
        assert tracker.selector.literal

    def test_exclude(self, make_tracker, sample_artifacts):
        result = make_tracker(SizeOptions(exclude="vendor*")).run(None, sample_artifacts)

        assert [d.filename for d in result.files] == ["main.js", "styles.css"]

    def test_nothing_selected(self, make_tracker, sample_artifacts, report_stream):
        result = make_tracker(SizeOptions(pattern="**/*.wasm")).run(None, sample_artifacts)

        assert result.files == ()
        assert result.lines == []
        assert not result.written
        assert report_stream.getvalue() == ""

    def test_report_printed(self, make_tracker, sample_artifacts, report_stream):
        make_tracker().run(None, sample_artifacts)

        output = report_stream.getvalue()
        assert output.startswith("Measured Delta in Asset Build Size - (using gzip_comp_level: 6)")
        assert "vendor.js" in output

    def test_write_disabled(self, make_tracker, sample_artifacts):
        tracker = make_tracker(SizeOptions(write_file=False))

        result = tracker.run(None, sample_artifacts)

        assert not result.written
        assert not tracker.history_path.exists()

    def test_on_save_called_before_persist(self, make_tracker, sample_artifacts):
        seen = []
        tracker = None

        def on_save(snapshot):
            seen.append((snapshot, tracker.history_path.exists()))

        tracker = make_tracker(SizeOptions(on_save=on_save))
        result = tracker.run(None, sample_artifacts)

        assert len(seen) == 1
        assert seen[0][0] is result.snapshot
        assert seen[0][1] is False

    def test_async_on_save_awaited(self, make_tracker, sample_artifacts):
        seen = []

        async def on_save(snapshot):
            await asyncio.sleep(0)
            seen.append(snapshot)

        result = make_tracker(SizeOptions(on_save=on_save)).run(None, sample_artifacts)

        assert seen == [result.snapshot]

    def test_async_on_save_error_propagates(self, make_tracker, sample_artifacts):
        async def on_save(snapshot):
            raise RuntimeError("upload failed")

        tracker = make_tracker(SizeOptions(on_save=on_save))

        with pytest.raises(RuntimeError, match="upload failed"):
            tracker.run(None, sample_artifacts)
        assert not tracker.history_path.exists()

    def test_on_save_called_even_without_changes(self, make_tracker, sample_artifacts):
        make_tracker().run(None, sample_artifacts)
        seen = []

        make_tracker(SizeOptions(on_save=seen.append)).run(None, sample_artifacts)

        assert len(seen) == 1
        assert not seen[0].has_changes

    def test_snapshot_metadata(self, make_tracker, sample_artifacts):
        start = now_ms()

        snapshot = make_tracker(SizeOptions(compression="none")).run(None, sample_artifacts).snapshot

        assert snapshot.timestamp >= start
        assert snapshot.compression_type is CompressionType.NONE
        assert snapshot.compression_level == 6

    def test_history_file_per_compression(self, make_tracker, sample_artifacts, tmp_path):
        make_tracker(SizeOptions(compression="none")).run(None, sample_artifacts)

        data = json.loads((tmp_path / ".asset-build-size-compare-data-none.json").read_text(encoding="utf-8"))
        assert data[0]["compressionType"] == "none"

    def test_baseline_reset_after_finish(self, make_tracker, sample_artifacts):
        tracker = make_tracker()

        tracker.run(None, sample_artifacts)

        assert tracker.baseline is None

    def test_unsupported_compression_aborts(self, make_tracker, sample_artifacts, memory_logger, monkeypatch):
        monkeypatch.setattr(compression, "brotli", None)
        tracker = make_tracker(SizeOptions(compression="brotli", compression_level=11))

        with pytest.raises(UnsupportedCompressionError):
            tracker.run(None, sample_artifacts)
        assert memory_logger.events(LogEvent.ERROR)
        assert not tracker.history_path.exists()

    def test_build_events_logged(self, make_tracker, sample_artifacts, memory_logger):
        make_tracker().run(None, sample_artifacts)

        events = [entry["event"] for entry in memory_logger.get_session_logs()]
        assert events[0] == "build_start"
        assert events[1] == "baseline_loaded"
        assert events.count("file_measured") == 3
        assert events[-1] == "snapshot_persisted"

    def test_cwd_defaults_to_process_cwd(self, tmp_path, monkeypatch, memory_logger, quiet_console):
        monkeypatch.chdir(tmp_path)

        tracker = SizeTracker(logger=memory_logger, console=quiet_console)

        assert tracker.history_path == Path.cwd() / ".asset-build-size-compare-data-gzip.json"
