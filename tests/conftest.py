# ============================================================================
# FILE: conftest.py
# RELPATH: asset_build_size_compare/tests/conftest.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Pytest fixtures for the size tracking test suite
# ============================================================================

"""
Pytest configuration and shared fixtures.
"""

import io
import json
import sys
import os
from pathlib import Path
from typing import Dict

import pytest
from rich.console import Console

# Add src to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from sizecompare.config import SizeOptions
from sizecompare.logging import StructuredLogger
from sizecompare.models import Artifact, ArtifactKind


# ============================================================================
# Sample Data Fixtures
# ============================================================================

SAMPLE_JS = (
    "export function greet(name) {\n"
    "  return `Hello, ${name}!`;\n"
    "}\n"
) * 40

SAMPLE_CSS = "body { margin: 0; padding: 0; color: #333; }\n" * 30


@pytest.fixture
def sample_artifacts() -> Dict[str, Artifact]:
    """Two chunks and two assets, as a multi-chunk build would emit them."""
    return {
        "main.js": Artifact("main.js", SAMPLE_JS, ArtifactKind.CHUNK),
        "vendor.js": Artifact("vendor.js", SAMPLE_JS * 3, ArtifactKind.CHUNK),
        "styles.css": Artifact("styles.css", SAMPLE_CSS, ArtifactKind.ASSET),
        "logo.png": Artifact("logo.png", b"\x89PNG\r\n\x1a\n" * 10, ArtifactKind.ASSET),
    }


@pytest.fixture
def single_chunk_artifacts() -> Dict[str, Artifact]:
    """A build with one hashed chunk and one asset."""
    return {
        "bundle.a1b2c3.js": Artifact("bundle.a1b2c3.js", SAMPLE_JS, ArtifactKind.CHUNK),
        "bundle.a1b2c3.js.map": Artifact("bundle.a1b2c3.js.map", "{}", ArtifactKind.ASSET),
    }


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def memory_logger() -> StructuredLogger:
    """Logger that only keeps entries in memory."""
    return StructuredLogger(log_dir=None, session_id="test-session")


@pytest.fixture
def report_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def quiet_console(report_stream) -> Console:
    """Console writing uncoloured text into ``report_stream``."""
    return Console(file=report_stream, width=200, color_system=None, highlight=False)


@pytest.fixture
def options() -> SizeOptions:
    return SizeOptions()


# ============================================================================
# Filesystem Fixtures
# ============================================================================

@pytest.fixture
def output_dir(tmp_path) -> Path:
    """
    Pre-build output directory.

    Structure:
        dist/
            main.js
            styles.css
            assets/chunk.mjs
            readme.txt
    """
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "main.js").write_text(SAMPLE_JS, encoding="utf-8")
    (dist / "styles.css").write_text(SAMPLE_CSS, encoding="utf-8")
    (dist / "assets" / "chunk.mjs").write_text(SAMPLE_JS * 2, encoding="utf-8")
    (dist / "readme.txt").write_text("not tracked\n", encoding="utf-8")
    return dist


def _write_history(path: Path, snapshots) -> str:
    text = json.dumps(snapshots)
    path.write_text(text, encoding="utf-8")
    return text


def _snapshot_dict(timestamp: int, files: Dict[str, int], compression: str = "gzip", level: int = 6) -> Dict:
    """Build a persisted snapshot dict with ``previous == size``."""
    return {
        "timestamp": timestamp,
        "compressionType": compression,
        "compressionLevel": level,
        "files": [
            {"filename": name, "previous": size, "size": size, "diff": 0}
            for name, size in files.items()
        ],
    }


@pytest.fixture
def write_history():
    """Return a helper writing raw snapshot dicts to a history file; it returns the text."""
    return _write_history


@pytest.fixture
def make_snapshot():
    """Return a helper building persisted snapshot dicts with previous == size."""
    return _snapshot_dict


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: sizecompare.config, sizecompare.logging, sizecompare.models
# USAGE: Import fixtures in test files, pytest auto-discovers them
# ============================================================================
