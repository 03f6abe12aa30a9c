"""Track compressed build artifact sizes and compare them across builds."""

from sizecompare.config import SizeOptions, load_options
from sizecompare.models import Artifact, ArtifactKind, CompressionType, FileDelta, Snapshot
from sizecompare.reconcile import reconcile
from sizecompare.tracker import BuildResult, SizeTracker, resolve_output_dir

__version__ = "1.1.0"

__all__ = [
    "Artifact",
    "ArtifactKind",
    "BuildResult",
    "CompressionType",
    "FileDelta",
    "SizeOptions",
    "SizeTracker",
    "Snapshot",
    "load_options",
    "reconcile",
    "resolve_output_dir",
]
