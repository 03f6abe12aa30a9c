# ============================================================================
# SOURCEFILE: cli.py
# RELPATH: asset_build_size_compare/src/sizecompare/cli.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# ============================================================================

"""Command-Line Interface for Asset Build Size Compare."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console

from sizecompare import __version__
from sizecompare.config import SizeOptions, load_options
from sizecompare.exceptions import SizeCompareError
from sizecompare.logging import configure_utf8_logging, new_session
from sizecompare.models import Artifact, ArtifactKind, CompressionType
from sizecompare.report import pretty_bytes
from sizecompare.store import SnapshotStore, discover_files, read_artifact
from sizecompare.tracker import SizeTracker

# File suffixes treated as code chunks when a directory stands in for a build
CHUNK_SUFFIXES = {".js", ".mjs", ".cjs", ".jsx"}


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sizecompare",
        description="Track compressed build asset sizes and compare them over time"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # COMPARE
    parser_compare = subparsers.add_parser("compare", help="Measure a build against the last snapshot")
    parser_compare.add_argument("build_dir", type=Path, help="Directory holding the freshly built artifacts")
    parser_compare.add_argument("--out-dir", type=Path, help="Pre-build output directory, scanned when there is no history yet")
    _add_option_arguments(parser_compare)
    parser_compare.add_argument("--pattern")
    parser_compare.add_argument("--exclude")
    parser_compare.add_argument("--no-write", action="store_true", help="Do not read or write history")
    parser_compare.add_argument("--column-width", type=int)
    parser_compare.add_argument("--log-dir", help="Write a JSON-lines session log here")

    # HISTORY
    parser_history = subparsers.add_parser("history", help="Show stored snapshots")
    _add_option_arguments(parser_history)
    parser_history.add_argument("--limit", type=int, default=10)
    parser_history.add_argument("--json", dest="as_json", action="store_true")

    return parser


def _add_option_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="JSON file with options")
    parser.add_argument("--compression", choices=[c.value for c in CompressionType])
    parser.add_argument("--level", type=int, dest="compression_level")
    parser.add_argument("--filename", help="History file")


def options_from_args(args: argparse.Namespace) -> SizeOptions:
    """Merge config file values and command line flags; flags win."""
    overrides: Dict[str, Any] = {}
    for name in ("compression", "compression_level", "filename", "pattern", "exclude", "column_width"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "no_write", False):
        overrides["write_file"] = False

    if args.config:
        return load_options(args.config, **overrides)
    return SizeOptions.from_mapping(overrides)


def collect_artifacts(build_dir: Path) -> Dict[str, Artifact]:
    """Read every file under ``build_dir`` as a produced artifact."""
    if not build_dir.is_dir():
        raise SizeCompareError(f"Build directory not found: {build_dir} (does not exist)")
    artifacts: Dict[str, Artifact] = {}
    for name in discover_files(build_dir):
        kind = ArtifactKind.CHUNK if Path(name).suffix in CHUNK_SUFFIXES else ArtifactKind.ASSET
        artifacts[name] = Artifact(name, read_artifact(build_dir / name), kind)
    return artifacts


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    configure_utf8_logging()

    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "compare":
            handle_compare(args)
        elif args.command == "history":
            handle_history(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            sys.exit(1)

        sys.exit(0)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)

    except SizeCompareError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


def handle_compare(args):
    """Handler for compare command."""
    options = options_from_args(args)
    build_dir = args.build_dir
    out_dir = args.out_dir

    artifacts = collect_artifacts(build_dir)
    logger = new_session(args.log_dir)
    tracker = SizeTracker(options, logger=logger, console=Console(highlight=False))
    result = tracker.run(out_dir, artifacts)

    if not result.lines:
        print(f"No artifacts matched '{tracker.selector.pattern}' in {build_dir}")
    if result.written:
        print(f"History updated: {tracker.history_path}")
    if logger.log_file is not None:
        summary = logger.export_session_summary()
        print(f"Session log: {logger.log_file} ({summary['totalEvents']} events)")


def handle_history(args):
    """Handler for history command."""
    options = options_from_args(args)
    store = SnapshotStore(options.history_path(), options, new_session())
    result = store.read_history()
    snapshots = result.value[:max(args.limit, 0)]

    if args.as_json:
        print(json.dumps([snap.to_dict() for snap in snapshots], indent=2))
        return

    if not result.ok:
        print(f"No history at {store.path} ({result.status.value})")
        return

    for snap in snapshots:
        total = sum(delta.size for delta in snap.files)
        change = sum(delta.diff for delta in snap.files)
        sign = "+" if change > 0 else ""
        print(
            f"{snap.timestamp}  {snap.compression_type.value}:{snap.compression_level}  "
            f"{len(snap.files)} files  {pretty_bytes(total)} ({sign}{pretty_bytes(change)})"
        )


if __name__ == "__main__":
    main()
