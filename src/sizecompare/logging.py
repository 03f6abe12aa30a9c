# ============================================================================
# SOURCEFILE: logging.py
# RELPATH: asset_build_size_compare/src/sizecompare/logging.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Structured JSON logging for size tracking runs
# ============================================================================

"""
Structured Logging Module.

Every engine event is kept in an in-memory buffer (for tests and callers),
mirrored to the stdlib ``sizecompare`` logger and, when a log directory is
configured, appended to a per-session JSON-lines file.
"""

from __future__ import annotations

import io
import json
import uuid
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Any, Iterable
from enum import Enum
import sys

_stdlib_logger = logging.getLogger("sizecompare")


def _ensure_stream_utf8(stream: Optional[io.TextIOBase]) -> Optional[io.TextIOBase]:
    """Ensure a text stream writes UTF-8, wrapping if necessary."""
    if stream is None:
        return None

    encoding = getattr(stream, "encoding", None)
    if isinstance(encoding, str) and encoding.lower().replace("_", "-") == "utf-8":
        return stream

    reconfigure = getattr(stream, "reconfigure", None)
    if callable(reconfigure):
        try:
            reconfigure(encoding="utf-8", errors="backslashreplace")
            return stream
        except (AttributeError, ValueError, io.UnsupportedOperation):
            pass

    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream

    try:
        stream.flush()
    except (OSError, ValueError):
        pass

    try:
        wrapped = io.TextIOWrapper(buffer, encoding="utf-8", errors="backslashreplace")
    except (AttributeError, ValueError):
        return stream

    # Mark wrapper so we don't wrap repeatedly
    setattr(wrapped, "_sizecompare_utf8_wrapper", True)
    return wrapped


def configure_utf8_logging(force: bool = False) -> None:
    """Configure stdout/stderr and root logger handlers for UTF-8 output.

    The report separator is not encodable in cp1252, which Windows consoles
    often default to. Safe to call multiple times.
    """
    streams: Iterable[str] = ("stdout", "stderr")
    for name in streams:
        stream = getattr(sys, name, None)
        if stream is None:
            continue

        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            setattr(sys, name, new_stream)

    root = logging.getLogger()
    if force and not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stderr))

    for handler in root.handlers:
        stream = getattr(handler, "stream", None)
        if stream is None:
            continue
        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            handler.setStream(new_stream)


class LogEvent(Enum):
    """Enumeration of loggable events."""
    BUILD_START = "build_start"
    BASELINE_LOADED = "baseline_loaded"
    FILE_MEASURED = "file_measured"
    READ_DEGRADED = "read_degraded"
    SNAPSHOT_PERSISTED = "snapshot_persisted"
    SNAPSHOT_SKIPPED = "snapshot_skipped"
    ERROR = "error"


_LEVELS = {
    LogEvent.READ_DEGRADED: logging.WARNING,
    LogEvent.ERROR: logging.ERROR,
}


class StructuredLogger:
    """
    JSON-structured logger for size tracking runs.

    Entries have the shape ``{sessionId, timestamp, event, details}``.
    """

    def __init__(self, log_dir: Optional[str] = None, session_id: Optional[str] = None):
        """
        Initialize structured logger.

        Args:
            log_dir: Directory for session log files; None keeps logs in memory only
            session_id: Optional session ID (generated if not provided)
        """
        self.session_id = session_id or str(uuid.uuid4())
        self.start_time = datetime.now(timezone.utc)
        self.log_buffer: List[Dict] = []

        self.log_dir: Optional[Path] = Path(log_dir) if log_dir else None
        self.log_file: Optional[Path] = None
        if self.log_dir is not None:
            timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")
            self.log_file = self.log_dir / f"sizecompare_session_{timestamp}_{self.session_id[:8]}.json"
            self._ensure_log_file_exists()

    def _ensure_log_file_exists(self) -> None:
        """Create the log directory and touch the session file. Never raises."""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file.touch(exist_ok=True)
        except OSError as e:
            _stdlib_logger.warning("Could not create log file %s: %s", self.log_file, e)

    def log_build_start(self,
                        output_dir: str,
                        artifact_count: int,
                        single_chunk: bool,
                        pattern: str) -> None:
        """
        Log the start of a build measurement.

        Args:
            output_dir: Pre-build output directory used for the baseline
            artifact_count: Number of artifacts handed over by the host
            single_chunk: Whether the single-chunk override is active
            pattern: Effective include pattern
        """
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.BUILD_START,
            details={
                "outputDir": output_dir,
                "artifactCount": artifact_count,
                "singleChunk": single_chunk,
                "pattern": pattern,
            }
        ))

    def log_baseline_loaded(self, source: str, file_count: int, history_status: str) -> None:
        """
        Log where the baseline came from.

        Args:
            source: "history" or "scan"
            file_count: Entries in the baseline SizeMap
            history_status: ReadStatus value of the history read
        """
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.BASELINE_LOADED,
            details={
                "source": source,
                "fileCount": file_count,
                "historyStatus": history_status,
            }
        ))

    def log_file_measured(self, file_path: str, raw_bytes: int, size_bytes: int, compression: str) -> None:
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.FILE_MEASURED,
            details={
                "filePath": file_path,
                "rawBytes": raw_bytes,
                "sizeBytes": size_bytes,
                "compression": compression,
            }
        ))

    def log_read_degraded(self, file_path: str, reason: str) -> None:
        """Log a read failure that was recovered by treating the file as absent."""
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.READ_DEGRADED,
            details={"filePath": file_path, "reason": reason}
        ))

    def log_snapshot_persisted(self, history_file: str, file_count: int, changed: int, history_length: int) -> None:
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.SNAPSHOT_PERSISTED,
            details={
                "historyFile": history_file,
                "fileCount": file_count,
                "changed": changed,
                "historyLength": history_length,
            }
        ))

    def log_snapshot_skipped(self, history_file: str, reason: str) -> None:
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.SNAPSHOT_SKIPPED,
            details={"historyFile": history_file, "reason": reason}
        ))

    def log_error(self, error_message: str, error_type: str, file_path: Optional[str] = None) -> None:
        """
        Log a fatal error before it propagates.

        Args:
            error_message: Human-readable error message
            error_type: Exception class name
            file_path: File involved, if any
        """
        self._write_log_entry(self._create_log_entry(
            event=LogEvent.ERROR,
            details={
                "errorMessage": error_message,
                "errorType": error_type,
                "filePath": file_path,
            }
        ))

    def _create_log_entry(self, event: LogEvent, details: Dict[str, Any]) -> Dict:
        return {
            "sessionId": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event.value,
            "details": details,
        }

    def _write_log_entry(self, entry: Dict) -> None:
        """
        Record a log entry in the buffer, the stdlib logger and the session file.

        File write failures are reported on the stdlib logger only.
        """
        self.log_buffer.append(entry)

        level = _LEVELS.get(LogEvent(entry["event"]), logging.DEBUG)
        _stdlib_logger.log(level, "%s %s", entry["event"], json.dumps(entry["details"], ensure_ascii=False))

        if self.log_file is None:
            return
        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as e:
            _stdlib_logger.warning("Failed to write log entry: %s", e)

    def get_session_logs(self) -> List[Dict]:
        return list(self.log_buffer)

    def events(self, event: LogEvent) -> List[Dict]:
        """Return buffered entries of one event type."""
        return [entry for entry in self.log_buffer if entry["event"] == event.value]

    def export_session_summary(self) -> Dict:
        """
        Export session summary statistics.

        Returns:
            Summary dictionary with counts and metrics
        """
        summary = {
            "sessionId": self.session_id,
            "startTime": self.start_time.isoformat(),
            "endTime": datetime.now(timezone.utc).isoformat(),
            "totalEvents": len(self.log_buffer),
            "eventCounts": {},
        }

        for entry in self.log_buffer:
            event_type = entry["event"]
            summary["eventCounts"][event_type] = summary["eventCounts"].get(event_type, 0) + 1

        return summary


# ============================================================================
# Global Logger Instance
# ============================================================================

_global_logger: Optional[StructuredLogger] = None


def get_logger(log_dir: Optional[str] = None) -> StructuredLogger:
    """
    Get the global logger instance, creating it on first use.

    Args:
        log_dir: Directory for log files (only used on creation)
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(log_dir)
    return _global_logger


def new_session(log_dir: Optional[str] = None) -> StructuredLogger:
    """Start a new logging session and make it the global logger."""
    global _global_logger
    _global_logger = StructuredLogger(log_dir)
    return _global_logger


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: None (standalone logging)
# TESTS: tests/unit/test_logging.py
# ============================================================================
