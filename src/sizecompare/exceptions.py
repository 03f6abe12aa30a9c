# ============================================================================
# FILE: exceptions.py
# RELPATH: asset_build_size_compare/src/sizecompare/exceptions.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Exception hierarchy for the size tracking engine
# ============================================================================

"""
Exception classes for Asset Build Size Compare.

Fatal conditions (bad configuration, unavailable compression, history write
failures) propagate to the build. Per-file read failures and unreadable
history are recovered by the engine and only show up in logs and
``ReadResult`` objects.
"""


class SizeCompareError(Exception):
    """Base exception for all Asset Build Size Compare errors."""
    pass


# ============================================================================
# Configuration-Related Exceptions
# ============================================================================

class ConfigError(SizeCompareError):
    """Base exception for configuration-related errors."""
    pass


class ConfigLoadError(ConfigError):
    """
    Raised when a configuration file cannot be loaded.

    Attributes:
        config_file: Path to the configuration file
        reason: Explanation of the failure
    """
    def __init__(self, config_file: str, reason: str):
        self.config_file = config_file
        self.reason = reason
        super().__init__(f"Failed to load config '{config_file}': {reason}")


class ConfigValidationError(ConfigError):
    """
    Raised when an option fails validation.

    Attributes:
        key: Option name that failed validation
        value: The invalid value
        reason: Explanation of why validation failed
    """
    def __init__(self, key: str, value: object, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid option value for '{key}': {reason}")


class UnsupportedCompressionError(ConfigError):
    """
    Raised when a compression algorithm is not available in this environment.

    Attributes:
        compression: Name of the requested algorithm
        reason: Explanation of the failure
    """
    def __init__(self, compression: str, reason: str):
        self.compression = compression
        self.reason = reason
        super().__init__(f"Compression '{compression}' is not supported: {reason}")


# ============================================================================
# Validation-Related Exceptions
# ============================================================================

class ValidationError(SizeCompareError):
    """Base exception for validation errors."""
    pass


class PatternError(ValidationError):
    """
    Raised when a glob pattern is invalid.

    Attributes:
        pattern: The problematic glob pattern
        reason: Explanation of the error
    """
    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")


# ============================================================================
# I/O-Related Exceptions
# ============================================================================

class SizeIOError(SizeCompareError):
    """Base exception for I/O errors."""
    pass


class ArtifactReadError(SizeIOError):
    """
    Raised when a candidate artifact cannot be read from disk.

    Callers treat the file as absent instead of failing the build.

    Attributes:
        path: Path to the artifact
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read artifact '{path}': {reason}")


class HistoryReadError(SizeIOError):
    """
    Describes a history file that is missing, unreadable or malformed.

    Attributes:
        path: Path to the history file
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read history '{path}': {reason}")


class HistoryWriteError(SizeIOError):
    """
    Raised when the history file cannot be written.

    Attributes:
        path: Path where writing failed
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write history '{path}': {reason}")


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: None (base exception definitions)
# TESTS: tests/unit/test_exceptions.py
# ============================================================================
