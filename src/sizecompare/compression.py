# ============================================================================
# SOURCEFILE: compression.py
# RELPATH: asset_build_size_compare/src/sizecompare/compression.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Compressed-size measurement for gzip, brotli and raw bytes
# ============================================================================

"""
Compression Measurer.

``measure`` is a pure function of (data, compression, level). The async
variant runs the compression in a worker thread so several artifacts can
be measured at once.
"""

from __future__ import annotations

import asyncio
import gzip
from typing import Union

try:
    import brotli
except ImportError:  # optional at runtime; reported when brotli is requested
    brotli = None

from sizecompare.exceptions import UnsupportedCompressionError
from sizecompare.models import CompressionType


def brotli_available() -> bool:
    """Return True if the brotli module can be used."""
    return brotli is not None


def _gzip_size(data: bytes, level: int) -> int:
    # mtime=0 keeps the output byte-identical across runs
    return len(gzip.compress(data, compresslevel=level, mtime=0))


def _brotli_size(data: bytes, level: int) -> int:
    if brotli is None:
        raise UnsupportedCompressionError("brotli", "the 'brotli' package is not installed")
    return len(brotli.compress(data, quality=level))


def measure(data: bytes, compression: Union[str, CompressionType], level: int) -> int:
    """
    Return the size of ``data`` after compression.

    Args:
        data: Raw file contents
        compression: none, gzip or brotli
        level: gzip level or brotli quality (ignored for none)

    Returns:
        Byte length of the compressed output (raw length for none)

    Raises:
        UnsupportedCompressionError: If brotli is requested but unavailable
    """
    mode = CompressionType(compression)
    if mode is CompressionType.NONE:
        return len(data)
    if mode is CompressionType.GZIP:
        return _gzip_size(data, level)
    return _brotli_size(data, level)


async def measure_async(data: bytes, compression: Union[str, CompressionType], level: int) -> int:
    """Run :func:`measure` in a worker thread."""
    return await asyncio.to_thread(measure, data, compression, level)


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: brotli (optional until brotli compression is requested)
# TESTS: tests/unit/test_compression.py
# ============================================================================
