# ============================================================================
# SOURCEFILE: report.py
# RELPATH: asset_build_size_compare/src/sizecompare/report.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Human-readable console report of per-file size deltas
# ============================================================================

"""
Report Formatter.

Turns reconciled FileDeltas into one console line per file::

                 main.js ⏤  1.1 kB (+76 B)

Sizes use SI units with three significant digits. Colours mark large files
and notable growth; the plain rendering carries the same text without
styles.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rich.console import Console
from rich.text import Text

from sizecompare.config import SizeOptions
from sizecompare.models import FileDelta

SEPARATOR = " ⏤  "

BYTE_UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]

# (lower bound exclusive, colour); first match wins
SIZE_COLOURS = [
    (75 * 1024, "red"),
    (40 * 1024, "yellow"),
    (20 * 1024, "cyan"),
]


def pretty_bytes(num: int) -> str:
    """
    Format a byte count with SI units, e.g. ``1100 -> '1.1 kB'``.

    Negative values keep their sign.
    """
    if num < 0:
        return "-" + pretty_bytes(-num)
    if num < 1:
        return f"{num:g} B"
    exponent = min(int(math.floor(math.log10(num) / 3)), len(BYTE_UNITS) - 1)
    value = float(f"{num / 1000 ** exponent:.3g}")
    return f"{value:g} {BYTE_UNITS[exponent]}"


def size_colour(size: int) -> str:
    for threshold, colour in SIZE_COLOURS:
        if size > threshold:
            return colour
    return "green"


@dataclass(frozen=True)
class ReportLine:
    """
    One formatted report row.

    Attributes:
        delta: The underlying FileDelta
        label: Right-aligned file name followed by the separator
        size_text: Pretty size of the current build
        delta_text: Signed pretty delta, empty when unchanged
        colour: Colour band for the size
        bold: Whether the size is emphasised (growth above 1 KiB)
        delta_colour: Colour for the delta text, if any
    """
    delta: FileDelta
    label: str
    size_text: str
    delta_text: str
    colour: str
    bold: bool = False
    delta_colour: Optional[str] = None

    @property
    def plain(self) -> str:
        suffix = f" ({self.delta_text})" if self.delta_text else " (no change)"
        return self.label + self.size_text + suffix

    def to_text(self) -> Text:
        text = Text(self.label)
        text.append(self.size_text, style=f"bold {self.colour}" if self.bold else self.colour)
        if self.delta_text:
            text.append(" (")
            text.append(self.delta_text, style=self.delta_colour)
            text.append(")")
        else:
            text.append(" (no change)")
        return text


def build_lines(files: Sequence[FileDelta], column_width: int = 20) -> List[ReportLine]:
    """Format every delta, aligning names to the widest name or ``column_width``."""
    if not files:
        return []
    width = max(max(len(delta.filename) for delta in files), column_width or 0)
    lines = []
    for delta in files:
        label = " " * (width - len(delta.filename) + 1) + delta.filename + SEPARATOR
        change = delta.diff
        bold = False
        delta_colour = None
        delta_text = ""
        if change and abs(change) > 1:
            delta_text = ("+" if change > 0 else "") + pretty_bytes(change)
            if change > 1024:
                bold = True
                delta_colour = "red"
            elif change < -10:
                delta_colour = "green"
        lines.append(ReportLine(
            delta=delta,
            label=label,
            size_text=pretty_bytes(delta.size),
            delta_text=delta_text,
            colour=size_colour(delta.size),
            bold=bold,
            delta_colour=delta_colour,
        ))
    return lines


def header(options: SizeOptions) -> str:
    return (
        "Measured Delta in Asset Build Size - "
        f"(using {options.compression.value}_comp_level: {options.compression_level})"
    )


def render_plain(lines: Sequence[ReportLine], single_chunk: bool = False) -> str:
    """Join report lines as plain text; single-chunk output has no trailing newline."""
    output = "".join(line.plain + "\n" for line in lines)
    return output.rstrip() if single_chunk else output


class ReportPrinter:
    """Writes reports to a rich Console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def print_report(self,
                     files: Sequence[FileDelta],
                     options: SizeOptions,
                     single_chunk: bool = False) -> List[ReportLine]:
        """
        Print the header and one line per file.

        Nothing is printed when there are no files.

        Returns:
            The formatted lines
        """
        lines = build_lines(files, options.column_width)
        if not lines:
            return lines
        self.console.print(header(options), markup=False, highlight=False)
        body = Text()
        for line in lines:
            body.append_text(line.to_text())
            body.append("\n")
        if single_chunk:
            body.rstrip()
        self.console.print(body, highlight=False)
        return lines
