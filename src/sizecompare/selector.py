# ============================================================================
# FILE: selector.py
# RELPATH: asset_build_size_compare/src/sizecompare/selector.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Glob matching and artifact selection with include/exclude
# ============================================================================

"""
Artifact Selector.

Glob semantics follow the usual build-tool conventions:
  - ``*``, ``?`` and ``[...]`` match within one path segment
  - ``**`` as a whole segment matches zero or more directories
  - ``{a,b,c}`` expands to alternatives (nesting allowed)
  - wildcards do not match a leading ``.`` unless the pattern spells it out
  - paths and patterns are compared in POSIX form
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from functools import lru_cache
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from sizecompare.exceptions import PatternError
from sizecompare.models import Artifact


def _to_posix(value: str) -> str:
    value = str(value).replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    return value


def _find_closing_brace(pattern: str, start: int) -> Tuple[int, List[int]]:
    """Return the index of the brace closing ``pattern[start]`` and its top-level commas."""
    depth = 0
    commas: List[int] = []
    for i in range(start, len(pattern)):
        ch = pattern[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i, commas
        elif ch == "," and depth == 1:
            commas.append(i)
    return -1, commas


def expand_braces(pattern: str) -> List[str]:
    """
    Expand ``{a,b}`` alternatives into separate patterns.

    A brace group without a comma is kept literally.
    """
    start = pattern.find("{")
    while start != -1:
        end, commas = _find_closing_brace(pattern, start)
        if end == -1:
            break
        if commas:
            prefix, suffix = pattern[:start], pattern[end + 1:]
            bounds = [start] + commas + [end]
            results: List[str] = []
            for left, right in zip(bounds, bounds[1:]):
                option = pattern[left + 1:right]
                for expanded in expand_braces(prefix + option + suffix):
                    if expanded not in results:
                        results.append(expanded)
            return results
        start = pattern.find("{", start + 1)
    return [pattern]


def _match_segment(pattern: str, name: str) -> bool:
    if name.startswith(".") and not pattern.startswith("."):
        return False
    return fnmatchcase(name, pattern)


def _match_parts(pattern: Tuple[str, ...], parts: Tuple[str, ...]) -> bool:
    if not pattern:
        return not parts
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        for i in range(len(parts) + 1):
            if i and parts[i - 1].startswith("."):
                break
            if _match_parts(rest, parts[i:]):
                return True
        return False
    if not parts or not _match_segment(head, parts[0]):
        return False
    return _match_parts(rest, parts[1:])


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Tuple[Tuple[str, ...], ...]:
    compiled = []
    for alternative in expand_braces(_to_posix(pattern)):
        parts = tuple(part for part in alternative.split("/") if part)
        # collapse runs of '**'
        collapsed: List[str] = []
        for part in parts:
            if part == "**" and collapsed and collapsed[-1] == "**":
                continue
            collapsed.append(part)
        compiled.append(tuple(collapsed))
    return tuple(compiled)


def validate_pattern(pattern: str) -> None:
    """
    Raise PatternError for patterns that cannot be matched reliably.
    """
    if not pattern or not isinstance(pattern, str) or not pattern.strip():
        raise PatternError(str(pattern), "Empty or invalid glob pattern provided")
    if pattern.count("[") != pattern.count("]"):
        raise PatternError(pattern, "Unmatched brackets in pattern")
    if pattern.count("{") != pattern.count("}"):
        raise PatternError(pattern, "Unmatched braces in pattern")


def glob_match(path: str, pattern: str) -> bool:
    """Return True if ``path`` matches ``pattern``."""
    if not path or not path.strip():
        return False
    parts = tuple(part for part in _to_posix(path).split("/") if part)
    return any(_match_parts(alternative, parts) for alternative in _compile(pattern))


class ArtifactSelector:
    """
    Filters artifact names with an include pattern and an optional exclude.

    A name is kept iff it matches ``pattern`` and does not match ``exclude``.
    Input order is preserved.
    """

    def __init__(self, pattern: str, exclude: Optional[str] = None, *, literal: bool = False):
        """
        Args:
            pattern: Include glob, or an exact file name when ``literal``
            exclude: Exclude glob; empty or None disables exclusion
            literal: Compare names to ``pattern`` verbatim instead of globbing
        """
        if not literal:
            validate_pattern(pattern)
        if exclude:
            validate_pattern(exclude)
        self.pattern = pattern
        self.exclude = exclude or ""
        self.literal = literal

    def __repr__(self) -> str:
        return (
            f"ArtifactSelector(pattern={self.pattern!r}, exclude={self.exclude!r}, "
            f"literal={self.literal!r})"
        )

    def _included(self, name: str) -> bool:
        if self.literal:
            return _to_posix(name) == _to_posix(self.pattern)
        return glob_match(name, self.pattern)

    def matches(self, name: str) -> bool:
        if not self._included(name):
            return False
        if self.exclude and glob_match(name, self.exclude):
            return False
        return True

    def select(self, names: Iterable[str]) -> List[str]:
        return [name for name in names if self.matches(name)]

    @classmethod
    def for_build(cls,
                  artifacts: Mapping[str, Artifact],
                  pattern: str,
                  exclude: Optional[str] = None) -> "ArtifactSelector":
        """
        Build the selector for one build.

        When the build emitted exactly one chunk, the include pattern is
        replaced by that chunk's file name so hashed bundle names are tracked
        regardless of the configured pattern.
        """
        chunk = single_chunk_name(artifacts)
        if chunk is not None:
            return cls(chunk, exclude, literal=True)
        return cls(pattern, exclude)


def single_chunk_name(artifacts: Mapping[str, Artifact]) -> Optional[str]:
    """Return the chunk's file name if the build produced exactly one chunk."""
    chunks = [artifact for artifact in artifacts.values() if artifact.is_chunk]
    if len(chunks) == 1:
        return chunks[0].file_name
    return None


def select(names: Sequence[str], pattern: str, exclude: Optional[str] = None) -> List[str]:
    """
    Convenience function for one-off filtering.

    Args:
        names: Candidate names
        pattern: Include pattern
        exclude: Exclude pattern or empty

    Returns:
        Names that are included and not excluded, in input order
    """
    return ArtifactSelector(pattern, exclude).select(names)


# ============================================================================
# LIFECYCLE STATUS: Active
# DEPENDENCIES: exceptions.py, models.py
# TESTS: tests/unit/test_selector.py
# ============================================================================
