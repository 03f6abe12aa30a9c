# ============================================================================
# FILE: reconcile.py
# RELPATH: asset_build_size_compare/src/sizecompare/reconcile.py
# PROJECT: Asset Build Size Compare
# VERSION: 1.1.0
# LIFECYCLE: Active
# DESCRIPTION: Merge before/after size maps into ordered per-file deltas
# ============================================================================

from typing import Iterable, List, Mapping, Sequence

from sizecompare.models import FileDelta


def ordered_union(*key_groups: Iterable[str]) -> List[str]:
    """Return unique keys in first-seen order across all groups."""
    seen = {}
    for group in key_groups:
        for key in group:
            seen.setdefault(key, None)
    return list(seen)


def reconcile(before: Mapping[str, int], after: Mapping[str, int]) -> List[FileDelta]:
    """
    Compare two size maps file by file.

    Filenames from ``before`` come first, then names only present in
    ``after``. A name missing from either side counts as size 0, so a
    removed file shows up with ``size == 0`` and a new one with
    ``previous == 0``.

    Args:
        before: Baseline sizes
        after: Sizes measured for the current build

    Returns:
        One FileDelta per distinct filename
    """
    return [
        FileDelta(
            filename=name,
            previous=before.get(name) or 0,
            size=after.get(name) or 0,
        )
        for name in ordered_union(before, after)
    ]


def changed_files(deltas: Sequence[FileDelta]) -> List[FileDelta]:
    """Return only the deltas whose size changed."""
    return [delta for delta in deltas if delta.changed]
