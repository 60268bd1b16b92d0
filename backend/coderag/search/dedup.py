"""Removal of overlapping hits from ranked search results."""

from __future__ import annotations

from typing import List

from ..core import SearchHit

OVERLAP_THRESHOLD = 0.5


def overlap_length(a: SearchHit, b: SearchHit) -> int:
    """Number of lines shared by two hits' ranges (inclusive bounds)."""
    return max(0, min(a.end_line, b.end_line) - max(a.start_line, b.start_line) + 1)


def is_overlapping(a: SearchHit, b: SearchHit) -> bool:
    """True when both hits cover mostly the same region of the same file.

    Hits overlap when they share more than half of the lines of either range.
    Exactly half is not enough.
    """
    if a.file_path != b.file_path:
        return False
    shared = overlap_length(a, b)
    if shared == 0:
        return False
    return shared > a.line_count * OVERLAP_THRESHOLD or shared > b.line_count * OVERLAP_THRESHOLD


def deduplicate_results(hits: List[SearchHit]) -> List[SearchHit]:
    """Drop hits overlapping an earlier kept hit.

    ``hits`` is expected best-first, so the highest scoring hit of each
    overlapping group survives. Order is preserved.
    """
    kept: List[SearchHit] = []
    for hit in hits:
        if any(is_overlapping(existing, hit) for existing in kept):
            continue
        kept.append(hit)
    return kept
