"""Cross-change conflict detection.

Finds other open changes that edit the same files as the current one. Only the
first ``max_considered`` other changes are inspected so the number of external
file-list fetches stays bounded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from nightwatch.exceptions import ConflictDetectionError
from nightwatch.models import FailurePolicy, OpenChange

logger = logging.getLogger(__name__)

MAX_CONSIDERED = 30
MAX_OVERLAPS = 5


@dataclass(frozen=True)
class ConflictOverlap:
    change_id: int
    title: str
    overlap_count: int


def detect_conflicts(
    current_change_id: int,
    current_files: Iterable[str],
    open_changes: Sequence[OpenChange],
    file_list_of: Callable[[int], Sequence[str]],
    max_considered: int = MAX_CONSIDERED,
    limit: int = MAX_OVERLAPS,
    on_fetch_failure: FailurePolicy = FailurePolicy.SKIP,
) -> list[ConflictOverlap]:
    """Rank other open changes by how many of the current files they also touch."""
    current = set(current_files)
    others = [c for c in open_changes if c.id != current_change_id][:max_considered]

    overlaps: list[ConflictOverlap] = []
    for change in others:
        try:
            other_files = file_list_of(change.id)
        except Exception as e:
            if on_fetch_failure is FailurePolicy.ABORT:
                raise ConflictDetectionError(change.id, str(e)) from e
            logger.warning("Skipping change #%s in conflict check: %s", change.id, e)
            continue

        count = len(current.intersection(other_files))
        if count:
            overlaps.append(ConflictOverlap(change.id, change.title, count))

    overlaps.sort(key=lambda o: o.overlap_count, reverse=True)
    return overlaps[:limit]
