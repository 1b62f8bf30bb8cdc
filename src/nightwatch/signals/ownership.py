"""Ownership fingerprint: who has been touching the changed files.

The bus factor here is a coarse estimate built from commit authorship over a
lookback window:

  - top author holds more than 60% of commits  -> 1
  - top two authors hold more than 75%          -> 2
  - otherwise                                   -> 3
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable

from nightwatch.exceptions import CollaboratorError
from nightwatch.models import CommitInfo, FailurePolicy

logger = logging.getLogger(__name__)

MAX_CONTRIBUTORS = 8
DEFAULT_LOOKBACK_DAYS = 180

SINGLE_OWNER_SHARE = 0.60
TOP_TWO_SHARE = 0.75

AuthorsOfFile = Callable[[str, int], list[str]]


@dataclass(frozen=True)
class OwnershipFingerprint:
    """Ranked contributors and the derived bus factor."""

    contributors: list[str] = field(default_factory=list)
    bus_factor: int = 1
    top_share: float = 0.0


def bus_factor_from_counts(counts: list[int]) -> int:
    """Bus factor for commit counts sorted in descending order."""
    total = sum(counts)
    if total <= 0:
        return 1
    if counts[0] / total > SINGLE_OWNER_SHARE:
        return 1
    top_two = sum(counts[:2])
    return 2 if top_two / total > TOP_TWO_SHARE else 3


def analyze_ownership(
    files: Iterable[str],
    authors_of_file: AuthorsOfFile,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    on_lookup_failure: FailurePolicy = FailurePolicy.SKIP,
) -> OwnershipFingerprint:
    """Tally commit authorship across the changed files.

    ``authors_of_file(path, lookback_days)`` returns one author name per commit
    that touched the path inside the window. A failing lookup either drops that
    file (SKIP) or is raised as a CollaboratorError (ABORT).
    """
    tally: Counter[str] = Counter()

    for path in files:
        try:
            names = authors_of_file(path, lookback_days)
        except Exception as e:
            if on_lookup_failure is FailurePolicy.ABORT:
                if isinstance(e, CollaboratorError):
                    raise
                raise CollaboratorError(f"History lookup for {path}", str(e)) from e
            logger.warning("Skipping ownership of %s: %s", path, e)
            continue
        for name in names:
            if name:
                tally[name] += 1

    # Counter keeps insertion order and sorted() is stable, so ties stay first-seen
    ranked = sorted(tally.items(), key=lambda item: item[1], reverse=True)
    counts = [count for _, count in ranked]
    total = sum(counts)

    return OwnershipFingerprint(
        contributors=[name for name, _ in ranked[:MAX_CONTRIBUTORS]],
        bus_factor=bus_factor_from_counts(counts),
        top_share=counts[0] / total if total else 0.0,
    )


def contributor_mentions(contributors: list[str], commits: Iterable[CommitInfo]) -> list[str]:
    """Swap author names for ``@login`` handles where the change's commits reveal them."""
    name_to_login: dict[str, str] = {}
    for commit in commits:
        if commit.author_login and commit.author_name:
            name_to_login[commit.author_name.lower()] = f"@{commit.author_login}"

    mentions: list[str] = []
    for name in contributors:
        mention = name_to_login.get(name.lower(), name)
        if mention not in mentions:
            mentions.append(mention)
    return mentions
