"""Shared data types passed between collaborators and signal extractors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

ADDED = "added"
MODIFIED = "modified"
DELETED = "deleted"
RENAMED = "renamed"

FILE_STATUSES = (ADDED, MODIFIED, DELETED, RENAMED)

# git --name-status letters
_GIT_STATUS_LETTERS = {
    "A": ADDED,
    "M": MODIFIED,
    "D": DELETED,
    "R": RENAMED,
    "C": ADDED,  # copy shows up as a new path
    "T": MODIFIED,
}

# GitHub's pulls/{n}/files "status" field
_GITHUB_STATUSES = {
    "added": ADDED,
    "modified": MODIFIED,
    "changed": MODIFIED,
    "removed": DELETED,
    "renamed": RENAMED,
    "copied": ADDED,
    "unchanged": MODIFIED,
}


def normalize_status(raw: str | None) -> str:
    """Map a git letter or a GitHub status word onto one of FILE_STATUSES."""
    if not raw:
        return MODIFIED
    value = raw.strip()
    if value.lower() in _GITHUB_STATUSES:
        return _GITHUB_STATUSES[value.lower()]
    return _GIT_STATUS_LETTERS.get(value[:1].upper(), MODIFIED)


class FailurePolicy(str, Enum):
    """What to do when one external lookup fails."""

    SKIP = "skip"  # Drop that item and keep going
    ABORT = "abort"  # Propagate the failure


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by a change."""

    path: str
    status: str = MODIFIED  # 'added', 'modified', 'deleted', 'renamed'
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class OpenChange:
    """Another in-flight change (an open pull request)."""

    id: int
    title: str = ""


@dataclass(frozen=True)
class CommitInfo:
    """One commit of the change under evaluation."""

    author_login: str | None
    author_name: str | None
    timestamp: datetime | None = None


@dataclass(frozen=True)
class DiffStats:
    """Aggregate line counts of a diff against the base branch."""

    files: list[str] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0

    @property
    def churn(self) -> int:
        return self.additions + self.deletions
