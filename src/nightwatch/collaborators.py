"""Interfaces of the external data providers the report is built from.

The signal extractors never touch git or the network; the pipeline pulls data
through these protocols so tests can hand in plain fakes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from nightwatch.models import ChangedFile, CommitInfo, DiffStats, OpenChange


class ChangeSource(Protocol):
    """Pull request metadata from the hosting service."""

    def list_changed_files(self, change_id: int) -> list[ChangedFile]: ...

    def list_open_changes(self) -> list[OpenChange]: ...

    def list_commits(self, change_id: int) -> list[CommitInfo]: ...


class HistorySource(Protocol):
    """Local repository history."""

    def diff_stats(self, base_ref: str) -> DiffStats: ...

    def changed_files(self, base_ref: str) -> list[ChangedFile]: ...

    def authors_of_file(self, path: str, lookback_days: int) -> list[str]: ...

    def recent_commit_timestamps(self, limit: int) -> list[datetime]: ...

    def commit_count(self, base_ref: str) -> int: ...

    def has_test_files(self) -> bool: ...


class ReportSink(Protocol):
    """Where the rendered report ends up."""

    def upsert_comment(self, change_id: int, body: str, marker: str) -> str: ...
