"""Shared test fixtures for Nightwatch."""

from __future__ import annotations

import json
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

from nightwatch.config import NightwatchConfig
from nightwatch.context import RunContext
from nightwatch.models import ChangedFile, CommitInfo, DiffStats, OpenChange
from nightwatch.patterns import DEFAULT_PATTERN_SET

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeHistory:
    """In-memory HistorySource."""

    def __init__(
        self,
        files: list[ChangedFile] | None = None,
        authors: dict[str, list[str]] | None = None,
        timestamps: list[datetime] | None = None,
        additions: int = 0,
        deletions: int = 0,
        has_tests: bool = True,
        commits: int = 1,
    ):
        self.files = files or []
        self.authors = authors or {}
        self.timestamps = timestamps or []
        self.additions = additions
        self.deletions = deletions
        self.has_tests = has_tests
        self.commits = commits
        self.author_lookups: list[str] = []

    def diff_stats(self, base_ref: str) -> DiffStats:
        return DiffStats([f.path for f in self.files], self.additions, self.deletions)

    def changed_files(self, base_ref: str) -> list[ChangedFile]:
        return list(self.files)

    def authors_of_file(self, path: str, lookback_days: int) -> list[str]:
        self.author_lookups.append(path)
        value = self.authors.get(path, [])
        if isinstance(value, Exception):
            raise value
        return value

    def recent_commit_timestamps(self, limit: int) -> list[datetime]:
        return self.timestamps[:limit]

    def commit_count(self, base_ref: str) -> int:
        return self.commits

    def has_test_files(self) -> bool:
        return self.has_tests


class FakeChanges:
    """In-memory ChangeSource that counts file-list fetches."""

    def __init__(
        self,
        files_by_change: dict[int, list[ChangedFile]],
        open_changes: list[OpenChange] | None = None,
        commits: list[CommitInfo] | None = None,
        failing: set[int] | None = None,
    ):
        self.files_by_change = files_by_change
        self.open_changes = open_changes or []
        self.commits = commits or []
        self.failing = failing or set()
        self.fetches: list[int] = []

    def list_changed_files(self, change_id: int) -> list[ChangedFile]:
        self.fetches.append(change_id)
        if change_id in self.failing:
            raise RuntimeError(f"HTTP 502 for #{change_id}")
        return list(self.files_by_change.get(change_id, []))

    def list_open_changes(self) -> list[OpenChange]:
        return list(self.open_changes)

    def list_commits(self, change_id: int) -> list[CommitInfo]:
        return list(self.commits)


class FakeSink:
    def __init__(self) -> None:
        self.posted: list[tuple[int, str, str]] = []

    def upsert_comment(self, change_id: int, body: str, marker: str) -> str:
        action = "updated" if self.posted else "created"
        self.posted.append((change_id, body, marker))
        return action


class FakeRunner:
    """Stands in for subprocess.run; answers by matching a substring of the command."""

    def __init__(self, responses: dict[str, tuple[int, str]] | None = None):
        self.responses = responses or {}
        self.calls: list[list[str]] = []

    def __call__(self, cmd, **kwargs) -> subprocess.CompletedProcess:
        self.calls.append(list(cmd))
        joined = " ".join(cmd)
        for needle, (code, stdout) in self.responses.items():
            if needle in joined:
                return subprocess.CompletedProcess(cmd, code, stdout, "boom" if code else "")
        return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def pr_files() -> list[ChangedFile]:
    return [
        ChangedFile("src/auth/login.py", "modified", 40, 10),
        ChangedFile("test/test_login.py", "added", 30, 0),
        ChangedFile(".env", "added", 2, 0),
        ChangedFile(".github/workflows/ci.yml", "modified", 5, 1),
    ]


@pytest.fixture
def fake_history(pr_files) -> FakeHistory:
    return FakeHistory(
        files=pr_files,
        authors={
            "src/auth/login.py": ["Alice", "Alice", "Bob"],
            "test/test_login.py": ["Alice"],
            ".github/workflows/ci.yml": ["Carol"],
        },
        additions=77,
        deletions=11,
    )


@pytest.fixture
def fake_changes(pr_files) -> FakeChanges:
    return FakeChanges(
        files_by_change={
            42: pr_files,
            7: [ChangedFile("src/auth/login.py"), ChangedFile("README.md")],
            9: [ChangedFile("docs/guide.md")],
        },
        open_changes=[
            OpenChange(42, "Harden login"),
            OpenChange(7, "Refactor auth"),
            OpenChange(9, "Docs"),
        ],
        commits=[CommitInfo("alice-gh", "Alice", NOW)],
    )


@pytest.fixture
def run_context(fake_history, fake_changes) -> RunContext:
    return RunContext(
        config=NightwatchConfig(),
        history=fake_history,
        changes=fake_changes,
        patterns=DEFAULT_PATTERN_SET,
        now=NOW,
    )


@pytest.fixture
def event_file(tmp_path: Path) -> Path:
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "repository": {"name": "shop", "owner": {"login": "acme"}},
        "pull_request": {"number": 42, "base": {"ref": "develop"}},
    }))
    return path
