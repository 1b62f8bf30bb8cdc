"""Local git collaborator.

Reads diff stats, per-file authorship and recent commit times from the
checked-out repository via the ``git`` CLI (no GitPython dependency).
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from nightwatch.classifier import is_test
from nightwatch.exceptions import CollaboratorError
from nightwatch.models import (
    ADDED,
    DELETED,
    MODIFIED,
    RENAMED,
    ChangedFile,
    DiffStats,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass
class _FileDiff:
    path: str
    status: str = MODIFIED
    old_path: str | None = None
    added_lines: int = 0
    deleted_lines: int = 0

    def to_changed_file(self) -> ChangedFile:
        return ChangedFile(self.path, self.status, self.added_lines, self.deleted_lines)


def parse_diff(diff_text: str) -> list[ChangedFile]:
    """Parse unified diff text into one ChangedFile per file section."""
    files: list[_FileDiff] = []
    current: _FileDiff | None = None
    in_hunk = False

    for line in diff_text.splitlines():
        # New file header
        if line.startswith("diff --git"):
            if current:
                files.append(current)
            parts = line.split(" b/")
            current = _FileDiff(path=parts[-1] if len(parts) > 1 else "")
            in_hunk = False
            continue

        if current is None:
            continue

        if not in_hunk:
            if line.startswith("new file"):
                current.status = ADDED
            elif line.startswith("deleted file"):
                current.status = DELETED
            elif line.startswith("rename from"):
                current.old_path = line.split("rename from ")[-1]
                current.status = RENAMED
            elif line.startswith("rename to"):
                current.path = line.split("rename to ")[-1]
            elif line.startswith("+++ b/"):
                current.path = line[6:]
            elif line.startswith("--- a/") and current.status == DELETED:
                current.path = line[6:]

        if line.startswith("@@"):
            in_hunk = True
        elif in_hunk:
            if line.startswith("+"):
                current.added_lines += 1
            elif line.startswith("-"):
                current.deleted_lines += 1

    if current:
        files.append(current)

    return [f.to_changed_file() for f in files]


def parse_numstat(output: str) -> DiffStats:
    """Sum ``git diff --numstat`` output. Binary files ("-") count as zero lines."""
    files: list[str] = []
    additions = deletions = 0
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        added, deleted, path = parts[0], parts[1], parts[-1]
        files.append(path)
        additions += int(added) if added.isdigit() else 0
        deletions += int(deleted) if deleted.isdigit() else 0
    return DiffStats(files=files, additions=additions, deletions=deletions)


class GitRepository:
    """History source backed by the ``git`` CLI."""

    def __init__(self, root: Path, runner: Runner = subprocess.run, timeout: int = 30):
        self.root = Path(root)
        self._runner = runner
        self._timeout = timeout

    def _run_git(self, args: list[str]) -> str:
        try:
            result = self._runner(
                ["git"] + args,
                cwd=self.root,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise CollaboratorError(f"git {args[0]}", str(e)) from e
        if result.returncode != 0:
            raise CollaboratorError(f"git {' '.join(args)}", result.stderr.strip())
        return result.stdout

    @staticmethod
    def _range(base_ref: str) -> str:
        return f"origin/{base_ref}...HEAD"

    def fetch_base(self, base_ref: str) -> bool:
        """Best-effort shallow fetch of the base branch so the diff range resolves."""
        try:
            self._run_git(["fetch", "origin", base_ref, "--depth=1"])
            return True
        except CollaboratorError as e:
            logger.info("Could not fetch origin/%s: %s", base_ref, e)
            return False

    def diff_stats(self, base_ref: str) -> DiffStats:
        return parse_numstat(self._run_git(["diff", "--numstat", self._range(base_ref)]))

    def changed_files(self, base_ref: str) -> list[ChangedFile]:
        return parse_diff(self._run_git(["diff", self._range(base_ref)]))

    def authors_of_file(self, path: str, lookback_days: int) -> list[str]:
        """One author name per commit touching ``path`` within the window."""
        out = self._run_git(
            ["log", f"--since={lookback_days}.days", "--format=%an", "--", path]
        )
        return [name for name in out.splitlines() if name.strip()]

    def recent_commit_timestamps(self, limit: int = 50) -> list[datetime]:
        out = self._run_git(["log", "-n", str(limit), "--pretty=%ct"])
        stamps: list[datetime] = []
        for line in out.split():
            if line.isdigit():
                stamps.append(datetime.fromtimestamp(int(line), tz=timezone.utc))
        return stamps

    def commit_count(self, base_ref: str) -> int:
        out = self._run_git(["rev-list", "--count", f"origin/{base_ref}..HEAD"])
        return int(out.strip() or 0)

    def has_test_files(self) -> bool:
        return any(is_test(p) for p in self._run_git(["ls-files"]).splitlines())
