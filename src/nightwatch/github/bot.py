"""PR Nightwatch pipeline: from a pull request event to a posted report.

This is the main entry point for the GitHub Action. It:
1. Resolves the pull request from the Actions event payload
2. Collects changed files, commits and other open PRs
3. Runs every signal extractor and assembles a RiskReport
4. Renders the markdown and upserts it as a PR comment

Usage:
    # In a GitHub Action
    nightwatch report --format github-comment

    # Locally, without GitHub
    nightwatch report --local --base main
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from nightwatch.collaborators import ReportSink
from nightwatch.context import RunContext
from nightwatch.exceptions import CollaboratorError, EventError
from nightwatch.models import ChangedFile, CommitInfo
from nightwatch.report import REPORT_MARKER, RiskReport, render_report
from nightwatch.signals import (
    FatigueSignal,
    analyze_blast_radius,
    analyze_ownership,
    apply_sensitive_penalty,
    contributor_mentions,
    detect_conflicts,
    detect_fatigue,
    scan,
    score_safety,
)

logger = logging.getLogger(__name__)

EVENT_PATH_ENV = "GITHUB_EVENT_PATH"
DEFAULT_BASE_REF = "main"


@dataclass(frozen=True)
class ChangeEvent:
    """The bits of a GitHub event payload the pipeline needs."""

    repo: str
    number: int | None = None
    base_ref: str = DEFAULT_BASE_REF

    @property
    def is_pr(self) -> bool:
        return self.number is not None


def load_event(path: str | Path | None = None) -> ChangeEvent:
    """Read the Actions event payload (GITHUB_EVENT_PATH, default ./event.json)."""
    event_path = Path(path or os.environ.get(EVENT_PATH_ENV) or Path.cwd() / "event.json")
    try:
        event = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise EventError(f"Cannot read event payload {event_path}: {e}") from e

    repository = event.get("repository") or {}
    owner = (repository.get("owner") or {}).get("login")
    name = repository.get("name")
    repo = repository.get("full_name") or (f"{owner}/{name}" if owner and name else "")
    if not repo:
        raise EventError(f"Event payload {event_path} names no repository")

    pull = event.get("pull_request")
    if not pull:
        return ChangeEvent(repo=repo)
    return ChangeEvent(
        repo=repo,
        number=int(pull["number"]),
        base_ref=(pull.get("base") or {}).get("ref") or DEFAULT_BASE_REF,
    )


def developer_state(ctx: RunContext) -> FatigueSignal:
    """Fatigue signal from the latest commits on the checked-out branch."""
    cfg = ctx.config.fatigue
    stamps = ctx.history.recent_commit_timestamps(cfg.commit_limit)
    return detect_fatigue(
        stamps,
        now=ctx.now,
        tz_name=cfg.timezone,
        window_days=cfg.window_days,
        late_start_hour=cfg.late_start_hour,
        late_end_hour=cfg.late_end_hour,
        threshold=cfg.threshold,
    )


def _line_counts(ctx: RunContext, base_ref: str, files: list[ChangedFile]) -> tuple[int, int]:
    try:
        stats = ctx.history.diff_stats(base_ref)
        return stats.additions, stats.deletions
    except CollaboratorError as e:
        logger.warning("Local diff against %s unavailable (%s); using per-file counts", base_ref, e)
        return sum(f.additions for f in files), sum(f.deletions for f in files)


def _has_tests(ctx: RunContext) -> bool:
    try:
        return ctx.history.has_test_files()
    except CollaboratorError as e:
        logger.debug("Could not list repository files: %s", e)
        return True


def build_report(
    ctx: RunContext, change_id: int | None, base_ref: str = DEFAULT_BASE_REF
) -> RiskReport:
    """Run every signal extractor for one change and assemble the report.

    ``change_id`` may be None in local mode, where it is only a label.
    """
    cfg = ctx.config
    commits: list[CommitInfo] = []

    # The file list has to come first: scanner and conflicts depend on it
    if ctx.changes is not None:
        files = ctx.changed_files_of(change_id)
        commits = ctx.changes.list_commits(change_id)
        commit_count = len(commits)
        paths = [f.path for f in files]
        conflicts = detect_conflicts(
            change_id,
            paths,
            ctx.changes.list_open_changes(),
            ctx.paths_of,
            max_considered=cfg.conflicts.max_considered,
            limit=cfg.conflicts.limit,
            on_fetch_failure=cfg.conflicts.on_fetch_failure,
        )
    else:
        files = ctx.history.changed_files(base_ref)
        commit_count = ctx.history.commit_count(base_ref)
        paths = [f.path for f in files]
        conflicts = []

    additions, deletions = _line_counts(ctx, base_ref, files)

    ownership = analyze_ownership(
        paths,
        ctx.history.authors_of_file,
        lookback_days=cfg.ownership.lookback_days,
        on_lookup_failure=cfg.ownership.on_lookup_failure,
    )
    safety = score_safety(paths, additions, deletions)
    sensitive = scan(ctx.patterns, paths, {f.path: f.status for f in files})

    report = RiskReport(
        change_id=change_id,
        commit_count=commit_count,
        safety=safety,
        adjusted_score=apply_sensitive_penalty(
            safety.score, sensitive, cfg.report.sensitive_penalty
        ),
        fatigue=developer_state(ctx),
        blast_radius=analyze_blast_radius(paths, ctx.domain_rules),
        ownership=ownership,
        additions=additions,
        deletions=deletions,
        mentions=contributor_mentions(ownership.contributors, commits),
        sensitive=sensitive,
        conflicts=conflicts,
        has_tests=_has_tests(ctx),
    )
    logger.info(
        "Report for #%s: score %s (raw %s), %d sensitive, %d conflicts",
        change_id, report.adjusted_score, safety.score, len(sensitive), len(conflicts),
    )
    return report


def run_pr_report(
    ctx: RunContext,
    event: ChangeEvent,
    sink: ReportSink | None = None,
) -> dict:
    """Build, render and (when a sink is given) upsert the report for a PR event.

    Returns:
        Dict with 'comment' (markdown), 'report' and 'action'
        ('created', 'updated' or None when nothing was posted).
    """
    if not event.is_pr:
        raise EventError("Event is not a pull request")

    report = build_report(ctx, event.number, event.base_ref)
    comment = render_report(report)

    action = None
    if sink is not None:
        action = sink.upsert_comment(event.number, comment, REPORT_MARKER)

    return {"comment": comment, "report": report, "action": action}
