"""Markdown renderer for the PR risk report.

Produces a GitHub-flavored markdown comment:
  - Score header and metric table (risk, fatigue, risky files, status, changes)
  - Possible conflicts with other open PRs
  - Sensitive artifacts
  - Contributors and bus factor

The first line is REPORT_MARKER so an existing comment can be found and
replaced instead of posting a duplicate.
"""

from __future__ import annotations

from nightwatch.patterns import DEFAULT_PATTERNS_FILE, PATTERNS_FILE_ENV
from nightwatch.report.models import RiskReport, status_label
from nightwatch.signals import BlastRadius, ConflictOverlap, SensitiveFinding

REPORT_MARKER = "<!-- pr-nightwatch-report -->"
PROJECT_URL = "https://github.com/Voyrox/Nightwatch"


def render_report(report: RiskReport) -> str:
    """Render the full report. Identical reports render to identical text."""
    sections: list[str] = [REPORT_MARKER]

    subject = f"#{report.change_id}, " if report.change_id is not None else ""
    sections.append(
        f"## Report: {subject}Commits: {report.commit_count} "
        f"— Score: **{report.adjusted_score}%**"
    )
    sections.append("")
    sections.extend(_metric_table(report))
    sections.append("")

    if report.conflicts:
        sections.extend(_conflicts_block(report.conflicts))
        sections.append("")

    if report.sensitive:
        sections.extend(_sensitive_block(report.sensitive))
        sections.append("")

    next_steps = _next_steps(report)
    if next_steps:
        sections.append(next_steps)
        sections.append("")

    sections.append("> [!TIP]")
    contributors = ", ".join(f"`{c}`" for c in report.mentions) or "_none found_"
    sections.append(
        f"> Contributors: {contributors} | Bus factor: "
        f"**{report.ownership.bus_factor}** ({report.bus_severity.badge})"
    )
    sections.append("")
    sections.append(_footer(report.version))
    return "\n".join(sections)


def domain_summary(blast_radius: BlastRadius) -> str:
    """One-line ``Label (count)`` summary of the affected domains."""
    if not blast_radius.affects_with_counts:
        return "—"
    return ", ".join(f"{d.label} ({d.count})" for d in blast_radius.affects_with_counts)


def _metric_table(report: RiskReport) -> list[str]:
    fatigue = report.fatigue
    if fatigue.fatigue:
        fatigue_cell = (
            f"⚠️ Fatigue detected (**{fatigue.late_week_count}** late-night commits in last 7 days)"
        )
    else:
        fatigue_cell = (
            f"✅ No fatigue detected (late-night commits last 7d: **{fatigue.late_week_count}**)"
        )

    risky = report.blast_radius.risky
    rows = [
        "| Metric  | Result |",
        "| ------------- | ------------- |",
        f"| Risk Assessment  | {report.risk_level.badge} |",
        f"| Fatigue  | {fatigue_cell} |",
        f"| Risky Files | {f'⚠️ {risky}' if risky > 0 else '✅ 0'} |",
    ]
    if report.has_tests:
        touched = "✅ Yes" if report.safety.tests_touched else "⚠️ No"
        rows.append(f"| Tests Touched | {touched} |")
    rows.append(f"| Status | {status_label(report.adjusted_score, bool(report.sensitive))} |")
    rows.append(
        f"| Changes | `{report.blast_radius.files_changed}` files "
        f"(`+{report.additions}`) / (`-{report.deletions}`) |"
    )
    rows.append(f"| Affects | {domain_summary(report.blast_radius)} |")
    return rows


def _conflicts_block(conflicts: list[ConflictOverlap]) -> list[str]:
    lines = ["> [!WARNING]", "> Possible Conflicts:"]
    for c in conflicts:
        lines.append(f"> - PR #{c.change_id} “{c.title}” (Edited **{c.overlap_count}** same files)")
    return lines


def _sensitive_block(findings: list[SensitiveFinding]) -> list[str]:
    lines = ["> [!IMPORTANT]", "> Sensitive Artifacts:"]
    for s in findings:
        lines.append(
            f"> - {s.status} `{s.file}` (Pattern: `{s.matched_pattern}`, Reason: `{s.reason}`)"
        )
    lines.append(">      - Please remove sensitive files and add them to `.gitignore` before merging.")
    lines.append("> ")
    lines.append(
        f"> Patterns from `{DEFAULT_PATTERNS_FILE}` (override with `{PATTERNS_FILE_ENV}`)."
    )
    return lines


def _next_steps(report: RiskReport) -> str | None:
    parts: list[str] = []
    if report.sensitive:
        parts.append("Remove flagged files and add them to `.gitignore`; re-run CI")
    if report.conflicts:
        parts.append("Review overlaps with referenced PRs")
    if not parts:
        return None
    return f"> Next Steps — {'; '.join(parts)}"


def _footer(version: str) -> str:
    return f"Created with [Voyrox/Nightwatch]({PROJECT_URL}) version {version}"
