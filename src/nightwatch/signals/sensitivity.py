"""Sensitive artifact scanner.

Flags files that look like secrets, credentials or artifacts that should not be
committed. Allow rules are checked first; otherwise the first banned rule in
registration order decides the finding.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from nightwatch.models import MODIFIED
from nightwatch.patterns import PatternRule, PatternSet


@dataclass(frozen=True)
class SensitiveFinding:
    """A changed file that matched a banned pattern."""

    file: str
    status: str
    matched_pattern: str
    reason: str


# Fallback reasons keyed on filename shape, used when a rule has none
_FALLBACK_REASONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\.pem$|\.key$|\.p12$|\.pfx$|\.p8$"), "private key"),
    (re.compile(r"id_rsa"), "ssh private key"),
    (re.compile(r"google-services|serviceaccount"), "cloud credentials"),
    (re.compile(r"\.aws/|credentials"), "credentials"),
    (re.compile(r"\.env"), "dotenv secrets"),
    (re.compile(r"\.db$|\.sqlite$"), "database dump"),
    (re.compile(r"\.log$"), "log output"),
    (re.compile(r"node_modules/"), "vendored dependencies"),
    (re.compile(r"dist/"), "build output"),
    (re.compile(r"\.vscode|\.idea"), "IDE settings"),
    (re.compile(r"coverage|nyc_output"), "coverage output"),
    (re.compile(r"thumbs\.db|\.ds_store"), "OS artifact"),
    (re.compile(r"tfvars"), "terraform secrets"),
    (re.compile(r"docker-compose\.override"), "service credentials"),
)


def reason_for_sensitive(path: str, rule: PatternRule) -> str:
    """Derive a human reason for a match whose rule carries none."""
    lower = path.lower()
    for pattern, reason in _FALLBACK_REASONS:
        if pattern.search(lower):
            return reason
    return f"sensitive ({rule.source})"


def scan(
    pattern_set: PatternSet,
    files: Iterable[str],
    statuses: Mapping[str, str] | None = None,
) -> list[SensitiveFinding]:
    """Return one finding per file that hits a banned rule and no allow rule."""
    statuses = statuses or {}
    findings: list[SensitiveFinding] = []

    for path in files:
        if pattern_set.is_allowed(path):
            continue
        rule = pattern_set.first_banned(path)
        if rule is None:
            continue
        findings.append(
            SensitiveFinding(
                file=path,
                status=statuses.get(path) or MODIFIED,
                matched_pattern=rule.source,
                reason=rule.reason or reason_for_sensitive(path, rule),
            )
        )

    return findings
