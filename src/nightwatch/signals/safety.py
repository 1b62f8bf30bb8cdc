"""Refactor safety score (0-100, higher is safer)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from nightwatch.classifier import is_public_surface, is_risky, is_test

MAX_SCORE = 100
FILES_PENALTY_CAP = 40
RISKY_FILE_PENALTY = 6
RISKY_PENALTY_CAP = 30
PUBLIC_SURFACE_PENALTY = 15
TESTS_ADJUSTMENT = 10
CHURN_STEP = 500
CHURN_STEP_PENALTY = 5
CHURN_PENALTY_CAP = 20
SENSITIVE_PENALTY = 10


@dataclass(frozen=True)
class SafetyScore:
    score: int
    tests_touched: bool
    public_touched: bool
    risky_files: int = 0


def _clamp(value: int) -> int:
    return max(0, min(MAX_SCORE, value))


def score_safety(files: Sequence[str], additions: int, deletions: int) -> SafetyScore:
    """Combine surface area, risk, public surface, tests and churn into a score."""
    if not files:
        return SafetyScore(score=MAX_SCORE, tests_touched=False, public_touched=False)

    score = MAX_SCORE

    score -= min(FILES_PENALTY_CAP, len(files))

    risky_files = sum(1 for f in files if is_risky(f))
    score -= min(RISKY_PENALTY_CAP, risky_files * RISKY_FILE_PENALTY)

    public_touched = any(is_public_surface(f) for f in files)
    if public_touched:
        score -= PUBLIC_SURFACE_PENALTY

    tests_touched = any(is_test(f) for f in files)
    score += TESTS_ADJUSTMENT if tests_touched else -TESTS_ADJUSTMENT

    churn = max(0, additions) + max(0, deletions)
    score -= min(CHURN_PENALTY_CAP, (churn // CHURN_STEP) * CHURN_STEP_PENALTY)

    return SafetyScore(
        score=_clamp(score),
        tests_touched=tests_touched,
        public_touched=public_touched,
        risky_files=risky_files,
    )


def apply_sensitive_penalty(score: int, findings: Sequence, penalty: int = SENSITIVE_PENALTY) -> int:
    """Policy layer on top of the raw score: knock points off when secrets show up."""
    if not findings:
        return score
    return max(0, score - penalty)
