"""Report data model and the severity levels derived from it."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

from nightwatch import __version__
from nightwatch.signals import (
    BlastRadius,
    ConflictOverlap,
    FatigueSignal,
    OwnershipFingerprint,
    SafetyScore,
    SensitiveFinding,
)

LOW_RISK_MIN_SCORE = 80
MEDIUM_RISK_MIN_SCORE = 50
REVIEW_RECOMMENDED_MAX_SCORE = 50


class RiskLevel(str, Enum):
    """Three-tier risk label for a composite score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_score(cls, score: int) -> RiskLevel:
        if score >= LOW_RISK_MIN_SCORE:
            return cls.LOW
        if score >= MEDIUM_RISK_MIN_SCORE:
            return cls.MEDIUM
        return cls.HIGH

    @property
    def badge(self) -> str:
        return {
            RiskLevel.LOW: "🟢 Low",
            RiskLevel.MEDIUM: "🟠 Medium",
            RiskLevel.HIGH: "🔴 High",
        }[self]


class BusFactorSeverity(str, Enum):
    """How much knowledge redundancy the bus factor implies."""

    LOW = "low"
    MODERATE = "moderate"
    SHARED = "shared"

    @classmethod
    def from_bus_factor(cls, bus_factor: int) -> BusFactorSeverity:
        if bus_factor <= 1:
            return cls.LOW
        if bus_factor == 2:
            return cls.MODERATE
        return cls.SHARED

    @property
    def badge(self) -> str:
        return {
            BusFactorSeverity.LOW: "🚨 Low redundancy",
            BusFactorSeverity.MODERATE: "⚠️ Moderate coverage",
            BusFactorSeverity.SHARED: "✅ Shared knowledge",
        }[self]


def status_label(adjusted_score: int, has_sensitive: bool) -> str:
    if has_sensitive:
        return "⚠️ Sensitive files detected"
    if adjusted_score <= REVIEW_RECOMMENDED_MAX_SCORE:
        return "⚠️ Review recommended"
    return "✅ No major red flags"


@dataclass(frozen=True)
class RiskReport:
    """Everything the renderer needs. Built once per run, never mutated."""

    change_id: int | None  # None for a local diff with no PR
    commit_count: int
    safety: SafetyScore
    adjusted_score: int
    fatigue: FatigueSignal
    blast_radius: BlastRadius
    ownership: OwnershipFingerprint
    additions: int = 0
    deletions: int = 0
    mentions: list[str] = field(default_factory=list)
    sensitive: list[SensitiveFinding] = field(default_factory=list)
    conflicts: list[ConflictOverlap] = field(default_factory=list)
    has_tests: bool = True
    version: str = __version__

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.from_score(self.adjusted_score)

    @property
    def bus_severity(self) -> BusFactorSeverity:
        return BusFactorSeverity.from_bus_factor(self.ownership.bus_factor)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        data["bus_severity"] = self.bus_severity.value
        return data
