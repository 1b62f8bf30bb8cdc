"""Signal extractors. Each one is a pure function of collaborator-supplied data."""

from nightwatch.signals.blast_radius import BlastRadius, DomainCount, analyze_blast_radius
from nightwatch.signals.conflicts import ConflictOverlap, detect_conflicts
from nightwatch.signals.fatigue import FatigueSignal, detect_fatigue
from nightwatch.signals.ownership import (
    OwnershipFingerprint,
    analyze_ownership,
    contributor_mentions,
)
from nightwatch.signals.safety import SafetyScore, apply_sensitive_penalty, score_safety
from nightwatch.signals.sensitivity import SensitiveFinding, scan

__all__ = [
    "BlastRadius",
    "ConflictOverlap",
    "DomainCount",
    "FatigueSignal",
    "OwnershipFingerprint",
    "SafetyScore",
    "SensitiveFinding",
    "analyze_blast_radius",
    "analyze_ownership",
    "apply_sensitive_penalty",
    "contributor_mentions",
    "detect_conflicts",
    "detect_fatigue",
    "scan",
    "score_safety",
]
