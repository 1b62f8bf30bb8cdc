"""Blast radius: which domains a change reaches, ranked by concentration."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from nightwatch.classifier import DEFAULT_DOMAIN_RULES, DomainRule, domain, is_risky

MAX_DOMAINS = 6


@dataclass(frozen=True)
class DomainCount:
    name: str
    count: int
    label: str


@dataclass(frozen=True)
class BlastRadius:
    affects: list[str] = field(default_factory=list)
    affects_with_counts: list[DomainCount] = field(default_factory=list)
    risky: int = 0
    files_changed: int = 0


def _label(name: str) -> str:
    return name[:1].upper() + name[1:]


def analyze_blast_radius(
    files: Sequence[str],
    rules: Sequence[DomainRule] = DEFAULT_DOMAIN_RULES,
) -> BlastRadius:
    """Group files by domain and keep the busiest ones."""
    per_domain: Counter[str] = Counter(domain(f, rules) for f in files)
    # Stable sort: equal counts keep first-encountered order
    ranked = sorted(per_domain.items(), key=lambda item: item[1], reverse=True)[:MAX_DOMAINS]

    return BlastRadius(
        affects=[name for name, _ in ranked],
        affects_with_counts=[DomainCount(name, count, _label(name)) for name, count in ranked],
        risky=sum(1 for f in files if is_risky(f)),
        files_changed=len(files),
    )
