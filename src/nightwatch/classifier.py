"""Path classifiers shared by the signal extractors.

Every function here is pure and total: any string maps to a domain, and the
predicates never raise.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

logger = logging.getLogger(__name__)

CATCH_ALL_DOMAIN = "Primary Codebase"

DomainRule = tuple[re.Pattern[str], str]

# First match wins
DEFAULT_DOMAIN_RULES: tuple[DomainRule, ...] = (
    (re.compile(r"^\.github/workflows/"), "Workflows"),
    (re.compile(r"^\.github/"), "Repository Metadata"),
    (re.compile(r"^docs/"), "Documentation"),
    (re.compile(r"^README\.md$"), "Documentation"),
)

_TEST_RE = re.compile(r"(^test/|/test/|_test\.)")
_PUBLIC_SURFACE_RE = re.compile(
    r"(^api/|^proto/|^schema/|^public/|^include/|routes/|openapi|swagger)",
    re.IGNORECASE,
)
_RISKY_RE = re.compile(
    r"(auth|billing|payments?|migrations?|infra|terraform|k8s|docker|lock|schema|proto)",
    re.IGNORECASE,
)


def compile_domain_rules(rules: Sequence[tuple[str, str]]) -> tuple[DomainRule, ...]:
    """Compile ``(regex, label)`` string pairs into domain rules.

    Pairs whose regex does not compile are dropped.
    """
    compiled: list[DomainRule] = []
    for pattern, label in rules:
        try:
            compiled.append((re.compile(pattern), label))
        except re.error as e:
            logger.debug("Dropping uncompilable domain rule %r: %s", pattern, e)
    return tuple(compiled)


def domain(path: str, rules: Sequence[DomainRule] = DEFAULT_DOMAIN_RULES) -> str:
    """Return the domain label for a path."""
    for pattern, label in rules:
        if pattern.search(path):
            return label
    return CATCH_ALL_DOMAIN


def is_test(path: str) -> bool:
    return bool(_TEST_RE.search(path))


def is_public_surface(path: str) -> bool:
    """True when the path looks like an API, schema or other public contract."""
    return bool(_PUBLIC_SURFACE_RE.search(path))


def is_risky(path: str) -> bool:
    """True when the path sits in a high blast-radius area."""
    return bool(_RISKY_RE.search(path))
