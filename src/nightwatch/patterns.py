"""Sensitive-file pattern registry.

Loads the banned/allowed pattern set: built-in defaults, optionally replaced
per category by a ``dangerous-patterns.yml`` override. The override uses a
minimal list format rather than full YAML so that regex text is taken verbatim:

    banned:
      - ^secrets/
      - pattern: \\.bak$
        reason: Backup file
    allowed:
      - \\.template$

A category of the override replaces the built-in category wholesale when it
yields at least one compilable entry. Anything that goes wrong while reading
the override means "no override".
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

logger = logging.getLogger(__name__)

PATTERNS_FILE_ENV = "DANGEROUS_PATTERNS_FILE"
DEFAULT_PATTERNS_FILE = "dangerous-patterns.yml"

_SECTIONS = ("banned", "allowed")
_PATTERN_LINE = re.compile(r"^-\s+pattern:\s*(.+)$")
_REASON_LINE = re.compile(r"^reason:\s*(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class PatternRule:
    """A compiled, case-insensitive path matcher with an optional reason."""

    matcher: re.Pattern[str]
    reason: str | None = None

    @property
    def source(self) -> str:
        return self.matcher.pattern

    def matches(self, path: str) -> bool:
        return self.matcher.search(path) is not None


@dataclass(frozen=True)
class BarePattern:
    """Override entry given as a bare pattern string."""

    pattern: str


@dataclass(frozen=True)
class PatternWithReason:
    """Override entry given as a pattern/reason pair."""

    pattern: str
    reason: str | None = None


PatternEntry = Union[BarePattern, PatternWithReason]


@dataclass(frozen=True)
class PatternSet:
    """Ordered banned rules plus ordered allow rules. Allow rules win."""

    banned: tuple[PatternRule, ...]
    allowed: tuple[PatternRule, ...]

    def is_allowed(self, path: str) -> bool:
        return any(rule.matches(path) for rule in self.allowed)

    def first_banned(self, path: str) -> PatternRule | None:
        for rule in self.banned:
            if rule.matches(path):
                return rule
        return None


def _rule(pattern: str, reason: str | None = None) -> PatternRule:
    return PatternRule(re.compile(pattern, re.IGNORECASE), reason)


DEFAULT_BANNED: tuple[PatternRule, ...] = (
    _rule(r"^\.env$", "Dotenv file"),
    _rule(r"^\.env\..+$", "Dotenv file"),
    _rule(r"secrets?", "Contains secrets"),
    _rule(r"credentials?", "Contains credentials"),
    _rule(r"\.pem$", "Private key"),
    _rule(r"\.key$", "Private key"),
    _rule(r"\.p12$", "Private key"),
    _rule(r"\.pfx$", "Private key"),
    _rule(r"\.crt$", "Certificate"),
    _rule(r"\.csr$", "Certificate"),
    _rule(r"\.der$", "Certificate"),
    _rule(r"\.jks$", "Keystore"),
    _rule(r"\.p8$", "Private key"),
    _rule(r"id_rsa", "SSH private key"),
    _rule(r"serviceAccountKey\.json$", "Cloud credentials"),
    _rule(r"google-services\.json$", "Mobile app credentials"),
    _rule(r"GoogleService-Info\.plist$", "Mobile app credentials"),
    _rule(r"\.aws/credentials$", "Cloud credentials"),
    _rule(r"\.npmrc$", "Registry credentials"),
    _rule(r"\.pypirc$", "Registry credentials"),
    _rule(r"\.firebase/", "Cloud credentials"),
    _rule(r"\.supabase/", "Cloud credentials"),
    _rule(r"\.expo/", "App credentials"),
    _rule(r"\.gradle/", "Build secrets"),
    _rule(r"\.keystore$", "Keystore"),
    _rule(r"terraform\.tfvars$", "Terraform secrets"),
    _rule(r"docker-compose\.override\.ya?ml$", "Service credentials"),
    _rule(r"config/.*secret.*", "Secrets in config"),
    _rule(r"\.sqlite$", "Local database"),
    _rule(r"\.db$", "Local database"),
    _rule(r"\.log$", "Log output"),
    _rule(r"\.ipynb_checkpoints/", "Notebook checkpoint"),
    _rule(r"\.vscode/settings\.json$", "IDE settings"),
    _rule(r"\.idea/", "IDE settings"),
    _rule(r"node_modules/", "Vendored dependencies"),
    _rule(r"venv/", "Virtualenv"),
    _rule(r"coverage/", "Coverage output"),
    _rule(r"\.nyc_output/", "Coverage output"),
    _rule(r"dist/", "Build output"),
    _rule(r"Thumbs\.db$", "OS artifact"),
    _rule(r"\.DS_Store$", "OS artifact"),
)

DEFAULT_ALLOWED: tuple[PatternRule, ...] = (
    _rule(r"^\.env\.example$"),
    _rule(r"\.example$"),
    _rule(r"sample"),
    _rule(r"fixtures?"),
    _rule(r"test-data"),
)

DEFAULT_PATTERN_SET = PatternSet(banned=DEFAULT_BANNED, allowed=DEFAULT_ALLOWED)


def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a user pattern case-insensitively; None if it is not a valid regex."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.debug("Dropping uncompilable pattern %r: %s", pattern, e)
        return None


def parse_pattern_file(text: str) -> dict[str, list[PatternEntry]]:
    """Parse the minimal two-section list format into pattern entries."""
    out: dict[str, list[PatternEntry]] = {"banned": [], "allowed": []}
    current: str | None = None
    pending: str | None = None  # pattern of a "- pattern:" entry awaiting its reason

    def flush(reason: str | None = None) -> None:
        nonlocal pending
        if pending is not None and current is not None:
            out[current].append(PatternWithReason(pending, reason))
        pending = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if not line[0].isspace() and not stripped.startswith("-") and stripped.endswith(":"):
            flush()
            key = stripped[:-1].strip()
            current = key if key in _SECTIONS else None
            continue

        if current is None:
            continue

        match = _PATTERN_LINE.match(stripped)
        if match:
            flush()
            pending = match.group(1).strip()
            continue

        if stripped.startswith("-"):
            flush()
            value = stripped[1:].strip()
            if value:
                out[current].append(BarePattern(value))
            continue

        match = _REASON_LINE.match(stripped)
        if match and pending is not None:
            flush(match.group(1).strip())

    flush()
    return out


def normalize_entries(entries: Iterable[PatternEntry]) -> tuple[PatternRule, ...]:
    """Turn override entries into rules, dropping the ones that do not compile."""
    rules: list[PatternRule] = []
    for entry in entries:
        matcher = compile_pattern(entry.pattern)
        if matcher is None:
            continue
        reason = entry.reason if isinstance(entry, PatternWithReason) else None
        rules.append(PatternRule(matcher, reason or None))
    return tuple(rules)


def resolve_patterns_path(override_path: str | Path | None = None) -> Path:
    """Where the override file is looked up: argument, then env var, then cwd."""
    if override_path:
        return Path(override_path)
    env_path = os.environ.get(PATTERNS_FILE_ENV)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_PATTERNS_FILE


def load_patterns(override_path: str | Path | None = None) -> PatternSet:
    """Load the active pattern set (built-in defaults plus optional override)."""
    path = resolve_patterns_path(override_path)
    try:
        parsed = parse_pattern_file(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("No pattern override at %s (%s); using defaults", path, e)
        return DEFAULT_PATTERN_SET

    banned = normalize_entries(parsed["banned"])
    allowed = normalize_entries(parsed["allowed"])
    logger.debug(
        "Pattern override %s: %d banned, %d allowed", path, len(banned), len(allowed)
    )
    return PatternSet(
        banned=banned or DEFAULT_BANNED,
        allowed=allowed or DEFAULT_ALLOWED,
    )
