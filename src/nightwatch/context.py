"""Per-run context shared by the pipeline stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from nightwatch.classifier import DEFAULT_DOMAIN_RULES, DomainRule, compile_domain_rules
from nightwatch.collaborators import ChangeSource, HistorySource
from nightwatch.config import NightwatchConfig
from nightwatch.models import ChangedFile
from nightwatch.patterns import PatternSet, load_patterns

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Configuration, collaborators and caches for a single invocation.

    ``changes`` is None in local mode (no hosting service): the file list then
    comes from the local diff and conflict detection is skipped.

    The changed-file cache lives exactly as long as this object.
    """

    config: NightwatchConfig
    history: HistorySource
    changes: ChangeSource | None = None
    patterns: PatternSet | None = None
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _file_cache: dict[int, list[ChangedFile]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.patterns is None:
            self.patterns = load_patterns(self.config.patterns_file)

    @property
    def domain_rules(self) -> tuple[DomainRule, ...]:
        # Configured rules replace the defaults only if at least one compiles
        return compile_domain_rules(self.config.report.domain_rules) or DEFAULT_DOMAIN_RULES

    def changed_files_of(self, change_id: int) -> list[ChangedFile]:
        """Files touched by a change, read through the per-run cache."""
        if self.changes is None:
            raise RuntimeError("No change source configured")
        if self.config.cache_file_lists and change_id in self._file_cache:
            return self._file_cache[change_id]
        files = self.changes.list_changed_files(change_id)
        logger.debug("Change #%s touches %d files", change_id, len(files))
        if self.config.cache_file_lists:
            self._file_cache[change_id] = files
        return files

    def paths_of(self, change_id: int) -> list[str]:
        return [f.path for f in self.changed_files_of(change_id)]
