"""Tests for the file classifier and the signal extractors."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from nightwatch.classifier import (
    CATCH_ALL_DOMAIN,
    compile_domain_rules,
    domain,
    is_public_surface,
    is_risky,
    is_test,
)
from nightwatch.exceptions import CollaboratorError, ConfigError, ConflictDetectionError
from nightwatch.models import CommitInfo, FailurePolicy, OpenChange
from nightwatch.patterns import DEFAULT_PATTERN_SET, PatternRule, PatternSet
from nightwatch.signals import (
    analyze_blast_radius,
    analyze_ownership,
    apply_sensitive_penalty,
    contributor_mentions,
    detect_conflicts,
    detect_fatigue,
    scan,
    score_safety,
)

SYDNEY = ZoneInfo("Australia/Sydney")
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestClassifier:
    def test_domain_rules_first_match(self):
        assert domain(".github/workflows/ci.yml") == "Workflows"
        assert domain(".github/CODEOWNERS") == "Repository Metadata"
        assert domain("README.md") == "Documentation"
        assert domain("docs/intro.md") == "Documentation"

    def test_domain_catch_all(self):
        assert domain("src/app.py") == CATCH_ALL_DOMAIN
        assert domain("") == CATCH_ALL_DOMAIN

    def test_is_test(self):
        assert is_test("test/app.js")
        assert is_test("pkg/test/app.js")
        assert is_test("server/handler_test.go")
        assert not is_test("src/contest.py")

    def test_plural_tests_directory_is_not_a_test_segment(self):
        assert not is_test("tests/helpers.py")
        assert not is_test("pkg/tests/helpers.py")
        assert is_test("tests/handler_test.py")

    def test_compile_domain_rules_drops_bad_regex(self):
        rules = compile_domain_rules([("(", "Broken"), ("^web/", "Frontend")])
        assert [label for _, label in rules] == ["Frontend"]
        assert domain("web/app.tsx", rules) == "Frontend"

    def test_is_public_surface(self):
        assert is_public_surface("api/users.py")
        assert is_public_surface("web/routes/index.ts")
        assert is_public_surface("docs/OpenAPI.yaml")
        assert not is_public_surface("src/api_client.py")

    def test_is_risky(self):
        assert is_risky("src/Auth/session.py")
        assert is_risky("db/migrations/0001.sql")
        assert is_risky("package-lock.json")
        assert is_risky("deploy/k8s/service.yaml")
        assert not is_risky("src/utils.py")


class TestSensitivityScanner:
    def test_allow_rule_wins(self):
        assert scan(DEFAULT_PATTERN_SET, [".env.example", "config/sample.key"]) == []

    def test_dotenv_flagged_with_configured_reason(self):
        (finding,) = scan(DEFAULT_PATTERN_SET, [".env"], {".env": "added"})
        assert finding.file == ".env"
        assert finding.status == "added"
        assert finding.matched_pattern == r"^\.env$"
        assert finding.reason == "Dotenv file"

    def test_status_defaults_to_modified(self):
        (finding,) = scan(DEFAULT_PATTERN_SET, ["keys/server.pem"])
        assert finding.status == "modified"

    def test_one_finding_per_file(self):
        findings = scan(DEFAULT_PATTERN_SET, ["config/secrets.pem", "src/app.py", "debug.log"])
        assert [f.file for f in findings] == ["config/secrets.pem", "debug.log"]
        assert findings[0].reason == "Contains secrets"

    def test_fallback_reason_from_filename(self):
        patterns = PatternSet(banned=(PatternRule(re.compile(r"\.pem$", re.I)),), allowed=())
        (finding,) = scan(patterns, ["keys/server.PEM"])
        assert finding.reason == "private key"

    def test_generic_reason_for_unknown_shape(self):
        patterns = PatternSet(banned=(PatternRule(re.compile(r"\.bin$", re.I)),), allowed=())
        (finding,) = scan(patterns, ["blob.bin"])
        assert finding.reason == r"sensitive (\.bin$)"

    def test_empty_input(self):
        assert scan(DEFAULT_PATTERN_SET, []) == []


class TestOwnership:
    def test_single_owner(self):
        authors = {"a.py": ["alice", "alice"], "b.py": ["alice"]}
        fp = analyze_ownership(["a.py", "b.py"], lambda p, d: authors[p])
        assert fp.bus_factor == 1
        assert fp.top_share == 1.0
        assert fp.contributors == ["alice"]

    def test_three_equal_authors(self):
        fp = analyze_ownership(["a.py"], lambda p, d: ["alice", "bob", "carol"])
        assert fp.bus_factor == 3
        assert fp.top_share == pytest.approx(1 / 3)

    def test_two_owners(self):
        fp = analyze_ownership(["a.py"], lambda p, d: ["alice", "bob", "alice", "bob"])
        assert fp.bus_factor == 2

    def test_sixty_percent_is_not_single_owner(self):
        fp = analyze_ownership(["a.py"], lambda p, d: ["alice"] * 3 + ["bob"] * 2)
        assert fp.top_share == pytest.approx(0.6)
        assert fp.bus_factor == 2

    def test_ties_keep_first_seen_order(self):
        authors = {"a.py": ["bob", "alice"], "b.py": ["alice", "bob", "carol"]}
        fp = analyze_ownership(["a.py", "b.py"], lambda p, d: authors[p])
        assert fp.contributors == ["bob", "alice", "carol"]

    def test_contributors_capped(self):
        names = [f"dev{i}" for i in range(12)]
        fp = analyze_ownership(["a.py"], lambda p, d: names)
        assert len(fp.contributors) == 8
        assert fp.contributors[0] == "dev0"

    def test_no_data(self):
        fp = analyze_ownership([], lambda p, d: [])
        assert fp.contributors == []
        assert fp.bus_factor == 1
        assert fp.top_share == 0.0

    def test_lookback_passed_through(self):
        seen = []
        analyze_ownership(["a.py"], lambda p, d: seen.append(d) or [], lookback_days=30)
        assert seen == [30]

    def test_lookup_failure_skipped(self):
        def authors(path, days):
            if path == "broken.py":
                raise OSError("git exploded")
            return ["alice"]

        fp = analyze_ownership(["broken.py", "ok.py"], authors)
        assert fp.contributors == ["alice"]

    def test_lookup_failure_abort(self):
        def authors(path, days):
            raise OSError("git exploded")

        with pytest.raises(CollaboratorError):
            analyze_ownership(["a.py"], authors, on_lookup_failure=FailurePolicy.ABORT)

    def test_contributor_mentions(self):
        commits = [
            CommitInfo("alice-gh", "Alice", NOW),
            CommitInfo(None, "Bob", NOW),
            CommitInfo("al", "ALICE", NOW),
        ]
        assert contributor_mentions(["alice", "Bob", "Carol"], commits) == ["@al", "Bob", "Carol"]

    def test_mentions_deduplicated(self):
        commits = [CommitInfo("ally", "Alice A"), CommitInfo("ally", "alice")]
        assert contributor_mentions(["Alice A", "alice"], commits) == ["@ally"]


class TestFatigue:
    def _late(self, days_ago: int, hour: int) -> datetime:
        local = (NOW.astimezone(SYDNEY) - timedelta(days=days_ago)).replace(
            hour=hour, minute=15, second=0, microsecond=0
        )
        return local

    def test_three_late_commits_is_fatigue(self):
        stamps = [self._late(1, 1), self._late(2, 3), self._late(3, 4)]
        signal = detect_fatigue(stamps, NOW, "Australia/Sydney")
        assert signal.fatigue is True
        assert signal.late_week_count == 3

    def test_two_late_commits_is_not(self):
        stamps = [self._late(1, 1), self._late(2, 3), self._late(2, 14)]
        signal = detect_fatigue(stamps, NOW, "Australia/Sydney")
        assert signal.fatigue is False
        assert signal.late_week_count == 2

    def test_five_am_is_not_late(self):
        assert detect_fatigue([self._late(1, 5)], NOW).late_week_count == 0

    def test_old_commits_ignored(self):
        stamps = [self._late(9, 1), self._late(10, 2), self._late(11, 3)]
        assert detect_fatigue(stamps, NOW).late_week_count == 0

    def test_hour_read_in_configured_zone(self):
        # 02:00 UTC is 13:00 in Sydney (AEDT)
        stamps = [datetime(2026, 10, 18, 2, 0, tzinfo=timezone.utc)] * 3
        assert detect_fatigue(stamps, NOW, "UTC").fatigue is True
        assert detect_fatigue(stamps, NOW, "Australia/Sydney").fatigue is False

    def test_naive_timestamps_are_utc(self):
        stamps = [datetime(2026, 10, 18, 2, 0)] * 3
        assert detect_fatigue(stamps, NOW, "UTC").late_week_count == 3

    def test_unknown_zone(self):
        with pytest.raises(ConfigError):
            detect_fatigue([], NOW, "Mars/Olympus_Mons")

    def test_empty(self):
        signal = detect_fatigue([], NOW)
        assert (signal.fatigue, signal.late_week_count) == (False, 0)


class TestSafetyScore:
    def test_no_files_stays_perfect(self):
        assert score_safety([], 0, 0).score == 100

    def test_single_plain_file(self):
        result = score_safety(["src/app.py"], 0, 0)
        assert result.score == 89
        assert result.tests_touched is False

    def test_all_terms(self):
        files = ["src/auth/login.py", "test/test_login.py"]
        result = score_safety(files, 600, 0)
        # 100 - 2 files - 6 risky + 10 tests - 5 churn
        assert result.score == 97
        assert result.risky_files == 1
        assert result.tests_touched is True

    def test_public_surface_penalty(self):
        result = score_safety(["api/users.py"], 0, 0)
        assert result.public_touched is True
        assert result.score == 100 - 1 - 15 - 10

    def test_clamped_at_zero(self):
        files = [f"api/auth/handler{i}.py" for i in range(100)]
        assert score_safety(files, 100_000, 100_000).score == 0

    def test_clamped_at_hundred(self):
        assert score_safety(["test/test_a.py"], 0, 0).score == 100

    def test_plural_tests_directory_counts_as_untested(self):
        result = score_safety(["tests/helpers.py"], 0, 0)
        assert result.tests_touched is False
        assert result.score == 89

    def test_churn_penalty_capped(self):
        low = score_safety(["src/a.py"], 2000, 0).score
        high = score_safety(["src/a.py"], 50_000, 0).score
        assert low == high == 89 - 20

    def test_sensitive_penalty(self):
        assert apply_sensitive_penalty(90, ["x"]) == 80
        assert apply_sensitive_penalty(90, []) == 90
        assert apply_sensitive_penalty(4, ["x"]) == 0


class TestBlastRadius:
    def test_ranked_by_count(self):
        rules = compile_domain_rules([("^a/", "a"), ("^b/", "b")])
        br = analyze_blast_radius(["a/x.js", "a/y.js", "b/z.js"], rules)
        assert br.affects == ["a", "b"]
        assert [(d.name, d.count, d.label) for d in br.affects_with_counts] == [
            ("a", 2, "A"),
            ("b", 1, "B"),
        ]
        assert br.files_changed == 3

    def test_ties_keep_first_encountered(self):
        rules = compile_domain_rules([("^a/", "a"), ("^b/", "b")])
        assert analyze_blast_radius(["b/1", "a/1"], rules).affects == ["b", "a"]

    def test_capped_at_six(self):
        labels = [f"d{i}" for i in range(8)]
        rules = compile_domain_rules([(f"^{name}/", name) for name in labels])
        br = analyze_blast_radius([f"{name}/f" for name in labels], rules)
        assert len(br.affects) == 6

    def test_default_rules_and_risky(self):
        br = analyze_blast_radius([".github/workflows/ci.yml", "src/auth.py", "src/app.py"])
        assert br.affects == ["Primary Codebase", "Workflows"]
        assert br.risky == 1

    def test_empty(self):
        br = analyze_blast_radius([])
        assert (br.affects, br.risky, br.files_changed) == ([], 0, 0)


class TestConflicts:
    def test_overlap_count(self):
        overlaps = detect_conflicts(
            1, ["f1", "f2"], [OpenChange(2, "Other")], lambda cid: ["f2", "f3"]
        )
        assert len(overlaps) == 1
        assert overlaps[0].change_id == 2
        assert overlaps[0].overlap_count == 1

    def test_current_change_excluded(self):
        calls = []
        detect_conflicts(
            1, ["f1"], [OpenChange(1, "Self")], lambda cid: calls.append(cid) or ["f1"]
        )
        assert calls == []

    def test_ranked_and_capped(self):
        files = {cid: [f"f{i}" for i in range(cid)] for cid in range(2, 10)}
        changes = [OpenChange(cid, f"PR {cid}") for cid in files]
        overlaps = detect_conflicts(1, [f"f{i}" for i in range(20)], changes, files.__getitem__)
        assert [o.change_id for o in overlaps] == [9, 8, 7, 6, 5]

    def test_only_first_thirty_considered(self):
        calls = []

        def files_of(cid):
            calls.append(cid)
            return ["shared"]

        changes = [OpenChange(cid, "") for cid in range(2, 50)]
        detect_conflicts(1, ["shared"], changes, files_of)
        assert len(calls) == 30

    def test_no_overlap_not_reported(self):
        assert detect_conflicts(1, ["a"], [OpenChange(2, "")], lambda cid: ["b"]) == []

    def test_fetch_failure_skipped(self):
        def files_of(cid):
            if cid == 2:
                raise RuntimeError("HTTP 502")
            return ["a"]

        overlaps = detect_conflicts(1, ["a"], [OpenChange(2, ""), OpenChange(3, "")], files_of)
        assert [o.change_id for o in overlaps] == [3]

    def test_fetch_failure_abort(self):
        def files_of(cid):
            raise RuntimeError("HTTP 502")

        with pytest.raises(ConflictDetectionError) as exc:
            detect_conflicts(
                1, ["a"], [OpenChange(2, "")], files_of, on_fetch_failure=FailurePolicy.ABORT
            )
        assert exc.value.change_id == 2
