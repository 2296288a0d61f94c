"""Tests for staleness classification and prioritization."""

import random

from techpref.models import AnalysisResult, FailingInfo, RemoteInfo, RepositoryRecord
from techpref.scheduling import Candidate, FailureTier, Reason, classify, failure_tier, prioritize

REMOTE = RemoteInfo(default_branch="main", latest_commit="b" * 40)


def analysis(version="v1", commit="b" * 40):
    return AnalysisResult(
        analyzed_version=version,
        analyzed_commit=commit,
        analyzed_commit_date="2026-01-01T00:00:00+00:00",
    )


def candidate(name, reason=Reason.NO_ANALYSIS, tier=FailureTier.NOT_FAILING, file_count=None):
    return Candidate(
        record=RepositoryRecord(name, "u"),
        remote=REMOTE,
        reason=reason,
        tier=tier,
        file_count=file_count,
    )


class TestClassify:
    def test_no_analysis(self):
        assert classify(None, "v1", REMOTE) is Reason.NO_ANALYSIS

    def test_version_mismatch(self):
        assert classify(analysis(version="v0"), "v1", REMOTE) is Reason.VERSION_MISMATCH

    def test_version_checked_before_commit(self):
        stale = analysis(version="v0", commit="a" * 40)
        assert classify(stale, "v1", REMOTE) is Reason.VERSION_MISMATCH

    def test_commit_mismatch(self):
        assert classify(analysis(commit="a" * 40), "v1", REMOTE) is Reason.COMMIT_MISMATCH

    def test_up_to_date(self):
        assert classify(analysis(), "v1", REMOTE) is None


class TestFailureTier:
    def test_not_failing(self):
        assert failure_tier(None, REMOTE) is FailureTier.NOT_FAILING

    def test_failed_at_older_revision(self):
        assert failure_tier(FailingInfo("a" * 40), REMOTE) is FailureTier.FAILED_AT_OLDER_REVISION

    def test_failing_at_current_revision(self):
        assert failure_tier(FailingInfo("b" * 40), REMOTE) is FailureTier.FAILING_AT_CURRENT_REVISION


class TestPrioritize:
    def test_reference_ordering(self):
        r1 = candidate("o/r1", Reason.NO_ANALYSIS, file_count=10)
        r2 = candidate("o/r2", Reason.COMMIT_MISMATCH, file_count=5)
        r3 = candidate("o/r3", Reason.NO_ANALYSIS, FailureTier.FAILING_AT_CURRENT_REVISION, 1)

        ordered = prioritize([r3, r2, r1], random.Random(0))
        assert [c.record.full_name for c in ordered] == ["o/r1", "o/r2", "o/r3"]

    def test_older_failure_before_current_failure(self):
        older = candidate("o/older", tier=FailureTier.FAILED_AT_OLDER_REVISION)
        current = candidate("o/current", tier=FailureTier.FAILING_AT_CURRENT_REVISION)
        healthy = candidate("o/healthy", Reason.COMMIT_MISMATCH)

        ordered = prioritize([current, older, healthy], random.Random(0))
        assert [c.record.full_name for c in ordered] == ["o/healthy", "o/older", "o/current"]

    def test_reason_order(self):
        cands = [
            candidate("o/commit", Reason.COMMIT_MISMATCH),
            candidate("o/version", Reason.VERSION_MISMATCH),
            candidate("o/new", Reason.NO_ANALYSIS),
        ]
        ordered = prioritize(cands, random.Random(0))
        assert [c.reason for c in ordered] == [
            Reason.NO_ANALYSIS,
            Reason.VERSION_MISMATCH,
            Reason.COMMIT_MISMATCH,
        ]

    def test_smaller_first_and_unknown_last(self):
        cands = [
            candidate("o/unknown", file_count=None),
            candidate("o/big", file_count=500),
            candidate("o/small", file_count=3),
        ]
        ordered = prioritize(cands, random.Random(0))
        assert [c.record.full_name for c in ordered] == ["o/small", "o/big", "o/unknown"]

    def test_ties_broken_by_injected_random(self):
        names = [f"o/r{i}" for i in range(20)]

        def order(seed):
            cands = [candidate(n, file_count=7) for n in names]
            return [c.record.full_name for c in prioritize(cands, random.Random(seed))]

        assert order(1) == order(1)
        assert sorted(order(1)) == sorted(names)
        assert order(1) != names or order(2) != names
