"""Staleness classification and processing order.

A repository needs analysis when it has no stored result, when its result was
produced by a different rule registry, or when the remote has moved past the
analyzed commit. Work is ordered so that a run makes the most progress before
its budget runs out: repositories that keep failing go last, new ones first,
small ones before large ones.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Optional

from .models import AnalysisResult, FailingInfo, RemoteInfo, RepositoryRecord


class Reason(IntEnum):
    """Why a repository needs analysis, in processing order."""

    NO_ANALYSIS = 0
    VERSION_MISMATCH = 1
    COMMIT_MISMATCH = 2

    @property
    def label(self) -> str:
        return {
            Reason.NO_ANALYSIS: "no analysis",
            Reason.VERSION_MISMATCH: "rules changed",
            Reason.COMMIT_MISMATCH: "new commits",
        }[self]


class FailureTier(IntEnum):
    NOT_FAILING = 0
    FAILED_AT_OLDER_REVISION = 1
    FAILING_AT_CURRENT_REVISION = 2


def classify(
    result: Optional[AnalysisResult], current_version: str, remote: RemoteInfo
) -> Optional[Reason]:
    """Return why the repository needs analysis, or None if it is up to date."""
    if result is None:
        return Reason.NO_ANALYSIS
    if result.analyzed_version != current_version:
        return Reason.VERSION_MISMATCH
    if result.analyzed_commit != remote.latest_commit:
        return Reason.COMMIT_MISMATCH
    return None


def failure_tier(failing: Optional[FailingInfo], remote: RemoteInfo) -> FailureTier:
    if failing is None:
        return FailureTier.NOT_FAILING
    if failing.failed_commit == remote.latest_commit:
        return FailureTier.FAILING_AT_CURRENT_REVISION
    return FailureTier.FAILED_AT_OLDER_REVISION


@dataclass
class Candidate:
    """A repository scheduled for analysis in this run."""

    record: RepositoryRecord
    remote: RemoteInfo
    reason: Reason
    tier: FailureTier = FailureTier.NOT_FAILING
    file_count: Optional[int] = None
    tiebreak: float = field(default=0.0, compare=False)

    @property
    def priority(self) -> tuple:
        """Sort key; lower is processed first. Unknown file counts go after known ones."""
        return (
            int(self.tier),
            int(self.reason),
            self.file_count is None,
            self.file_count or 0,
            self.tiebreak,
        )


def prioritize(candidates: Iterable[Candidate], rng: Optional[random.Random] = None) -> list[Candidate]:
    """Order candidates for processing, breaking exact ties randomly."""
    rng = rng or random.Random()
    ordered = list(candidates)
    for candidate in ordered:
        candidate.tiebreak = rng.random()
    return sorted(ordered, key=lambda c: c.priority)
