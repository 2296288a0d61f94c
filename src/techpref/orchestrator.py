"""Incremental analysis of the repository corpus.

One run:
    1. Load the store snapshot (pulling first in CI)
    2. Triage: look up each repository's remote tip and classify it
    3. Prioritize the stale repositories
    4. Analyze them one at a time: sync, count sources, run every rule
       check, then persist the whole result or leave a failure marker
    5. In CI, commit and push results periodically and at the end

A repository failure never stops the run; only store-sync conflicts and
configuration errors do.
"""

from __future__ import annotations

import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from .cache import FileCountCache
from .config import ScanConfig
from .exceptions import ConfigurationError
from .logging_config import get_logger
from .models import AnalysisResult, FailingInfo, RemoteInfo, RepositoryRecord, RuleCheck
from .probes import ProbeRunner
from .revision import RevisionSync, create_remote_info_provider
from .rules import ALL_RULE_CHECKS, analyzed_version
from .scheduling import Candidate, classify, failure_tier, prioritize
from .sources import count_source_files
from .store import ResultStore, StoreSync

logger = get_logger(__name__)


@dataclass
class RunOptions:
    """Per-invocation switches.

    Attributes:
        repo_filter: Restrict the run to one "owner/name"
        ci: Batch mode with time budget, store sync and working-copy cleanup
        keep_working_copies: Never delete working copies, even in CI
    """

    repo_filter: Optional[str] = None
    ci: bool = False
    keep_working_copies: bool = False


@dataclass
class RunSummary:
    """Outcome counts of one run, with the names behind the analyzed and failed totals."""

    analyzed: int = 0
    failed: int = 0
    skipped: int = 0
    up_to_date: int = 0
    budget_exhausted: bool = False
    analyzed_repos: list[str] = field(default_factory=list)
    failed_repos: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "analyzed": self.analyzed,
            "failed": self.failed,
            "skipped": self.skipped,
            "upToDate": self.up_to_date,
            "budgetExhausted": self.budget_exhausted,
        }


@dataclass
class StoreSnapshot:
    """Stored results and failure markers as of the last load.

    Stale by construction once the store is pulled; call ``load`` again.
    """

    analyses: dict[str, AnalysisResult] = field(default_factory=dict)
    failing: dict[str, FailingInfo] = field(default_factory=dict)

    @classmethod
    def load(cls, store: ResultStore, records: Sequence[RepositoryRecord]) -> StoreSnapshot:
        """Read the current analysis and failure marker of every record."""
        return cls(
            analyses=store.load_all_analyses(records),
            failing=store.load_all_failing(records),
        )


class AnalysisOrchestrator:
    """Decides what to analyze, runs it and persists the outcome.

    Collaborators are injected so each can be swapped in tests; use
    ``from_config`` for the production wiring.
    """

    def __init__(
        self,
        records: Sequence[RepositoryRecord],
        store: ResultStore,
        revision_sync: RevisionSync,
        probe_runner: ProbeRunner,
        checks: Sequence[RuleCheck] = ALL_RULE_CHECKS,
        store_sync: Optional[StoreSync] = None,
        file_counts: Optional[FileCountCache] = None,
        count_files: Callable[[Path], int] = count_source_files,
        concurrency: int = 5,
        budget_seconds: float = 55 * 60,
        sync_interval_seconds: float = 5 * 60,
        cleanup_working_copies: bool = False,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.records = list(records)
        self.store = store
        self.revision_sync = revision_sync
        self.probe_runner = probe_runner
        self.checks = tuple(checks)
        self.version = analyzed_version(self.checks)
        self.store_sync = store_sync
        self.file_counts = file_counts
        self.count_files = count_files
        self.concurrency = concurrency
        self.budget_seconds = budget_seconds
        self.sync_interval_seconds = sync_interval_seconds
        self.cleanup_working_copies = cleanup_working_copies
        self.clock = clock
        self.rng = rng or random.Random()

    @classmethod
    def from_config(
        cls, config: ScanConfig, records: Sequence[RepositoryRecord]
    ) -> AnalysisOrchestrator:
        return cls(
            records=records,
            store=ResultStore(config.data_dir),
            revision_sync=RevisionSync(
                config.repos_dir,
                remote_provider=create_remote_info_provider(config),
                timeout=config.git_timeout_seconds,
            ),
            probe_runner=ProbeRunner.from_config(config),
            store_sync=StoreSync(
                config.data_dir,
                author_name=config.store_git_author_name,
                author_email=config.store_git_author_email,
                timeout=config.git_timeout_seconds,
            ),
            file_counts=FileCountCache(config.cache_dir),
            concurrency=config.sync_concurrency,
            budget_seconds=config.ci_budget_seconds,
            sync_interval_seconds=config.ci_sync_interval_seconds,
            cleanup_working_copies=config.cleanup_working_copies,
        )

    def __enter__(self) -> AnalysisOrchestrator:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the remote provider and the file-count cache."""
        self.revision_sync.close()
        if self.file_counts is not None:
            self.file_counts.close()

    def run(self, options: Optional[RunOptions] = None) -> RunSummary:
        """Analyze every stale repository (or the filtered one).

        Raises:
            ConfigurationError: If ``repo_filter`` names an unknown repository
            StoreSyncError: If the store cannot be synchronized (CI only)
        """
        options = options or RunOptions()
        records = self._select(options.repo_filter)
        syncing = options.ci and self.store_sync is not None
        cleanup = (self.cleanup_working_copies or options.ci) and not options.keep_working_copies
        started = self.clock()

        if syncing:
            self.store_sync.pull()
        snapshot = StoreSnapshot.load(self.store, records)

        summary = RunSummary()
        candidates = self.triage(records, snapshot, summary)
        ordered = prioritize(candidates, self.rng)
        logger.info(
            "%d to analyze, %d up to date, %d skipped (analyzed version %s)",
            len(ordered),
            summary.up_to_date,
            summary.skipped,
            self.version,
        )

        last_sync = started
        for index, candidate in enumerate(ordered, start=1):
            if options.ci and self.clock() - started >= self.budget_seconds:
                summary.budget_exhausted = True
                logger.info(
                    "Time budget exhausted; %d repositories left for the next run",
                    len(ordered) - index + 1,
                )
                break

            name = candidate.record.full_name
            # another writer may have analyzed it since the snapshot was taken
            if classify(snapshot.analyses.get(name), self.version, candidate.remote) is None:
                logger.info("Skipping %s: already analyzed at %s", name, candidate.remote.latest_commit[:12])
                summary.up_to_date += 1
                continue

            logger.info(
                "[%d/%d] Analyzing %s (%s, %s files)",
                index,
                len(ordered),
                name,
                candidate.reason.label,
                "?" if candidate.file_count is None else candidate.file_count,
            )
            result = self.analyze_repository(candidate, cleanup=cleanup)
            if result is None:
                summary.failed += 1
                summary.failed_repos.append(name)
            else:
                summary.analyzed += 1
                summary.analyzed_repos.append(name)
                snapshot.analyses[name] = result

            if syncing and self.clock() - last_sync >= self.sync_interval_seconds:
                self._sync_store(summary)
                snapshot = StoreSnapshot.load(self.store, records)
                last_sync = self.clock()

        if syncing:
            self._sync_store(summary)

        logger.info(
            "Done: %d analyzed, %d failed, %d up to date, %d skipped",
            summary.analyzed,
            summary.failed,
            summary.up_to_date,
            summary.skipped,
        )
        return summary

    def triage(
        self,
        records: Sequence[RepositoryRecord],
        snapshot: StoreSnapshot,
        summary: RunSummary,
    ) -> list[Candidate]:
        """Look up remote tips concurrently and keep the stale repositories."""
        remotes = self._lookup_remotes(records)

        candidates = []
        for record in records:
            remote = remotes.get(record.full_name)
            if remote is None:
                summary.skipped += 1
                continue
            reason = classify(snapshot.analyses.get(record.full_name), self.version, remote)
            if reason is None:
                summary.up_to_date += 1
                continue
            candidates.append(
                Candidate(
                    record=record,
                    remote=remote,
                    reason=reason,
                    tier=failure_tier(snapshot.failing.get(record.full_name), remote),
                    file_count=self.file_counts.get(record.full_name) if self.file_counts else None,
                )
            )
        return candidates

    def analyze_repository(self, candidate: Candidate, cleanup: bool = False) -> Optional[AnalysisResult]:
        """Analyze one repository completely, or record that it failed.

        Returns:
            The persisted result, or None if the attempt failed
        """
        record = candidate.record
        try:
            path = self.revision_sync.sync(record, candidate.remote)

            file_count = self.count_files(path)
            if self.file_counts is not None:
                self.file_counts.set(record.full_name, file_count)

            checks: dict = {}
            for check in self.checks:
                variant_result = self.probe_runner.run(path, check)
                checks.setdefault(check.rule_id, {})[check.variant] = variant_result
                logger.debug("  %s: %s=%d", check.rule_id, check.variant, variant_result.count)

            result = AnalysisResult(
                analyzed_version=self.version,
                analyzed_commit=self.revision_sync.head_commit(path),
                analyzed_commit_date=self.revision_sync.commit_date(path),
                checks=checks,
            )
            self.store.save_analysis(record, result)
            self.store.remove_failing(record)
            logger.info("Analyzed %s at %s", record.full_name, result.analyzed_commit[:12])
            return result
        except Exception as e:
            logger.error("Failed to analyze %s: %s", record.full_name, e)
            self.store.save_failing(record, FailingInfo(failed_commit=candidate.remote.latest_commit))
            return None
        finally:
            if cleanup:
                self.revision_sync.remove_working_copy(record)

    def _lookup_remotes(self, records: Sequence[RepositoryRecord]) -> dict[str, RemoteInfo]:
        remotes: dict[str, RemoteInfo] = {}
        if not records:
            return remotes

        def lookup(record: RepositoryRecord) -> None:
            try:
                remotes[record.full_name] = self.revision_sync.remote_info(record)
            except Exception as e:
                logger.warning("Skipping %s: %s", record.full_name, e)

        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            list(pool.map(lookup, records))
        return remotes

    def _select(self, repo_filter: Optional[str]) -> list[RepositoryRecord]:
        if repo_filter is None:
            return self.records
        selected = [r for r in self.records if r.full_name == repo_filter]
        if not selected:
            raise ConfigurationError(f"Repository not found in catalog: {repo_filter}")
        return selected

    def _sync_store(self, summary: RunSummary) -> None:
        message = f"Update analyses ({summary.analyzed} analyzed, {summary.failed} failed)"
        self.store_sync.commit_and_push(message)
