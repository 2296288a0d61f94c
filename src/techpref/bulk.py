"""Bulk synchronization of many working copies with a bounded worker pool."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from .logging_config import get_logger
from .models import AnalysisResult, RepositoryRecord
from .revision import RevisionSync
from .store import ResultStore

logger = get_logger(__name__)


@dataclass
class BulkSyncSummary:
    succeeded: int = 0
    failed: int = 0
    failed_repos: list[str] = field(default_factory=list)


def sync_all(
    records: Sequence[RepositoryRecord],
    revision_sync: RevisionSync,
    concurrency: int = 5,
    on_done: Optional[Callable[[RepositoryRecord, bool], None]] = None,
) -> BulkSyncSummary:
    """Clone or update every record; individual failures never stop the batch.

    Args:
        records: Repositories to synchronize
        revision_sync: Working-copy synchronizer
        concurrency: Worker count
        on_done: Called from the calling thread after each record, with
            whether it succeeded
    """
    summary = BulkSyncSummary()
    if not records:
        return summary

    with ThreadPoolExecutor(max_workers=concurrency) as pool:
        futures = {pool.submit(revision_sync.sync, record): record for record in records}
        for future in as_completed(futures):
            record = futures[future]
            try:
                future.result()
                ok = True
            except Exception as e:
                logger.error("Failed to sync %s: %s", record.full_name, e)
                ok = False

            if ok:
                summary.succeeded += 1
            else:
                summary.failed += 1
                summary.failed_repos.append(record.full_name)
            if on_done is not None:
                on_done(record, ok)

    return summary


def _analysis_age_key(analysis: Optional[AnalysisResult]) -> tuple:
    # never analyzed first, then oldest commit date; unparseable dates count as oldest
    if analysis is None:
        return (0, 0.0)
    try:
        return (1, datetime.fromisoformat(analysis.analyzed_commit_date).timestamp())
    except ValueError:
        return (1, float("-inf"))


def select_oldest_analyzed(
    records: Sequence[RepositoryRecord],
    store: ResultStore,
    revision_sync: RevisionSync,
    limit: int,
) -> list[RepositoryRecord]:
    """Pick up to ``limit`` repositories with new commits, stalest first.

    Repositories never analyzed come first, then ascending analyzed commit
    date. Each candidate's remote is checked in that order until ``limit``
    repositories with commits past their analyzed one have been found. A
    repository whose remote cannot be checked is selected too.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    with_analysis = [(record, store.load_analysis(record)) for record in records]
    with_analysis.sort(key=lambda pair: _analysis_age_key(pair[1]))

    selected: list[RepositoryRecord] = []
    checked = 0
    for record, analysis in with_analysis:
        if len(selected) >= limit:
            break
        checked += 1
        if analysis is None:
            selected.append(record)
            continue
        try:
            remote = revision_sync.remote_info(record)
        except Exception as e:
            logger.warning("Cannot check %s (%s); selecting it anyway", record.full_name, e)
            selected.append(record)
            continue
        if remote.latest_commit != analysis.analyzed_commit:
            selected.append(record)
            logger.debug("[%d/%d] %s has new commits", len(selected), limit, record.full_name)
        else:
            logger.debug("[skip] %s is up to date", record.full_name)

    logger.info("Checked %d repositories, selected %d with new commits", checked, len(selected))
    return selected
