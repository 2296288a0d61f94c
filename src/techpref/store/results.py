"""Per-repository analysis documents and failure markers.

Layout under the data directory::

    analysis/<owner>-<name>.json           AnalysisResult
    analysis/failing/<owner>-<name>.json   FailingInfo
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from ..file_ops import read_json, write_json_atomic
from ..logging_config import get_logger
from ..models import AnalysisResult, FailingInfo, RepositoryRecord

logger = get_logger(__name__)


class ResultStore:
    """File-backed store of analysis results, one JSON document per repository.

    Corrupt or unreadable documents are reported and treated as absent, which
    makes the repository eligible for re-analysis and the document rewritten.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.analysis_dir = self.data_dir / "analysis"
        self.failing_dir = self.analysis_dir / "failing"

    def analysis_path(self, record: RepositoryRecord) -> Path:
        return self.analysis_dir / record.file_name

    def failing_path(self, record: RepositoryRecord) -> Path:
        return self.failing_dir / record.file_name

    # -- analysis results -----------------------------------------------

    def load_analysis(self, record: RepositoryRecord) -> Optional[AnalysisResult]:
        path = self.analysis_path(record)
        data = self._read(path)
        if data is None:
            return None
        try:
            return AnalysisResult.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed analysis %s: %s", path, e)
            return None

    def save_analysis(self, record: RepositoryRecord, result: AnalysisResult) -> Path:
        path = self.analysis_path(record)
        write_json_atomic(path, result.to_dict())
        return path

    def load_all_analyses(
        self, records: Iterable[RepositoryRecord]
    ) -> dict[str, AnalysisResult]:
        """Snapshot of every stored result, keyed by full name.

        The snapshot is not refreshed automatically; reload it after the
        store has been pulled.
        """
        snapshot = {}
        for record in records:
            result = self.load_analysis(record)
            if result is not None:
                snapshot[record.full_name] = result
        return snapshot

    # -- failure markers ------------------------------------------------

    def load_failing(self, record: RepositoryRecord) -> Optional[FailingInfo]:
        path = self.failing_path(record)
        data = self._read(path)
        if data is None:
            return None
        try:
            return FailingInfo.from_dict(data)
        except (KeyError, TypeError) as e:
            logger.warning("Ignoring malformed failure marker %s: %s", path, e)
            return None

    def save_failing(self, record: RepositoryRecord, info: FailingInfo) -> Path:
        path = self.failing_path(record)
        write_json_atomic(path, info.to_dict())
        return path

    def remove_failing(self, record: RepositoryRecord) -> bool:
        """Delete the failure marker; returns whether one existed."""
        try:
            self.failing_path(record).unlink()
            return True
        except FileNotFoundError:
            return False

    def load_all_failing(self, records: Iterable[RepositoryRecord]) -> dict[str, FailingInfo]:
        snapshot = {}
        for record in records:
            info = self.load_failing(record)
            if info is not None:
                snapshot[record.full_name] = info
        return snapshot

    # -- maintenance ----------------------------------------------------

    def prune(self, keep_version: str, dry_run: bool = False) -> list[str]:
        """Delete analyses whose ``analyzedVersion`` differs from ``keep_version``.

        Returns:
            File names of the removed (or, with ``dry_run``, removable) documents
        """
        if not self.analysis_dir.is_dir():
            return []

        removed = []
        for path in sorted(self.analysis_dir.glob("*.json")):
            data = self._read(path)
            version = data.get("analyzedVersion") if isinstance(data, dict) else None
            if version == keep_version:
                continue
            if not dry_run:
                path.unlink()
            removed.append(path.name)
            logger.debug("%s %s (version %s)", "Would remove" if dry_run else "Removed", path.name, version)
        return removed

    def _read(self, path: Path) -> Optional[dict]:
        if not path.exists():
            return None
        try:
            data = read_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable document %s: %s", path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring unexpected document %s", path)
            return None
        return data
