"""The repository catalog: every repository the corpus knows about.

The catalog is append-only in practice. Importing a fresh discovery list
refreshes metadata but never drops a repository that is already known.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from .exceptions import CatalogError
from .file_ops import read_json, write_json_atomic
from .logging_config import get_logger
from .models import CatalogDocument, RepositoryRecord

logger = get_logger(__name__)


def load_catalog(path: Path) -> Optional[CatalogDocument]:
    """Load the catalog document.

    Returns:
        The document, or None when the file does not exist

    Raises:
        CatalogError: If the file exists but cannot be parsed
    """
    if not path.exists():
        return None
    try:
        return CatalogDocument.from_dict(read_json(path))
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise CatalogError(path, f"{type(e).__name__}: {e}")


def save_catalog(path: Path, document: CatalogDocument) -> None:
    try:
        write_json_atomic(path, document.to_dict())
    except OSError as e:
        raise CatalogError(path, str(e))
    logger.debug("Saved %d repositories to %s", len(document.repositories), path)


def merge_repositories(
    fresh: Iterable[RepositoryRecord], existing: Iterable[RepositoryRecord]
) -> list[RepositoryRecord]:
    """Merge a fresh discovery list into the known repositories.

    Fresh records win for metadata and keep their order; repositories known
    only from ``existing`` are appended in their previous order.
    """
    merged: dict[str, RepositoryRecord] = {}
    for record in fresh:
        merged.setdefault(record.full_name, record)
    for record in existing:
        merged.setdefault(record.full_name, record)
    return list(merged.values())


def parse_discovery_document(data: Any) -> list[RepositoryRecord]:
    """Read repository records from a discovery document.

    Accepts ``{"repositories": [...]}`` or a bare list, with either catalog
    keys (``fullName``, ``cloneUrl``, ``stars``) or GitHub search-item keys
    (``full_name``, ``clone_url``, ``stargazers_count``).

    Raises:
        ValueError: If the document has neither shape
    """
    if isinstance(data, dict):
        items = data.get("repositories", data.get("items"))
    else:
        items = data
    if not isinstance(items, list):
        raise ValueError("expected a list of repositories")

    records = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"repository entry is not an object: {item!r}")
        if "full_name" in item:
            item = {
                "fullName": item["full_name"],
                "cloneUrl": item["clone_url"],
                "stars": item.get("stargazers_count", 0),
                "description": item.get("description"),
            }
        try:
            records.append(RepositoryRecord.from_dict(item))
        except KeyError as e:
            raise ValueError(f"repository entry missing {e}")
    return records


def import_repositories(path: Path, fresh: list[RepositoryRecord]) -> CatalogDocument:
    """Merge ``fresh`` into the catalog at ``path`` (created if absent) and save it."""
    current = load_catalog(path)
    existing = current.repositories if current else []
    document = CatalogDocument(
        fetched_at=datetime.now(timezone.utc).isoformat(),
        repositories=merge_repositories(fresh, existing),
    )
    save_catalog(path, document)
    added = len(document.repositories) - len(existing)
    logger.info("Catalog now holds %d repositories (%d new)", len(document.repositories), added)
    return document
