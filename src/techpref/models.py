"""Data models for TechPref.

Every persisted type converts to and from the camelCase JSON shape that the
presentation layer reads, via ``to_dict()`` / ``from_dict()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class RepositoryRecord:
    """A repository known to the catalog, keyed by ``full_name`` ("owner/name")."""

    full_name: str
    clone_url: str
    stars: int = 0
    description: Optional[str] = None

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @property
    def name(self) -> str:
        return self.full_name.split("/", 1)[1]

    @property
    def file_name(self) -> str:
        """Deterministic document name: first ``/`` replaced by ``-``."""
        return self.full_name.replace("/", "-", 1) + ".json"

    def to_dict(self) -> dict:
        return {
            "fullName": self.full_name,
            "cloneUrl": self.clone_url,
            "stars": self.stars,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RepositoryRecord:
        full_name = data["fullName"]
        if full_name.count("/") != 1:
            raise ValueError(f"fullName must look like 'owner/name': {full_name!r}")
        return cls(
            full_name=full_name,
            clone_url=data["cloneUrl"],
            stars=int(data.get("stars", 0) or 0),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class CatalogDocument:
    """The persisted repository catalog."""

    fetched_at: str
    repositories: list[RepositoryRecord] = field(default_factory=list)

    def find(self, full_name: str) -> Optional[RepositoryRecord]:
        for record in self.repositories:
            if record.full_name == full_name:
                return record
        return None

    def to_dict(self) -> dict:
        return {
            "fetchedAt": self.fetched_at,
            "repositories": [r.to_dict() for r in self.repositories],
        }

    @classmethod
    def from_dict(cls, data: dict) -> CatalogDocument:
        return cls(
            fetched_at=data.get("fetchedAt", ""),
            repositories=[RepositoryRecord.from_dict(r) for r in data["repositories"]],
        )


@dataclass(frozen=True)
class RuleCheck:
    """One probe: a single variant of a convention rule.

    ``backend_config`` is opaque to everything except the backend named by
    ``backend``.
    """

    rule_id: str
    variant: str
    backend: str
    backend_config: dict[str, Any]

    def to_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "variant": self.variant,
            "backend": self.backend,
            "backendConfig": self.backend_config,
        }


@dataclass(frozen=True)
class RemoteInfo:
    """Result of a lightweight remote introspection."""

    default_branch: str
    latest_commit: str

    def to_dict(self) -> dict:
        return {"defaultBranch": self.default_branch, "latestCommit": self.latest_commit}


@dataclass(frozen=True)
class ViolationSample:
    """One concrete violation location, relative to the working-copy root."""

    file: str
    line: int
    column: int
    message: str

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ViolationSample:
        return cls(
            file=data["file"],
            line=int(data["line"]),
            column=int(data["column"]),
            message=data["message"],
        )


@dataclass(frozen=True)
class VariantResult:
    """Violation count for one variant plus a bounded sample of locations."""

    count: int
    samples: list[ViolationSample] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("count must be non-negative")
        if len(self.samples) > self.count:
            raise ValueError("cannot hold more samples than violations")

    def to_dict(self) -> dict:
        return {"count": self.count, "samples": [s.to_dict() for s in self.samples]}

    @classmethod
    def from_dict(cls, data: dict) -> VariantResult:
        return cls(
            count=int(data["count"]),
            samples=[ViolationSample.from_dict(s) for s in data.get("samples", [])],
        )


@dataclass(frozen=True)
class AnalysisResult:
    """The complete analysis of one repository at one revision.

    ``checks[rule_id][variant]`` holds a VariantResult for every registered
    variant of every rule. A document is only ever written whole.
    """

    analyzed_version: str
    analyzed_commit: str
    analyzed_commit_date: str
    checks: dict[str, dict[str, VariantResult]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "analyzedVersion": self.analyzed_version,
            "analyzedCommit": self.analyzed_commit,
            "analyzedCommitDate": self.analyzed_commit_date,
            "checks": {
                rule_id: {variant: result.to_dict() for variant, result in variants.items()}
                for rule_id, variants in self.checks.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> AnalysisResult:
        return cls(
            analyzed_version=data["analyzedVersion"],
            analyzed_commit=data["analyzedCommit"],
            analyzed_commit_date=data.get("analyzedCommitDate", ""),
            checks={
                rule_id: {
                    variant: VariantResult.from_dict(result)
                    for variant, result in variants.items()
                }
                for rule_id, variants in data.get("checks", {}).items()
            },
        )


@dataclass(frozen=True)
class FailingInfo:
    """Marker left behind when the latest attempt on a repository did not finish."""

    failed_commit: str

    def to_dict(self) -> dict:
        return {"failedCommit": self.failed_commit}

    @classmethod
    def from_dict(cls, data: dict) -> FailingInfo:
        return cls(failed_commit=data["failedCommit"])
