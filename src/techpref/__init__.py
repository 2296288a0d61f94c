"""
TechPref - Incremental coding-convention analysis over a corpus of repositories.

Keeps one analysis document per repository describing how many violations of
each competing convention variant (tabs vs spaces, semicolons, quote style,
type definitions, ...) the repository contains, re-analyzing only what became
stale since the last run.
"""

__version__ = "0.4.0"

from .models import (
    AnalysisResult,
    FailingInfo,
    RemoteInfo,
    RepositoryRecord,
    RuleCheck,
    VariantResult,
    ViolationSample,
)
from .rules import ALL_RULE_CHECKS, analyzed_version
from .sampling import distributed_sample

__all__ = [
    "AnalysisResult",
    "FailingInfo",
    "RemoteInfo",
    "RepositoryRecord",
    "RuleCheck",
    "VariantResult",
    "ViolationSample",
    "ALL_RULE_CHECKS",
    "analyzed_version",
    "distributed_sample",
]
