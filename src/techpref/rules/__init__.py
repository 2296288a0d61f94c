"""Registry of every rule check run against each repository.

The registry is the single source of truth for which variants exist per rule.
Its content hash, ``analyzed_version()``, is stamped on every analysis result;
changing any check makes every stored result stale.
"""

import hashlib
import json
from typing import Iterable, Sequence

from ..models import RuleCheck
from . import (
    array_type,
    consistent_generic_constructors,
    consistent_indexed_object_style,
    consistent_type_definitions,
    consistent_type_imports,
    func_style,
    import_export_preference,
    indent,
    quotes,
    semi,
)
from .base import ESLINT, OXLINT, eslint_check, oxlint_check

_RULE_MODULES = (
    array_type,
    consistent_generic_constructors,
    consistent_indexed_object_style,
    consistent_type_definitions,
    consistent_type_imports,
    func_style,
    import_export_preference,
    indent,
    quotes,
    semi,
)


def validate_checks(checks: Iterable[RuleCheck]) -> None:
    """Raise ValueError unless every (rule_id, variant) pair is unique."""
    seen: set[tuple[str, str]] = set()
    for check in checks:
        key = (check.rule_id, check.variant)
        if key in seen:
            raise ValueError(f"Duplicate rule check: {key[0]}/{key[1]}")
        if check.backend not in (OXLINT, ESLINT):
            raise ValueError(f"Unknown backend for {key[0]}/{key[1]}: {check.backend}")
        seen.add(key)


ALL_RULE_CHECKS: tuple[RuleCheck, ...] = tuple(
    check for module in _RULE_MODULES for check in module.CHECKS
)
validate_checks(ALL_RULE_CHECKS)


def analyzed_version(checks: Sequence[RuleCheck] = ALL_RULE_CHECKS) -> str:
    """Content hash of the registry: 12 hex chars of SHA-256.

    Checks are sorted by (rule_id, variant) and serialized with sorted keys,
    so reordering definitions keeps the hash while any edit changes it.
    """
    ordered = sorted(checks, key=lambda c: (c.rule_id, c.variant))
    payload = json.dumps(
        [c.to_dict() for c in ordered], sort_keys=True, separators=(",", ":")
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def variants_by_rule(checks: Sequence[RuleCheck] = ALL_RULE_CHECKS) -> dict[str, tuple[str, ...]]:
    """Map each rule id to its variants, in registration order."""
    result: dict[str, list[str]] = {}
    for check in checks:
        result.setdefault(check.rule_id, []).append(check.variant)
    return {rule_id: tuple(variants) for rule_id, variants in result.items()}


def checks_for_rule(rule_id: str, checks: Sequence[RuleCheck] = ALL_RULE_CHECKS) -> tuple[RuleCheck, ...]:
    return tuple(c for c in checks if c.rule_id == rule_id)


def rule_ids(checks: Sequence[RuleCheck] = ALL_RULE_CHECKS) -> tuple[str, ...]:
    return tuple(variants_by_rule(checks))


__all__ = [
    "ALL_RULE_CHECKS",
    "ESLINT",
    "OXLINT",
    "analyzed_version",
    "checks_for_rule",
    "eslint_check",
    "oxlint_check",
    "rule_ids",
    "validate_checks",
    "variants_by_rule",
]
