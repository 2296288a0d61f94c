"""consistent-type-imports: ``import type`` for type-only imports, or never."""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "consistent-type-imports", "type-imports",
        "typescript/consistent-type-imports", ["error", {"prefer": "type-imports"}],
    ),
    oxlint_check(
        "consistent-type-imports", "no-type-imports",
        "typescript/consistent-type-imports", ["error", {"prefer": "no-type-imports"}],
    ),
)
