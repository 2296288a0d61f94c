"""consistent-type-definitions: ``interface`` versus ``type`` for object shapes."""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "consistent-type-definitions", "interface",
        "typescript/consistent-type-definitions", ["error", "interface"],
    ),
    oxlint_check(
        "consistent-type-definitions", "type",
        "typescript/consistent-type-definitions", ["error", "type"],
    ),
)
