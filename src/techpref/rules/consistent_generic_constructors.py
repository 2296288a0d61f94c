"""consistent-generic-constructors: where the type argument of a ``new`` goes."""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "consistent-generic-constructors", "constructor",
        "typescript/consistent-generic-constructors", ["error", "constructor"],
    ),
    oxlint_check(
        "consistent-generic-constructors", "type-annotation",
        "typescript/consistent-generic-constructors", ["error", "type-annotation"],
    ),
)
