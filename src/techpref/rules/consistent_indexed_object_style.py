"""consistent-indexed-object-style: ``Record<K, V>`` versus index signatures."""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "consistent-indexed-object-style", "record",
        "typescript/consistent-indexed-object-style", ["error", "record"],
        plugins=["typescript"],
    ),
    oxlint_check(
        "consistent-indexed-object-style", "index-signature",
        "typescript/consistent-indexed-object-style", ["error", "index-signature"],
        plugins=["typescript"],
    ),
)
