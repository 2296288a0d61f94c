"""array-type: ``T[]`` versus ``Array<T>``.

The "array" variant reports every ``Array<T>``; "generic" reports every ``T[]``.
"""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "array-type", "array", "typescript/array-type",
        ["error", {"default": "array"}], plugins=["typescript"],
    ),
    oxlint_check(
        "array-type", "generic", "typescript/array-type",
        ["error", {"default": "generic"}], plugins=["typescript"],
    ),
)
