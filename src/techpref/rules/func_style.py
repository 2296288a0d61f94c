"""func-style: function expressions versus function declarations."""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "func-style", "expression", "eslint/func-style",
        ["error", "expression"], plugins=["eslint"],
    ),
    oxlint_check(
        "func-style", "declaration", "eslint/func-style",
        ["error", "declaration"], plugins=["eslint"],
    ),
)
