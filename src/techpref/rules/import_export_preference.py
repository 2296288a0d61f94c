"""import-export-preference: named exports versus a single default export.

The two variants are backed by different oxlint rules.
"""

from .base import oxlint_check

CHECKS = (
    oxlint_check(
        "import-export-preference", "named", "import/no-default-export",
        ["error"], plugins=["import"],
    ),
    oxlint_check(
        "import-export-preference", "default", "import/prefer-default-export",
        ["error", {"target": "single"}], plugins=["import"],
    ),
)
