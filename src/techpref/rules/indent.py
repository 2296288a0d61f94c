"""indent: two spaces, four spaces or tabs.

Runs the stylistic plugin through oxlint's JS plugin support, with every
native plugin disabled.
"""

from .base import oxlint_check

_STYLISTIC = ["@stylistic/eslint-plugin"]

CHECKS = tuple(
    oxlint_check(
        "indent", variant, "@stylistic/indent", ["error", size],
        plugins=[], js_plugins=_STYLISTIC,
    )
    for variant, size in (("2-space", 2), ("4-space", 4), ("tab", "tab"))
)
