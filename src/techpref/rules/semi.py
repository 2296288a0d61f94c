"""semi: statements terminated by semicolons, or never.

Not available in oxlint, so both variants run through eslint.
"""

from .base import eslint_check

CHECKS = (
    eslint_check("semi", "always", {"semi": ["error", "always"]}),
    eslint_check("semi", "never", {"semi": ["error", "never"]}),
)
