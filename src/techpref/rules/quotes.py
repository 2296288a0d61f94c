"""quotes: double versus single quotes (eslint backend)."""

from .base import eslint_check

CHECKS = (
    eslint_check("quotes", "double", {"quotes": ["error", "double"]}),
    eslint_check("quotes", "single", {"quotes": ["error", "single"]}),
)
