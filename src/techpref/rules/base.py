"""Constructors for rule checks, one per analysis backend."""

from typing import Any, Optional

from ..models import RuleCheck

OXLINT = "oxlint"
ESLINT = "eslint"


def oxlint_check(
    rule_id: str,
    variant: str,
    rule: str,
    config: list,
    plugins: Optional[list[str]] = None,
    js_plugins: Optional[list[str]] = None,
) -> RuleCheck:
    """Build a check run by oxlint with a single rule enabled.

    ``plugins`` is left out of the generated config when not given, which
    keeps oxlint's default plugin set.
    """
    backend_config: dict[str, Any] = {"rule": rule, "config": config}
    if plugins is not None:
        backend_config["plugins"] = plugins
    if js_plugins is not None:
        backend_config["jsPlugins"] = js_plugins
    return RuleCheck(rule_id=rule_id, variant=variant, backend=OXLINT, backend_config=backend_config)


def eslint_check(rule_id: str, variant: str, rules: dict[str, list]) -> RuleCheck:
    """Build a check run by eslint with only ``rules`` enabled."""
    return RuleCheck(
        rule_id=rule_id, variant=variant, backend=ESLINT, backend_config={"rules": rules}
    )
