"""oxlint backend: one native or JS-plugin rule per run."""

import json
from pathlib import Path

from ..exceptions import ProbeOutputError
from ..models import RuleCheck, ViolationSample
from .base import IGNORE_PATTERNS, ProbeBackend, relative_path

CATEGORIES = ("correctness", "suspicious", "pedantic", "perf", "style", "restriction", "nursery")


class OxlintBackend(ProbeBackend):
    name = "oxlint"

    def write_config(self, check: RuleCheck, temp_dir: Path) -> Path:
        cfg = check.backend_config
        config: dict = {
            "categories": {category: "off" for category in CATEGORIES},
            "rules": {cfg["rule"]: cfg["config"]},
        }
        if "plugins" in cfg:
            config["plugins"] = cfg["plugins"]
        if cfg.get("jsPlugins"):
            config["jsPlugins"] = cfg["jsPlugins"]

        config_path = temp_dir / ".oxlintrc.json"
        config_path.write_text(json.dumps(config), encoding="utf-8")
        return config_path

    def command(self, config_path: Path) -> list[str]:
        argv = self.argv + ["-c", str(config_path), "--format", "json"]
        for pattern in IGNORE_PATTERNS:
            argv += ["--ignore-pattern", pattern]
        return argv + ["."]

    def parse(self, stdout: str, working_copy: Path) -> list[ViolationSample]:
        self._check_output(stdout)
        try:
            output = json.loads(stdout)
            diagnostics = output["diagnostics"]
            violations = []
            for diag in diagnostics:
                labels = diag.get("labels") or []
                span = labels[0].get("span", {}) if labels else {}
                violations.append(
                    ViolationSample(
                        file=relative_path(diag["filename"], working_copy),
                        line=int(span.get("line", 0)),
                        column=int(span.get("column", 0)),
                        message=diag.get("message", ""),
                    )
                )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProbeOutputError(self.name, f"{type(e).__name__}: {e}")
        return violations
