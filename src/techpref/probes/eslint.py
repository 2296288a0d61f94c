"""eslint backend for rules oxlint does not implement.

The generated flat config lints JavaScript with the default parser and
TypeScript with the typescript-eslint parser, with inline disable comments
ignored and only the probed rule enabled.
"""

import json
from pathlib import Path

from ..exceptions import ProbeOutputError
from ..models import RuleCheck, ViolationSample
from .base import IGNORE_PATTERNS, ProbeBackend, relative_path

ERROR_SEVERITY = 2

_CONFIG_TEMPLATE = """\
import globals from "globals";
import tseslint from "typescript-eslint";

const rules = {rules};

const languageOptions = {{
  ecmaVersion: "latest",
  sourceType: "module",
  parserOptions: {{ ecmaFeatures: {{ jsx: true }} }},
  globals: {{ ...globals.es2022, ...globals.node, ...globals.browser }},
}};

export default [
  {{ ignores: {ignores} }},
  {{
    files: ["**/*.{{js,jsx}}"],
    languageOptions,
    linterOptions: {{ noInlineConfig: true }},
    rules,
  }},
  {{
    files: ["**/*.{{ts,tsx}}"],
    languageOptions: {{ ...languageOptions, parser: tseslint.parser }},
    linterOptions: {{ noInlineConfig: true }},
    rules,
  }},
];
"""


class EslintBackend(ProbeBackend):
    name = "eslint"

    def write_config(self, check: RuleCheck, temp_dir: Path) -> Path:
        config_path = temp_dir / "eslint.config.mjs"
        config_path.write_text(
            _CONFIG_TEMPLATE.format(
                rules=json.dumps(check.backend_config["rules"]),
                ignores=json.dumps(list(IGNORE_PATTERNS)),
            ),
            encoding="utf-8",
        )
        return config_path

    def command(self, config_path: Path) -> list[str]:
        return self.argv + [
            "-c", str(config_path),
            "--format", "json",
            "--no-warn-ignored",
            "--no-error-on-unmatched-pattern",
            ".",
        ]

    def parse(self, stdout: str, working_copy: Path) -> list[ViolationSample]:
        self._check_output(stdout)
        try:
            results = json.loads(stdout)
            violations = []
            for result in results:
                file = relative_path(result["filePath"], working_copy)
                for message in result.get("messages", []):
                    # fatal parse errors carry no rule id
                    if message.get("severity") != ERROR_SEVERITY or not message.get("ruleId"):
                        continue
                    violations.append(
                        ViolationSample(
                            file=file,
                            line=int(message.get("line", 0)),
                            column=int(message.get("column", 0)),
                            message=message.get("message", ""),
                        )
                    )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProbeOutputError(self.name, f"{type(e).__name__}: {e}")
        return violations
