"""Run one rule check against a working copy and condense its output."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from ..config import ScanConfig
from ..exceptions import ProbeError, ProbeFailedError
from ..logging_config import get_logger
from ..models import RuleCheck, VariantResult
from ..rules import ESLINT, OXLINT
from ..sampling import distributed_sample
from .base import ProbeBackend, run_backend_process
from .eslint import EslintBackend
from .oxlint import OxlintBackend

logger = get_logger(__name__)

PROBES_DIR_NAME = ".techpref-probes"

# Both linters exit 1 when they report violations
_OK_EXIT_CODES = (0, 1)


class ProbeRunner:
    """Executes rule checks through their backends.

    Args:
        backends: Backend per name, as referenced by ``RuleCheck.backend``
        node_tools_dir: Directory holding the linters' node_modules; the
            generated configs are written beneath it so that plugins and
            parsers they import resolve there
        timeout: Hard limit for one probe, in seconds
        max_samples: Samples kept per variant
    """

    def __init__(
        self,
        backends: dict[str, ProbeBackend],
        node_tools_dir: Union[str, Path] = ".",
        timeout: float = 600,
        max_samples: int = 10,
    ):
        self.backends = backends
        self.probes_dir = Path(node_tools_dir).resolve() / PROBES_DIR_NAME
        self.timeout = timeout
        self.max_samples = max_samples

    @classmethod
    def from_config(cls, config: ScanConfig) -> ProbeRunner:
        return cls(
            backends={
                OXLINT: OxlintBackend(config.oxlint_argv),
                ESLINT: EslintBackend(config.eslint_argv),
            },
            node_tools_dir=config.node_tools_dir,
            timeout=config.probe_timeout_seconds,
            max_samples=config.max_samples,
        )

    def run(self, working_copy: Union[str, Path], check: RuleCheck) -> VariantResult:
        """Count violations of ``check`` in ``working_copy``.

        Raises:
            ProbeTimeoutError: The backend ran past the timeout
            ProbeFailedError: The backend exited with an unexpected status
            ProbeOutputError: The backend output could not be read
            ProbeError: The backend is unknown or could not be started
        """
        probe = f"{check.rule_id}/{check.variant}"
        backend: Optional[ProbeBackend] = self.backends.get(check.backend)
        if backend is None:
            raise ProbeError(probe, f"No backend registered for {probe}", reason=check.backend)

        working_copy = Path(working_copy).resolve()
        self.probes_dir.mkdir(parents=True, exist_ok=True)
        temp_dir = Path(tempfile.mkdtemp(prefix=f"{check.rule_id}-{check.variant}-", dir=self.probes_dir))
        try:
            config_path = backend.write_config(check, temp_dir)
            output = run_backend_process(
                probe,
                backend.command(config_path),
                cwd=working_copy,
                temp_dir=temp_dir,
                timeout=self.timeout,
            )
            if output.returncode not in _OK_EXIT_CODES:
                raise ProbeFailedError(probe, output.returncode, output.stderr)
            if output.stderr.strip():
                logger.debug("%s stderr: %s", probe, output.stderr.strip()[-500:])
            violations = backend.parse(output.stdout, working_copy)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

        violations.sort(key=lambda v: (v.file, v.line, v.column))
        return VariantResult(
            count=len(violations),
            samples=distributed_sample(violations, self.max_samples),
        )
