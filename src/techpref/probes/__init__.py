"""Probe execution: run a single rule variant through an analysis backend."""

from .base import ProbeBackend, run_backend_process
from .eslint import EslintBackend
from .oxlint import OxlintBackend
from .runner import ProbeRunner

__all__ = [
    "EslintBackend",
    "OxlintBackend",
    "ProbeBackend",
    "ProbeRunner",
    "run_backend_process",
]
