"""Backend abstraction and subprocess execution for probes."""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..exceptions import ProbeError, ProbeOutputError, ProbeTimeoutError
from ..logging_config import get_logger
from ..models import RuleCheck, ViolationSample

logger = get_logger(__name__)

IGNORE_PATTERNS = ("**/node_modules/**", "**/dist/**", "**/build/**", "**/*.d.ts")


@dataclass
class ProcessOutput:
    returncode: int
    stdout: str
    stderr: str


class ProbeBackend(ABC):
    """An external analysis tool driven through a generated config file."""

    name: str = ""

    def __init__(self, argv: list[str]):
        self.argv = list(argv)

    @abstractmethod
    def write_config(self, check: RuleCheck, temp_dir: Path) -> Path:
        """Write the tool config enabling only ``check`` and return its path."""

    @abstractmethod
    def command(self, config_path: Path) -> list[str]:
        """Full argv for a run in the working-copy root."""

    @abstractmethod
    def parse(self, stdout: str, working_copy: Path) -> list[ViolationSample]:
        """Every violation in the tool's JSON output.

        Raises:
            ProbeOutputError: If the output is not the expected JSON shape
        """

    def _check_output(self, stdout: str) -> None:
        if not stdout.strip():
            raise ProbeOutputError(self.name, "empty output")


def relative_path(file_name: str, working_copy: Path) -> str:
    """Path of ``file_name`` relative to the working-copy root, with '/' separators."""
    path = Path(file_name)
    if path.is_absolute():
        try:
            path = path.relative_to(working_copy.resolve())
        except ValueError:
            try:
                path = path.relative_to(working_copy)
            except ValueError:
                pass
    return path.as_posix().removeprefix("./")


def run_backend_process(
    probe: str,
    argv: list[str],
    cwd: Union[str, Path],
    temp_dir: Path,
    timeout: float,
) -> ProcessOutput:
    """Run a backend process with output captured to files in ``temp_dir``.

    Two timeout sources race: ``Popen.wait(timeout=...)`` and a timer thread
    that kills the process. Either one ends in ProbeTimeoutError, after the
    whole process group has been killed.
    """
    stdout_path = temp_dir / "stdout.txt"
    stderr_path = temp_dir / "stderr.txt"
    timed_out = threading.Event()

    with open(stdout_path, "wb") as out, open(stderr_path, "wb") as err:
        try:
            proc = subprocess.Popen(
                argv,
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                stdout=out,
                stderr=err,
                start_new_session=os.name != "nt",
            )
        except OSError as e:
            raise ProbeError(probe, f"Cannot start probe {probe}: {e}", reason=argv[0])

        def _kill() -> None:
            timed_out.set()
            _kill_process_tree(proc)

        timer = threading.Timer(timeout, _kill)
        timer.daemon = True
        timer.start()
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            timed_out.set()
            _kill_process_tree(proc)
            proc.wait()
        finally:
            timer.cancel()

    if timed_out.is_set():
        raise ProbeTimeoutError(probe, timeout)

    return ProcessOutput(
        returncode=proc.returncode,
        stdout=stdout_path.read_text(encoding="utf-8", errors="replace"),
        stderr=stderr_path.read_text(encoding="utf-8", errors="replace"),
    )


def _kill_process_tree(proc: subprocess.Popen) -> None:
    """Kill the backend and everything it spawned (node shims fork the real linter)."""
    if os.name == "nt":
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass  # already exited
