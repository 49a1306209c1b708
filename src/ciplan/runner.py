# Copyright (c) Syntropy Systems
"""Test process runner with orphan prevention."""
from __future__ import annotations

import contextlib
import ctypes
import os
import signal
import subprocess
import sys
import time
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def setup_pdeathsig() -> None:
    """Set PDEATHSIG so child dies when parent dies.

    This prevents orphan test hosts when ciplan is killed by the pipeline.
    Only works on Linux.
    """
    if sys.platform != "linux":
        return
    try:
        libc = ctypes.CDLL("libc.so.6", use_errno=True)
        pr_set_pdeathsig = 1
        libc.prctl(pr_set_pdeathsig, signal.SIGKILL)
    except (AttributeError, OSError):
        # Can't set PDEATHSIG, continue without it
        return


class TestProcess:
    """Runs one test invocation command.

    Features:
    - Uses start_new_session=True for a reliable process group on POSIX
    - Sets PDEATHSIG on Linux to prevent orphans
    - Captures stdout/stderr to a log file
    - Provides graceful and forceful termination
    """

    __test__ = False

    command_argv: list[str]
    workdir: Path
    log_path: Path
    env: dict[str, str]
    _process: subprocess.Popen[bytes] | None
    _exit_code: int | None
    _output_file: IO[str] | None

    def __init__(
        self,
        command_argv: list[str],
        workdir: Path,
        log_path: Path,
        env: dict[str, str] | None = None,
    ) -> None:
        """Initialize a test process.

        Args:
            command_argv: Command as list of argv tokens (no shell)
            workdir: Working directory to run the command in
            log_path: File receiving combined stdout/stderr
            env: Additional environment variables

        """
        self.command_argv = command_argv
        self.workdir = workdir
        self.log_path = log_path

        # Merge environment
        self.env = os.environ.copy()
        if env:
            self.env.update(env)

        self._process = None
        self._exit_code = None
        self._output_file = None

    def start(self) -> None:
        """Start the test process."""
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        self._output_file = self.log_path.open("w")

        posix = os.name == "posix"
        try:
            self._process = subprocess.Popen(  # noqa: S603
                self.command_argv,
                stdout=self._output_file,
                stderr=subprocess.STDOUT,
                env=self.env,
                cwd=str(self.workdir),
                start_new_session=posix,
                preexec_fn=setup_pdeathsig if sys.platform == "linux" else None,  # noqa: PLW1509
            )
        except OSError:
            self._cleanup()
            raise

    def wait(self) -> int:
        """Wait for the process to finish and return exit code."""
        if self._process is None:
            return self._exit_code or 0

        code = self._process.wait()
        self._exit_code = code
        self._cleanup()
        return code

    def kill(self, grace_period: float = 10.0) -> int:
        """Kill the test process.

        First asks the process (group, on POSIX) to terminate, waits for
        grace_period, then kills it if still alive.

        Returns:
            Exit code (negative signal number if killed)

        """
        if self._process is None:
            return self._exit_code or 0

        if self._process.poll() is not None:
            exit_code = self._process.returncode or 0
            self._exit_code = exit_code
            self._cleanup()
            return exit_code

        if os.name != "posix":
            self._process.terminate()
            with contextlib.suppress(subprocess.TimeoutExpired):
                _ = self._process.wait(timeout=grace_period)
            if self._process.poll() is None:
                self._process.kill()
                _ = self._process.wait()
            self._exit_code = self._process.returncode
            self._cleanup()
            return self._exit_code

        # Process group ID equals the session ID with start_new_session
        try:
            pgid = os.getpgid(self._process.pid)
        except (OSError, ProcessLookupError):
            self._cleanup()
            return self._exit_code or -signal.SIGKILL

        with contextlib.suppress(OSError, ProcessLookupError):
            os.killpg(pgid, signal.SIGTERM)

        deadline = time.time() + grace_period
        while time.time() < deadline:
            if self._process.poll() is not None:
                exit_code = self._process.returncode or 0
                self._exit_code = exit_code
                self._cleanup()
                return exit_code
            time.sleep(0.1)

        # Still alive
        with contextlib.suppress(OSError, ProcessLookupError):
            os.killpg(pgid, signal.SIGKILL)

        with contextlib.suppress(subprocess.TimeoutExpired):
            _ = self._process.wait(timeout=5.0)

        exit_code = self._process.returncode or -signal.SIGKILL
        self._exit_code = exit_code
        self._cleanup()
        return exit_code

    def _cleanup(self) -> None:
        if self._output_file:
            with contextlib.suppress(OSError):
                self._output_file.close()
            self._output_file = None

    @property
    def exit_code(self) -> int | None:
        """Get the exit code if finished."""
        return self._exit_code
