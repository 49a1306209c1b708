# Copyright (c) Syntropy Systems
"""External test engine adapters."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from ciplan.errors import MissingArtifactError, TestPartitionFailedError
from ciplan.models.result import TestRunResult
from ciplan.results import read_result_file
from ciplan.runner import TestProcess

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from ciplan.config import CiplanConfig
    from ciplan.models.plan import Platform, TestInvocationSpec

logger = logging.getLogger(__name__)

FEATURE_ENV_VAR = "CIPLAN_EXPERIMENTAL_FEATURE"
PATHS_TOKEN = "{paths}"
TAG_TOKENS = ("{include}", "{exclude}")


class TestEngine(Protocol):
    def run(self, spec: TestInvocationSpec) -> TestRunResult:
        ...


def expand_command(
    template: Sequence[str],
    *,
    host: Path,
    output_file: Path,
    spec: TestInvocationSpec,
    default_paths: Sequence[str],
) -> list[str]:
    """Fill an argv template for one invocation.

    A standalone ``{paths}`` token becomes one argument per test path;
    other placeholders are substituted inside each argument. A standalone
    ``{include}`` or ``{exclude}`` with no tags is dropped along with the
    option flag right before it.
    """
    values = {
        "host": str(host),
        "output_file": str(output_file),
        "include": ",".join(spec.tag_set.include_names()),
        "exclude": ",".join(spec.tag_set.exclude_names()),
        "feature": spec.experimental_feature or "",
        "label": spec.output_label,
    }
    paths = list(spec.paths) if spec.paths is not None else list(default_paths)

    argv: list[str] = []
    previous = None
    for token in template:
        if token == PATHS_TOKEN:
            argv.extend(paths)
            previous = token
            continue
        if token in TAG_TOKENS and not values[token[1:-1]]:
            if previous is not None and previous.startswith("-") and argv:
                _ = argv.pop()
            previous = token
            continue
        previous = token
        try:
            argv.append(token.format(**values))
        except (KeyError, IndexError, ValueError) as e:
            msg = f"Invalid test_command token {token!r}: {e}"
            raise ValueError(msg) from e
    return argv


class CommandTestEngine:
    """Run each invocation as a child process and read its result file.

    Results land in ``<results_dir>/<label>.xml`` with the process output in
    ``<label>.log``.
    """

    __test__ = False

    def __init__(
        self,
        config: CiplanConfig,
        platform: Platform,
        host: Path | None,
    ) -> None:
        self.config = config
        self.platform = platform
        self.host = host
        self.results_dir = config.results_path()

    def command_for(self, spec: TestInvocationSpec) -> list[str]:
        if self.host is None:
            raise MissingArtifactError
        argv = expand_command(
            self.config.test_command,
            host=self.host,
            output_file=self.output_file(spec),
            spec=spec,
            default_paths=self.config.test_paths,
        )
        # Windows runs elevated by launching from an elevated agent
        if spec.is_elevated and not self.platform.is_windows:
            argv = [*self.config.elevation_prefix, *argv]
        return argv

    def output_file(self, spec: TestInvocationSpec) -> Path:
        return self.results_dir / f"{spec.output_label}.xml"

    def run(self, spec: TestInvocationSpec) -> TestRunResult:
        output_file = self.output_file(spec)
        # Stale results from an earlier run must not be read back
        output_file.unlink(missing_ok=True)

        try:
            argv = self.command_for(spec)
        except ValueError as e:
            raise TestPartitionFailedError(spec.output_label, str(e)) from e
        env = {FEATURE_ENV_VAR: spec.experimental_feature or ""}
        process = TestProcess(
            command_argv=argv,
            workdir=self.config.root,
            log_path=self.results_dir / f"{spec.output_label}.log",
            env=env,
        )

        logger.info("Running %s: %s", spec.output_label, " ".join(argv))
        try:
            process.start()
        except OSError as e:
            raise TestPartitionFailedError(
                spec.output_label, f"could not start test runner: {e}"
            ) from e

        try:
            _ = process.wait()
        except KeyboardInterrupt:
            _ = process.kill()
            raise

        exit_code = process.exit_code
        counts = read_result_file(output_file, spec.output_label)
        error = None
        if exit_code != 0 and counts.failed == 0:
            error = f"test runner exited with code {exit_code}"

        return TestRunResult(
            label=spec.output_label,
            passed=counts.passed,
            failed=counts.failed,
            allow_empty_result=spec.allow_empty_result,
            error=error,
        )
