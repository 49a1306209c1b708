# Copyright (c) Syntropy Systems
"""Pipeline build-variable stores.

Later stages of the same pipeline read these variables instead of
recomputing decisions.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping

logger = logging.getLogger(__name__)


class VariableStore(Protocol):
    def set(self, name: str, value: str) -> None:
        ...


class MemoryVariables:
    """In-process store for local runs and tests."""

    values: dict[str, str]

    def __init__(self) -> None:
        self.values = {}

    def set(self, name: str, value: str) -> None:
        logger.debug("Setting build variable %s=%s", name, value)
        self.values[name] = value

    def get(self, name: str) -> str | None:
        return self.values.get(name)


class AzurePipelinesVariables:
    """Azure Pipelines logging-command store.

    Writes ``##vso[task.setvariable]`` to stdout for later steps and mirrors
    the value into the current process environment.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self._stream = stream
        self._environ = os.environ if environ is None else environ

    def set(self, name: str, value: str) -> None:
        logger.debug("Setting build variable %s=%s", name, value)
        stream = self._stream if self._stream is not None else sys.stdout
        _ = stream.write(f"##vso[task.setvariable variable={name}]{value}\n")
        stream.flush()
        self._environ[name] = value


class GitHubActionsVariables:
    """GitHub Actions store appending ``NAME=value`` to the GITHUB_ENV file."""

    def __init__(
        self,
        env_file: Path,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.env_file = env_file
        self._environ = os.environ if environ is None else environ

    def set(self, name: str, value: str) -> None:
        logger.debug("Setting build variable %s=%s in %s", name, value, self.env_file)
        with self.env_file.open("a") as f:
            _ = f.write(f"{name}={value}\n")
        self._environ[name] = value


def detect_variables(environ: Mapping[str, str] | None = None) -> VariableStore:
    """Pick the store matching the CI system we are running under."""
    env = os.environ if environ is None else environ
    if env.get("TF_BUILD", "").lower() == "true":
        return AzurePipelinesVariables()
    github_env = env.get("GITHUB_ENV")
    if env.get("GITHUB_ACTIONS", "").lower() == "true" and github_env:
        return GitHubActionsVariables(Path(github_env))
    return MemoryVariables()
