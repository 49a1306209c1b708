# Copyright (c) Syntropy Systems
"""Pytest fixtures for ciplan tests."""

import os
import sys
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

# Store original cwd at module load time
_original_cwd = Path.cwd()

_PIPELINE_ENV = (
    "TF_BUILD",
    "GITHUB_ACTIONS",
    "GITHUB_ENV",
    "BUILD_REASON",
    "BUILD_BUILDID",
    "BUILD_SOURCEVERSION",
    "FORCE_FEATURE",
    "CIPLAN_DAILY_BUILD",
    "CIPLAN_TESTS_PASSED",
    "CIPLAN_EXPERIMENTAL_FEATURE",
)

# Writes an NUnit 2.5 document the way Pester does. Experimental feature
# runs scoped to "empty.tests.ps1" match nothing; "broken.tests.ps1" fails.
FAKE_RUNNER = '''
import os
import sys

args = sys.argv[1:]
output = args[args.index("--output") + 1]
paths = args[args.index("--paths") + 1:]
feature = os.environ.get("CIPLAN_EXPERIMENTAL_FEATURE", "")

total, failures = 3, 0
if "empty.tests.ps1" in paths:
    total = 0
if "broken.tests.ps1" in paths:
    failures = 1
if "crash.tests.ps1" in paths:
    sys.exit(3)

print("feature=" + feature)
print("paths=" + ",".join(paths))
with open(output, "w") as f:
    f.write(
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<test-results total="{total}" errors="0" failures="{failures}" '
        'not-run="0" inconclusive="0" ignored="0" skipped="0" invalid="0" />'
    )
sys.exit(1 if failures else 0)
'''


@pytest.fixture(autouse=True)
def clean_pipeline_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CI system running these tests out of the tests.

    Each variable is registered first so values written during a test are
    undone afterwards.
    """
    for name in _PIPELINE_ENV:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _write_config(project: Path, **values: object) -> Path:
    ciplan_dir = project / ".ciplan"
    ciplan_dir.mkdir(exist_ok=True)
    config_path = ciplan_dir / "config.yaml"
    with config_path.open("w") as f:
        yaml.dump(values, f, default_flow_style=False, sort_keys=False)
    return config_path


@pytest.fixture
def ciplan_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a project whose test host is a fake Pester-like runner."""
    runner_script = temp_dir / "fake_runner.py"
    runner_script.write_text(FAKE_RUNNER)
    (temp_dir / "test").mkdir()

    _ = _write_config(
        temp_dir,
        test_host=sys.executable,
        test_command=[
            "{host}",
            str(runner_script),
            "--output",
            "{output_file}",
            "--include",
            "{include}",
            "--paths",
            "{paths}",
        ],
        elevation_prefix=[],
        experimental_features={},
    )

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def make_config() -> Callable[..., Path]:
    """Return a helper writing .ciplan/config.yaml under a project."""
    return _write_config
