"""Smoke tests for example scripts.

These tests run each example script in a subprocess and check that it exits
cleanly and reports a converged search.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]


def _run_example(name: str) -> subprocess.CompletedProcess:
    script = ROOT / "examples" / name
    assert script.exists(), f"Example script not found: {script}"
    result = subprocess.run(
        [sys.executable, str(script)],
        capture_output=True,
        text=True,
        check=False,
        timeout=60,
    )
    assert result.returncode == 0, (
        f"Example script failed with return code {result.returncode}.\n"
        f"STDOUT:\n{result.stdout}\n"
        f"STDERR:\n{result.stderr}"
    )
    return result


@pytest.mark.parametrize(
    "name, expected",
    [
        ("simplex_progress.py", "Converged: True"),
        ("brent_curve_fit.py", "Slope: 0.483169"),
    ],
)
def test_example_runs(name: str, expected: str) -> None:
    result = _run_example(name)
    assert expected in result.stdout


def test_brent_example_handles_undefined_region() -> None:
    result = _run_example("brent_curve_fit.py")
    assert "Minimum at x = 2.0000" in result.stdout
