"""
Convenience script to run the full test suite.

Usage (from project root):

    python tests.py

Behaviour:
- Installs the package with its test extra (`.[dev]`) if pytest, numpy or
  loguru cannot be imported.
- Runs `python -m pytest` in the project root, forwarding extra arguments.
"""
from __future__ import annotations

import importlib.util
import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent
REQUIRED = ("pytest", "numpy", "loguru", "doudizhu")


def ensure_test_dependencies() -> None:
    missing = [name for name in REQUIRED if importlib.util.find_spec(name) is None]
    if not missing:
        return

    print(f"Missing {', '.join(missing)}; installing .[dev] ...")
    subprocess.check_call(
        [sys.executable, "-m", "pip", "install", "-e", ".[dev]"],
        cwd=str(ROOT),
    )


def main() -> None:
    ensure_test_dependencies()
    print("Running test suite with pytest ...")
    subprocess.check_call(
        [sys.executable, "-m", "pytest", *sys.argv[1:]],
        cwd=str(ROOT),
    )


if __name__ == "__main__":
    main()
