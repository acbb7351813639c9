from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/treematch/cli.py",
        "src/treematch/config.py",
        "src/treematch/index/__init__.py",
        "src/treematch/scoring/__init__.py",
        "src/treematch/sources/__init__.py",
        "src/treematch/report/__init__.py",
        "src/treematch/security/__init__.py",
        "src/treematch/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
