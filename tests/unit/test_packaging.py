import os

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def test_subpackages_without_init_are_packaged():
    setuptools = pytest.importorskip("setuptools")
    with open(os.path.join(ROOT, "pyproject.toml"), encoding="utf-8") as fh:
        assert "namespaces = true" in fh.read()

    found = setuptools.find_namespace_packages(where=ROOT, include=["trajectory_planner*"])
    for name in ["trajectory_planner.utils", "trajectory_planner.cli", "trajectory_planner.motion"]:
        assert name in found, f"{name} would be missing from the wheel"
