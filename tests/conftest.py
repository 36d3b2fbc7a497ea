import importlib.util
from pathlib import Path

import pytest

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def _load_script(name: str):
    """Import scripts/<name>.py, which is not part of the installed package."""
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def solve_cli():
    return _load_script("solve_puzzle")


@pytest.fixture(scope="module")
def sweep_script():
    return _load_script("run_parallel")
