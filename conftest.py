from pathlib import Path

import pytest
from _pytest.doctest import DoctestModule

ROOT = Path(__file__).resolve().parent

DOCTEST_MODULES = {
    ROOT / "src" / "envsweep" / "__init__.py",
    ROOT / "src" / "envsweep" / "config.py",
    ROOT / "src" / "envsweep" / "deletion.py",
    ROOT / "src" / "envsweep" / "exec.py",
    ROOT / "src" / "envsweep" / "git.py",
    ROOT / "src" / "envsweep" / "io.py",
    ROOT / "src" / "envsweep" / "log.py",
    ROOT / "src" / "envsweep" / "models.py",
    ROOT / "src" / "envsweep" / "paths.py",
    ROOT / "src" / "envsweep" / "providers.py",
    ROOT / "src" / "envsweep" / "retention.py",
}


def pytest_collect_file(
    parent: pytest.Collector, file_path: Path
) -> DoctestModule | None:
    path = file_path if isinstance(file_path, Path) else Path(str(file_path))
    if path in DOCTEST_MODULES:
        return DoctestModule.from_parent(parent, path=path)
    return None
