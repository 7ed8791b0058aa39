# ruff: noqa: E402

import builtins
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import envsweep.io as io
import envsweep.log as envsweep_log


@pytest.fixture(autouse=True)
def _default_patches(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(io, "_use_questionary", lambda: False)
    monkeypatch.setattr(envsweep_log, "_configured_level", None)
    monkeypatch.setattr(envsweep_log, "_no_color_override", True)
    monkeypatch.delenv("ENVSWEEP_LOG_LEVEL", raising=False)

    def fail_input(prompt: str = "") -> str:
        raise AssertionError("prompted unexpectedly")

    monkeypatch.setattr(builtins, "input", fail_input)
