import builtins
from unittest.mock import patch

import pytest

import envsweep.io as io


@pytest.mark.parametrize(
    ("answer", "expected"), [("y", True), ("YES", True), ("n", False), ("", False)]
)
def test_confirm_plain_prompt(
    monkeypatch: pytest.MonkeyPatch, answer: str, expected: bool
) -> None:
    prompts: list[str] = []

    def fake_input(prompt: str = "") -> str:
        prompts.append(prompt)
        return answer

    monkeypatch.setattr(builtins, "input", fake_input)

    assert io.confirm("Delete ci-1?") is expected
    assert prompts == ["Delete ci-1? [y/N]: "]


def test_confirm_closed_stdin_declines(monkeypatch: pytest.MonkeyPatch) -> None:
    def closed(prompt: str = "") -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", closed)

    assert io.confirm("Delete ci-1?", default=True) is False


def test_confirm_uses_questionary_on_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(io, "_use_questionary", lambda: True)
    with patch("envsweep.io.questionary.confirm") as prompt:
        prompt.return_value.ask.return_value = None

        assert io.confirm("Delete ci-1?") is False

    prompt.assert_called_once_with("Delete ci-1?", default=False)


def test_die_exits_with_code(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        io.die("boom", code=3)

    assert exc_info.value.code == 3
    assert "error: boom" in capsys.readouterr().err
