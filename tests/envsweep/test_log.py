import pytest

import envsweep.log as envsweep_log


def test_default_level_hides_debug(capsys: pytest.CaptureFixture[str]) -> None:
    envsweep_log.debug("hidden", component="delete")
    envsweep_log.info("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_debug_lines_carry_component_tag(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("ENVSWEEP_LOG_LEVEL", "debug")

    envsweep_log.debug("candidates site=example", component="delete")

    assert "[delete] candidates site=example" in capsys.readouterr().out


def test_warnings_go_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    envsweep_log.warning("careful")
    envsweep_log.error("broken")

    captured = capsys.readouterr()
    assert "careful" in captured.err
    assert "broken" in captured.err
    assert captured.out == ""


def test_set_level_filters_info(capsys: pytest.CaptureFixture[str]) -> None:
    envsweep_log.set_level("warning")

    envsweep_log.info("quiet")
    envsweep_log.success("quiet too")

    assert capsys.readouterr().out == ""


def test_unknown_level_falls_back_to_info() -> None:
    envsweep_log.set_level("loud")

    assert envsweep_log.configured_level() is envsweep_log.LogLevel.INFO


def test_warn_alias() -> None:
    assert envsweep_log.parse_level(" WARN ") is envsweep_log.LogLevel.WARNING


def test_level_names_cover_every_level() -> None:
    assert envsweep_log.LEVEL_NAMES == ("trace", "debug", "info", "success", "warning", "error")
