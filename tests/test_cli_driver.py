"""Tests for the CLI driver's text rendering and game loop."""

import builtins

import cli_driver
from board import MergeEvent


def test_render_board_marks_merges():
    text = cli_driver.render_board({(0, 0): 4, (3, 3): 2}, 4, [MergeEvent(0, 0, 4)])
    lines = text.splitlines()
    assert lines[0].split("\t") == ["4*", "0", "0", "0"]
    assert lines[3].split("\t") == ["0", "0", "0", "2"]
    assert lines[-1] == "-" * 24


def test_main_quits_on_q(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(cli_driver.settings, "data_dir", tmp_path)
    inputs = iter(["x", "a", "d", "q"])
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(inputs))

    cli_driver.main()

    out = capsys.readouterr().out
    assert "Invalid input. Use W, A, S, D." in out
    assert "Quitting game." in out
    assert "--- Final Board State ---" in out


def test_render_board_without_merges():
    text = cli_driver.render_board({(1, 2): 8}, 4)
    assert "*" not in text
    assert text.splitlines()[1].split("\t") == ["0", "0", "8", "0"]
