from __future__ import annotations

import io

import pytest

from jirae.submission import CONFIRM_PROMPT, confirm_submit


def test_confirm_submit_accepts_literal_y() -> None:
    out = io.StringIO()

    assert confirm_submit(stdin=io.StringIO("y\n"), stdout=out) is True
    assert out.getvalue() == CONFIRM_PROMPT


def test_confirm_submit_accepts_y_without_newline() -> None:
    assert confirm_submit(stdin=io.StringIO("y"), stdout=io.StringIO()) is True


@pytest.mark.parametrize("line", ["", "\n", "Y\n", "yes\n", "n\n", " y\n", "y \n"])
def test_confirm_submit_declines_everything_else(line: str) -> None:
    assert confirm_submit(stdin=io.StringIO(line), stdout=io.StringIO()) is False


def test_confirm_submit_declines_on_read_failure() -> None:
    stdin = io.StringIO("y\n")
    stdin.close()

    assert confirm_submit(stdin=stdin, stdout=io.StringIO()) is False


def test_confirm_submit_defaults_to_process_streams(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("y\n"))

    assert confirm_submit() is True
    assert capsys.readouterr().out == CONFIRM_PROMPT
