from unittest import mock

import pytest

from wasmbundle.demo_app import SONG, main


class _Stop(Exception):
    pass


def test_echo_joins_arguments(capsys):
    assert main(["echo", "hello", "world"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "hello world\n"
    assert captured.err == "exiting\n"


def test_echo_without_words_prints_empty_line(capsys):
    assert main(["echo"]) == 0
    assert capsys.readouterr().out == "\n"


def test_sleep_uses_given_seconds(capsys):
    with mock.patch("wasmbundle.demo_app.sleep") as fake_sleep:
        assert main(["sleep", "0.5"]) == 0
    fake_sleep.assert_called_once_with(0.5)
    assert capsys.readouterr().err == "exiting\n"


def test_sleep_rejects_non_number():
    with pytest.raises(ValueError):
        main(["sleep", "soon"])


def test_exit_with_code(capsys):
    with pytest.raises(SystemExit) as info:
        main(["exit", "3"])
    assert info.value.code == 3
    assert "exiting" not in capsys.readouterr().err


def test_exit_requires_argument():
    with pytest.raises(ValueError, match="missing argument"):
        main(["exit"])


def test_write_creates_file(tmp_path):
    target = tmp_path / "out.txt"
    assert main(["write", str(target), "some", "text"]) == 0
    assert target.read_text() == "some text"


def test_unknown_command(capsys):
    assert main(["bogus"]) == 1
    assert capsys.readouterr().err == "unknown command: bogus\n"


def test_daemon_sings_until_stopped(capsys):
    with mock.patch("wasmbundle.demo_app.sleep", side_effect=[None, _Stop()]) as fake_sleep:
        with pytest.raises(_Stop):
            main(["daemon"])
    assert fake_sleep.call_count == 2
    fake_sleep.assert_called_with(1)
    assert capsys.readouterr().out == (SONG + "\n") * 2


def test_no_arguments_runs_daemon(capsys):
    with mock.patch("wasmbundle.demo_app.sleep", side_effect=_Stop()):
        with pytest.raises(_Stop):
            main([])
    out = capsys.readouterr().out
    assert out.startswith("This is a song that never ends.")
    assert out == SONG + "\n"