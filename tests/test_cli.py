import io
import logging
import sys

import pytest

from salvo import bot, config, encryption
from salvo.cli import describe_save_error, main
from salvo.savefile import CorruptSaveError, CrcError, SaveIOError, SaveNotFoundError

NEW_CPU_GAME = ["N", "10", "4", "1", "2", "3", "4"]


def test_save_error_wording():
    assert describe_save_error(SaveNotFoundError("x")) == "File not found."
    assert describe_save_error(SaveIOError("x")) == "An I/O error has occurred."
    assert describe_save_error(CorruptSaveError("x")) == "The specified save file is corrupted."
    assert describe_save_error(CrcError("x")) == "The specified save file is corrupted."


def test_cpu_vs_cpu_plays_to_the_end(console_factory, tmp_path):
    console = console_factory(*NEW_CPU_GAME)
    assert main(["--cpu-vs-cpu", "--seed", "3", "--save-dir", str(tmp_path)], console=console) == 0

    out = console.writer.getvalue()
    assert out.startswith("BATTLESHIPS!!!")
    assert "Starting turn 1." in out
    assert "The winner is" in out
    assert "(Winner)" in out and "(Loser)" in out
    assert out.rstrip().endswith("Bye!")


def test_quit_save_and_resume(console_factory, tmp_path):
    console = console_factory(
        "N",
        "10",
        "4",
        "1",
        "1",
        "1",
        "1",
        "H",
        "Ann",
        "C",
        "A0",
        "C0",
        "E0",
        "G0",
        "",  # preparations completed
        "exit",
        "Y",
        "game1",
    )
    assert main(["--seed", "3", "--save-dir", str(tmp_path)], console=console) == 0
    out = console.writer.getvalue()
    assert 'Game "game1" saved.' in out
    assert (tmp_path / "game1.sav").exists()

    console = console_factory("", "exit", "N")
    assert main(["--load", "game1", "--save-dir", str(tmp_path)], console=console) == 0
    out = console.writer.getvalue()
    assert 'Game "game1" loaded.' in out
    assert "It's Ann's turn." in out
    assert "Bye!" in out


def test_load_prompt_retries_after_missing_file(console_factory, tmp_path):
    console = console_factory("Y", "nope", *NEW_CPU_GAME)
    assert main(["--cpu-vs-cpu", "--seed", "1", "--save-dir", str(tmp_path)], console=console) == 0
    out = console.writer.getvalue()
    assert "File not found." in out
    assert 'Game "nope" cannot be loaded. Please try again.' in out
    assert "The winner is" in out


def test_load_flag_with_missing_file_fails(console_factory, tmp_path):
    console = console_factory()
    assert main(["--load", "nope", "--save-dir", str(tmp_path)], console=console) == 1
    assert "File not found." in console.writer.getvalue()


def test_corrupted_save_is_reported(console_factory, tmp_path):
    (tmp_path / "bad.sav").write_bytes(b"garbage")
    console = console_factory()
    assert main(["--load", "bad", "--save-dir", str(tmp_path)], console=console) == 1
    assert "The specified save file is corrupted." in console.writer.getvalue()


def test_closed_input_ends_cleanly(console_factory):
    console = console_factory()
    assert main(["--cpu-vs-cpu"], console=console) == 0
    out = console.writer.getvalue()
    assert "Input closed." in out
    assert "Bye!" in out


def test_bot_entrypoint(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["salvo-bot", "--seed", "2"])
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n".join(NEW_CPU_GAME) + "\n"))
    with pytest.raises(SystemExit) as exc:
        bot.main()
    assert exc.value.code == 0
    assert "The winner is" in capsys.readouterr().out


@pytest.mark.parametrize(
    "name, value",
    [
        ("SEED_TEXT", "twelve"),
        ("SAVE_KEY_HEX", "not-hex"),
        ("SAVE_KEY_HEX", "00ff"),  # valid hex, but not an AES key length
    ],
)
def test_bad_environment_config_exits_with_status_1(monkeypatch, caplog, console_factory, name, value):
    monkeypatch.setattr(config, name, value)
    console = console_factory(*NEW_CPU_GAME)
    with caplog.at_level(logging.ERROR, logger="salvo.cli"):
        assert main(["--cpu-vs-cpu"], console=console) == 1
    assert "Invalid configuration" in caplog.text
    assert console.writer.getvalue() == ""


def test_seed_flag_overrides_environment(monkeypatch, console_factory):
    monkeypatch.setattr(config, "SEED_TEXT", "twelve")
    console = console_factory(*NEW_CPU_GAME)
    assert main(["--cpu-vs-cpu", "--seed", "4"], console=console) == 0
    assert "The winner is" in console.writer.getvalue()


def test_environment_save_key_seals_saves(monkeypatch, console_factory):
    monkeypatch.setattr(config, "SAVE_KEY_HEX", "00" * 16)
    assert main(["--cpu-vs-cpu", "--seed", "4"], console=console_factory(*NEW_CPU_GAME)) == 0
    assert encryption.encryption_enabled()


def test_config_parsing(monkeypatch):
    monkeypatch.setattr(config, "SEED_TEXT", "42")
    monkeypatch.setattr(config, "SAVE_KEY_HEX", None)
    assert config.seed() == 42
    assert config.save_key() is None
    monkeypatch.setattr(config, "SEED_TEXT", "4.2")
    with pytest.raises(ValueError):
        config.seed()
