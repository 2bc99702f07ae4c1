# test_intcalc_cli.py

import io
import os
import sys

import pytest
from pydantic import ValidationError

import intcalc_cli
from intcalc_cli import CalculatorSettings, HelpHandler, load_settings, main

# ---------------------------
# Settings Tests
# ---------------------------

def test_settings_defaults():
    settings = CalculatorSettings()
    assert settings.prompt == "> "
    assert settings.history_file is None
    assert settings.log_level == "WARNING"

def test_settings_normalize_log_level():
    assert CalculatorSettings(log_level=" debug ").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        CalculatorSettings(log_level="verbose")

def test_settings_history_file():
    assert CalculatorSettings(history_file="   ").history_file is None
    expanded = CalculatorSettings(history_file="~/.intcalc_history").history_file
    assert expanded == os.path.expanduser("~/.intcalc_history")

def test_settings_prompt_single_line():
    with pytest.raises(ValidationError):
        CalculatorSettings(prompt="calc\n> ")

def test_load_settings_from_arguments():
    settings = load_settings(["--prompt", "calc> ", "--log-level", "info"])
    assert settings.prompt == "calc> "
    assert settings.log_level == "INFO"

def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("INTCALC_PROMPT", "= ")
    monkeypatch.setenv("INTCALC_LOG_LEVEL", "error")
    settings = load_settings([])
    assert settings.prompt == "= "
    assert settings.log_level == "ERROR"

def test_load_settings_invalid_exits():
    with pytest.raises(SystemExit) as e:
        load_settings(["--log-level", "loud"])
    assert e.value.code == 2

# ---------------------------
# Line Processing Tests
# ---------------------------

def test_process_line_prints_result(make_cli, capsys):
    cli = make_cli()
    cli.process_line("2 + 3 * 4\n")
    assert capsys.readouterr().out == "14\n"

def test_process_line_assignment_prints_nothing(make_cli, capsys):
    cli = make_cli()
    cli.process_line("x = 5")
    assert capsys.readouterr().out == ""
    cli.process_line("x")
    assert capsys.readouterr().out == "5\n"

def test_process_line_blank_is_ignored(make_cli, capsys):
    cli = make_cli()
    cli.process_line("   \n")
    assert capsys.readouterr().out == ""
    assert len(cli.calculator.variables) == 0
    assert cli.running

def test_process_line_prints_errors_and_continues(make_cli, capsys):
    cli = make_cli()
    cli.process_line("y = 10")
    cli.process_line("y = = 2")
    cli.process_line("z")
    cli.process_line("4 / 0")
    cli.process_line("a1")
    cli.process_line("y")
    assert capsys.readouterr().out == (
        "Invalid expression\nUnknown variable\nDivision by zero\nInvalid identifier\n10\n"
    )
    assert cli.running

def test_help_command(make_cli, capsys):
    cli = make_cli()
    cli.process_line("/help")
    out = capsys.readouterr().out
    assert out == HelpHandler.HELP_TEXT.strip() + "\n"
    assert "/exit" in out

def test_exit_command(make_cli, capsys):
    cli = make_cli()
    cli.process_line("/exit")
    assert capsys.readouterr().out == "Bye!\n"
    assert not cli.running

def test_unknown_command(make_cli, capsys):
    cli = make_cli()
    cli.process_line("/quit")
    cli.process_line("/HELP")
    assert capsys.readouterr().out == "Unknown command\nUnknown command\n"
    assert cli.running

# ---------------------------
# REPL Loop Tests
# ---------------------------

def test_non_interactive_stream_has_no_prompt_session(make_cli):
    cli = make_cli("1\n")
    assert cli.session is None
    assert cli.read_line() == "1\n"
    with pytest.raises(EOFError):
        cli.read_line()

def test_run_until_exit(make_cli, capsys):
    cli = make_cli("x = 5\n\nx\n(x + 1) * 2\n/exit\n4\n")
    cli.run()
    assert capsys.readouterr().out == "5\n12\nBye!\n"

def test_run_without_exit_raises_eof(make_cli, capsys):
    cli = make_cli("1 + 1\n")
    with pytest.raises(EOFError):
        cli.run()
    assert capsys.readouterr().out == "2\n"

def test_variables_persist_for_whole_session(make_cli, capsys):
    cli = make_cli("a = 2\nb = 3\nbad input\na * b\n/exit\n")
    cli.run()
    assert capsys.readouterr().out == "Invalid expression\n6\nBye!\n"
    assert cli.calculator.variables.get("a") == 2

# ---------------------------
# Main Entry Point Tests
# ---------------------------

def test_main_exit_status_zero(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("2 + 2\n/exit\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "4\nBye!\n"

def test_main_end_of_input_is_fatal(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("7\n"))
    assert main([]) == 1
    assert capsys.readouterr().out == "7\n"

def test_main_uses_settings(monkeypatch):
    created = []
    original = intcalc_cli.CLIHandler

    def recording_handler(settings, *args, **kwargs):
        created.append(settings)
        return original(settings, *args, **kwargs)

    monkeypatch.setattr(sys, "stdin", io.StringIO("/exit\n"))
    monkeypatch.setattr(intcalc_cli, "CLIHandler", recording_handler)
    assert main(["--prompt", "$ "]) == 0
    assert created[0].prompt == "$ "


# ---------------------------
# Large Number Tests
# ---------------------------

@pytest.mark.skipif(
    not hasattr(sys, "get_int_max_str_digits") or sys.get_int_max_str_digits() == 0,
    reason="interpreter has no int/str conversion limit",
)
def test_oversized_numbers_do_not_end_session(make_cli, capsys):
    cli = make_cli()
    cli.process_line("9" * 5000)
    cli.process_line("x = 1000000000")
    product = " * ".join(["x"] * 500)
    cli.process_line(product)
    cli.process_line(f"({product}) - 1")
    cli.process_line("x + 1")
    assert capsys.readouterr().out == (
        "Number is too large\nNumber is too large\nNumber is too large\n1000000001\n"
    )
    assert cli.running
