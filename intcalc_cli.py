# intcalc_cli.py

"""
Command-Line Front End for the Integer Calculator

Implements the read-eval-print loop around `intcalc.Calculator`:
1. Settings are validated by a Pydantic model built from argparse options,
   with environment variables as defaults
2. Interactive terminals read through prompt_toolkit (history, line editing);
   piped input is read line by line without a prompt
3. Lines starting with '/' are commands (/help, /exit); everything else is an
   expression or an assignment handed to the calculator
4. Calculator errors are printed and the session continues; running out of
   input ends the process with a non-zero status
"""

import argparse
import logging
import os
import sys
from typing import List, Optional, TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from pydantic import BaseModel, Field, ValidationError, field_validator

from intcalc import Calculator, CalculatorError, UnknownCommand, format_integer, is_command

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

HELP_COMMAND = '/help'
EXIT_COMMAND = '/exit'


# ----- Configuration -----

class CalculatorSettings(BaseModel):
    """Runtime settings for the calculator REPL."""
    prompt: str = Field(default="> ", description="Prompt shown on interactive terminals")
    history_file: Optional[str] = Field(default=None, description="File used to persist input history")
    log_level: str = Field(default="WARNING", description="Logging level name")

    @field_validator('prompt')
    @classmethod
    def prompt_must_be_single_line(cls, v: str) -> str:
        if '\n' in v or '\r' in v:
            raise ValueError('Prompt cannot contain line breaks')
        return v

    @field_validator('history_file')
    @classmethod
    def expand_history_file(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return os.path.expanduser(v.strip())

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}")
        return level


# ----- Help -----

class HelpHandler:
    """
    Prints usage instructions for the calculator.
    """
    HELP_TEXT = """
This program calculates integer arithmetic expressions.
Supported operations:
  - Addition and subtraction:       1 + 2 - 3
  - Multiplication and division:    4 * 5 / 6   (integer division)
  - Parentheses:                    (1 + 2) * 3
  - Repeated minus signs:           5 - -3, 5 --- 3
  - Variables:                      a = 5, then a * 2
Variable names contain latin letters only and are case-sensitive.

Commands:
  /help   Show this help message
  /exit   Exit the calculator
"""

    @staticmethod
    def print_help():
        print(HelpHandler.HELP_TEXT.strip())


# ----- CLI Handler (REPL) -----

class CLIHandler:
    """
    Handles the REPL loop, commands and user interaction for one session.
    """

    def __init__(self, settings: Optional[CalculatorSettings] = None, input_stream: Optional[TextIO] = None):
        self.settings = settings or CalculatorSettings()
        self.calculator = Calculator()
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.running = True
        self.session = self._create_session()

    def _create_session(self) -> Optional[PromptSession]:
        """
        Builds a prompt_toolkit session for interactive terminals only.
        """
        if not self.input_stream.isatty():
            return None
        if self.settings.history_file:
            history = FileHistory(self.settings.history_file)
        else:
            history = InMemoryHistory()
        return PromptSession(history=history)

    def read_line(self) -> str:
        """
        Reads the next input line. Raises EOFError when the input is exhausted.
        """
        if self.session is not None:
            return self.session.prompt(self.settings.prompt)
        line = self.input_stream.readline()
        if line == '':
            raise EOFError("End of input")
        return line

    def _run_command(self, command: str) -> None:
        if command == HELP_COMMAND:
            HelpHandler.print_help()
        elif command == EXIT_COMMAND:
            print("Bye!")
            self.running = False
        else:
            raise UnknownCommand()

    def process_line(self, line: str) -> None:
        """
        Handles one line of input: a command, an assignment or an expression.
        """
        line = line.strip()
        if not line:
            return

        try:
            if is_command(line):
                self._run_command(line)
                return
            result = self.calculator.evaluate(line)
            if result is not None:
                print(format_integer(result))
        except CalculatorError as e:
            logger.info(f"Rejected input {line!r}: {e}")
            print(e)

    def run(self):
        """
        Main REPL loop. Ends on /exit; EOFError from read_line propagates.
        """
        while self.running:
            try:
                line = self.read_line()
            except KeyboardInterrupt:
                print("^C")
                continue
            self.process_line(line)


# ----- Main Entry Point -----

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive integer calculator with variables.")
    parser.add_argument(
        "--prompt",
        default=os.getenv("INTCALC_PROMPT", "> "),
        help="Prompt shown on interactive terminals (env: INTCALC_PROMPT).",
    )
    parser.add_argument(
        "--history-file",
        default=os.getenv("INTCALC_HISTORY_FILE"),
        help="File used to persist input history (env: INTCALC_HISTORY_FILE).",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("INTCALC_LOG_LEVEL", "WARNING"),
        help="Logging level: DEBUG, INFO, WARNING, ERROR or CRITICAL (env: INTCALC_LOG_LEVEL).",
    )
    return parser


def load_settings(argv: Optional[List[str]] = None) -> CalculatorSettings:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return CalculatorSettings(
            prompt=args.prompt,
            history_file=args.history_file,
            log_level=args.log_level,
        )
    except ValidationError as e:
        parser.error(str(e))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the calculator application.
    """
    settings = load_settings(argv)
    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)

    cli = CLIHandler(settings)
    try:
        cli.run()
    except EOFError as e:
        logger.error(f"Cannot read input: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
