import io

import pytest

from intcalc import Calculator
from intcalc_cli import CalculatorSettings, CLIHandler


@pytest.fixture
def calculator():
    return Calculator()


@pytest.fixture
def make_cli():
    def factory(text: str = "", **settings):
        return CLIHandler(CalculatorSettings(**settings), input_stream=io.StringIO(text))
    return factory


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
