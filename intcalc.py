# intcalc.py

"""
Integer Expression Calculator Core
----------------------------------
Evaluates one line of calculator input at a time against a session that keeps
variables alive between lines. A line goes through three stages:

1. Normalization: operators and parentheses are split from operands with single
   spaces, whitespace is collapsed and runs of '-' are folded (a sign in operand
   position collapses by parity, a run in operator position stays one token).
2. Parenthesis resolution: the leftmost innermost group is evaluated on its own
   and its textual form is replaced by the integer result, until no group is left.
3. Reduction: the flat token list is either an assignment (`name = value`) or a
   chain of operands and operators reduced tier by tier ('*' '/' first, then
   '+' '-'), left to right inside each tier.

Nothing is kept between lines except the VariableStore. No AST is built.
"""

import logging
import operator
import string
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# ---------------------------
# Error Classes
# ---------------------------

class CalculatorError(Exception):
    """Base class for calculator errors. The message is what the user sees."""
    message = "Calculation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidExpression(CalculatorError):
    message = "Invalid expression"


class InvalidIdentifier(CalculatorError):
    message = "Invalid identifier"


class UnknownVariable(CalculatorError):
    message = "Unknown variable"


class UnknownCommand(CalculatorError):
    message = "Unknown command"


class DivisionByZero(CalculatorError):
    message = "Division by zero"


class NumberTooLarge(CalculatorError):
    message = "Number is too large"


# ---------------------------
# Constants
# ---------------------------

COMMAND_PREFIX = '/'
ASSIGN = '='
MINUS = '-'
LPAREN = '('
RPAREN = ')'

# Single-character operators; '-' is handled separately because it may form runs.
SIMPLE_OPERATORS = '+*/='
PARENTHESES = LPAREN + RPAREN
SPECIAL_CHARS = SIMPLE_OPERATORS + MINUS + PARENTHESES

# Precedence tiers, highest first.
PRECEDENCE_TIERS: Tuple[Tuple[str, ...], ...] = (
    ('*', '/'),
    ('+', '-'),
)


def _truncating_divide(left: int, right: int) -> int:
    """Integer division rounding toward zero (Python's // rounds toward -inf)."""
    if right == 0:
        raise DivisionByZero()
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


OPERATIONS: Dict[str, Callable[[int, int], int]] = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': _truncating_divide,
}


def format_integer(value: int) -> str:
    """Decimal text of value; the interpreter caps int-to-str conversion length."""
    try:
        return str(value)
    except ValueError:
        raise NumberTooLarge() from None


# ---------------------------
# Character Predicates
# ---------------------------

def is_command(line: str) -> bool:
    return line.strip().startswith(COMMAND_PREFIX)


def is_numeric(token: str) -> bool:
    """True for an optional leading '-' followed by one or more ASCII digits."""
    body = token[1:] if token.startswith(MINUS) else token
    return body != '' and all(ch in string.digits for ch in body)


def is_valid_variable(token: str) -> bool:
    """True for a non-empty run of ASCII letters."""
    return token != '' and all(ch in string.ascii_letters for ch in token)


def is_minus_run(token: str) -> bool:
    return token != '' and all(ch == MINUS for ch in token)


def is_operator_token(token: str) -> bool:
    return (len(token) == 1 and token in SIMPLE_OPERATORS) or is_minus_run(token)


# ---------------------------
# Normalizer
# ---------------------------

def canonical_spacing(text: str) -> str:
    """
    Rewrites expression text into single-space separated tokens.

    Operators and parentheses become standalone tokens. A run of '-' (spaces
    between the dashes allowed) following an operand or ')' stays intact as one
    operator token. A run of '-' anywhere else is a sign: it is reduced by parity
    and glued to the operand or '(' that follows it.
    """
    tokens: List[str] = []
    pending_sign = 0
    expect_operand = True
    pos = 0
    length = len(text)

    def emit(token: str) -> None:
        nonlocal pending_sign
        if pending_sign:
            if token == LPAREN or token[0] not in SPECIAL_CHARS:
                token = (MINUS if pending_sign % 2 else '') + token
            else:
                # A sign with nothing to negate is left for the tokenizer to reject.
                tokens.append(MINUS * pending_sign)
            pending_sign = 0
        tokens.append(token)

    while pos < length:
        ch = text[pos]
        if ch.isspace():
            pos += 1
        elif ch == MINUS:
            count = 0
            while pos < length and (text[pos] == MINUS or text[pos].isspace()):
                if text[pos] == MINUS:
                    count += 1
                pos += 1
            if expect_operand:
                pending_sign += count
            else:
                emit(MINUS * count)
                expect_operand = True
        elif ch in SIMPLE_OPERATORS or ch == LPAREN:
            emit(ch)
            pos += 1
            expect_operand = True
        elif ch == RPAREN:
            emit(ch)
            pos += 1
            expect_operand = False
        else:
            start = pos
            while pos < length and not text[pos].isspace() and text[pos] not in SPECIAL_CHARS:
                pos += 1
            emit(text[start:pos])
            expect_operand = False

    if pending_sign:
        tokens.append(MINUS * pending_sign)
    return ' '.join(token for token in tokens if token)


def normalize_expression(line: str) -> str:
    """
    Trims a raw input line and canonicalizes its spacing.
    Command lines (first character '/') are returned trimmed but otherwise untouched.
    """
    line = line.strip()
    if line.startswith(COMMAND_PREFIX):
        return line
    normalized = canonical_spacing(line)
    logger.debug(f"Normalized {line!r} to {normalized!r}")
    return normalized


# ---------------------------
# Tokenizer / Classifier
# ---------------------------

def validate_expression(text: str) -> None:
    """Rejects runs of '*'/'/' and unbalanced parenthesis counts."""
    previous = ''
    for ch in text:
        if ch.isspace():
            continue
        if ch in '*/' and previous in ('*', '/'):
            raise InvalidExpression()
        previous = ch
    if text.count(LPAREN) != text.count(RPAREN):
        raise InvalidExpression()


def tokenize(text: str) -> List[str]:
    """Validates normalized text and splits it on single spaces."""
    validate_expression(text)
    if not text:
        raise InvalidExpression()
    return text.split(' ')


def classify_operator(token: str) -> str:
    """
    Maps an operator token to the arithmetic operator it stands for.
    A run of '-' subtracts when its length is odd and adds when it is even.
    """
    if is_minus_run(token):
        return MINUS if len(token) % 2 else '+'
    if len(token) == 1 and token in OPERATIONS:
        return token
    raise InvalidExpression()


# ---------------------------
# Variable Store
# ---------------------------

class VariableStore:
    """Session-wide mapping from variable name to its last assigned value."""

    def __init__(self):
        self._values: Dict[str, int] = {}

    def get(self, name: str) -> int:
        try:
            return self._values[name]
        except KeyError:
            raise UnknownVariable() from None

    def set(self, name: str, value: int) -> None:
        self._values[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)


# ---------------------------
# Working Set
# ---------------------------

class WorkingSet:
    """
    Transient state of one evaluation pass.
    After parsing, len(operands) == len(operators) + 1, and operators is either
    empty, exactly ['='], or arithmetic only.
    """

    def __init__(self):
        self.var_name: Optional[str] = None
        self.operands: List[int] = []
        self.operators: List[str] = []

    def reset(self) -> None:
        self.var_name = None
        self.operands = []
        self.operators = []

    def is_empty(self) -> bool:
        return self.var_name is None and not self.operands and not self.operators


# ---------------------------
# Precedence Evaluator
# ---------------------------

def find_any(needles: Sequence[str], haystack: Sequence[str]) -> int:
    """Index of the first element of haystack found in needles, or -1."""
    for index, item in enumerate(haystack):
        if item in needles:
            return index
    return -1


def apply_operator(symbol: str, left: int, right: int) -> int:
    try:
        operation = OPERATIONS[symbol]
    except KeyError:
        raise InvalidExpression() from None
    return operation(left, right)


def reduce_operations(operands: List[int], operators: List[str]) -> int:
    """
    Reduces operands/operators in place, one precedence tier at a time.
    Within a tier the leftmost operator is always applied first.
    """
    if not operands or len(operands) != len(operators) + 1:
        raise InvalidExpression()

    for tier in PRECEDENCE_TIERS:
        index = find_any(tier, operators)
        while index != -1:
            result = apply_operator(operators[index], operands[index], operands[index + 1])
            logger.debug(f"Applied {operators[index]!r} at position {index}")
            del operators[index]
            del operands[index + 1]
            operands[index] = result
            index = find_any(tier, operators)

    return operands[0]


# ---------------------------
# Calculator Session
# ---------------------------

class Calculator:
    """
    One calculator session: the variable store plus the working set used by
    the evaluation pass currently running.
    """

    def __init__(self, variables: Optional[VariableStore] = None):
        self.variables = variables if variables is not None else VariableStore()
        self.expression = WorkingSet()

    def evaluate(self, line: str) -> Optional[int]:
        """
        Evaluates one input line.
        Returns the result of an expression, or None for a blank line or an
        assignment. Raises a CalculatorError subclass on failure.
        """
        self.expression.reset()
        text = normalize_expression(line)
        if not text:
            return None
        if text.startswith(COMMAND_PREFIX):
            raise UnknownCommand()
        text = self.resolve_parentheses(text)
        return self.calculate(text)

    def resolve_parentheses(self, text: str) -> str:
        """
        Replaces every parenthesized group with its value, innermost first and
        left to right, and returns the flat text that remains.
        """
        if text.count(LPAREN) != text.count(RPAREN):
            raise InvalidExpression()

        group = self._find_innermost_group(text)
        while group is not None:
            start, end = group
            interior = text[start + 1:end].strip()
            if not interior:
                raise InvalidExpression()
            value = self.calculate(interior, sub_expression=True)
            replacement = format_integer(value)
            logger.debug(f"Resolved group {text[start:end + 1]!r} to {replacement}")
            text = canonical_spacing(text[:start] + replacement + text[end + 1:])
            group = self._find_innermost_group(text)

        return text

    @staticmethod
    def _find_innermost_group(text: str) -> Optional[Tuple[int, int]]:
        """Positions of the first ')' and the closest '(' before it."""
        open_index: Optional[int] = None
        for index, ch in enumerate(text):
            if ch == LPAREN:
                open_index = index
            elif ch == RPAREN:
                if open_index is None:
                    raise InvalidExpression()
                return open_index, index
        if open_index is not None:
            raise InvalidExpression()
        return None

    def calculate(self, text: str, sub_expression: bool = False) -> Optional[int]:
        """
        Evaluates flat (parenthesis-free) normalized text.
        Assignments store their value and return None; they are rejected
        inside sub-expressions. The working set is cleared on every exit path.
        """
        try:
            if sub_expression and ASSIGN in text.split(' '):
                raise InvalidExpression()

            self.parse_expression(text)
            operands = self.expression.operands
            operators = self.expression.operators

            if not operators:
                if sub_expression:
                    raise InvalidExpression()
                return operands[0]
            if operators[0] == ASSIGN:
                self.variables.set(self.expression.var_name, operands[0])
                logger.debug(f"Assigned {self.expression.var_name}")
                return None
            return reduce_operations(operands, operators)
        finally:
            self.expression.reset()

    def parse_expression(self, text: str) -> None:
        """Fills the working set from normalized, parenthesis-free text."""
        parts = tokenize(text)

        if len(parts) == 1:
            self.expression.operands.append(self.get_value(parts[0]))
            return

        if ASSIGN in parts:
            if len(parts) != 3 or parts[1] != ASSIGN:
                raise InvalidExpression()
            if not is_valid_variable(parts[0]):
                raise InvalidIdentifier()
            value = self.get_value(parts[2])
            self.expression.var_name = parts[0]
            self.expression.operands.append(value)
            self.expression.operators.append(ASSIGN)
            return

        if len(parts) % 2 == 0:
            raise InvalidExpression()

        for index, part in enumerate(parts):
            if index % 2 == 0:
                if is_operator_token(part):
                    raise InvalidExpression()
                self.expression.operands.append(self.get_value(part))
            else:
                self.expression.operators.append(classify_operator(part))

    def get_value(self, token: str) -> int:
        """Resolves an operand token: an integer literal or a known variable."""
        if is_numeric(token):
            try:
                return int(token)
            except ValueError:
                raise NumberTooLarge() from None
        if not is_valid_variable(token):
            raise InvalidIdentifier()
        return self.variables.get(token)
