"""Test class ShuntingYard."""
import logging
import math
import operator

import pytest

from shunting_yard.core.descriptor import Operator
from shunting_yard.core.errors import (
    ExpressionSyntaxError,
    UnbalancedClosingParenthesisError,
    UnbalancedOpeningParenthesisError,
)
from shunting_yard.core.functions import math_functions
from shunting_yard.core.parser import ShuntingYard


@pytest.fixture
def engine() -> ShuntingYard:
    return ShuntingYard()


@pytest.mark.parametrize("expr,expected", [
    ("3+4*2", ["3", "4", "2", "*", "+"]),
    ("(3+4)*2", ["3", "4", "+", "2", "*"]),
    ("2^3^2", ["2", "3", "2", "^", "^"]),
    ("8-3-2", ["8", "3", "-", "2", "-"]),
    ("12.5 * 2", ["12.5", "2", "*"]),
    ("-5+3", ["-5", "3", "+"]),
    ("", []),
])
def test_parse(engine: ShuntingYard, expr: str, expected: list) -> None:
    """parse converts infix expressions to RPN."""
    assert engine.parse(expr) == expected


def test_parse_pre_tokenized(engine: ShuntingYard) -> None:
    """A token sequence goes through the same state machine."""
    assert engine.parse(["10", "/", "(", "2", "+", "3", ")"]) == ["10", "2", "3", "+", "/"]
    assert engine.parse(["-", "4", "*", "2"]) == ["-4", "2", "*"]


def test_literal_after_closing_parenthesis_continues_last_entry(engine: ShuntingYard) -> None:
    """Only "(", operators or the start open a new literal."""
    assert engine.parse("(1+2)3") == ["1", "2", "+3"]


@pytest.mark.parametrize("expr", ["(1+2", "((1)", "(", "2*(3+(4-1)"])
def test_unbalanced_opening_parenthesis(engine: ShuntingYard, expr: str) -> None:
    """Pending "(" at the end of input is a syntax error."""
    with pytest.raises(UnbalancedOpeningParenthesisError, match="Too many opening parenthesis"):
        engine.parse(expr)


@pytest.mark.parametrize("expr", ["1+2)", ")", "(1))", "2)*(3"])
def test_unbalanced_closing_parenthesis(engine: ShuntingYard, expr: str) -> None:
    """A ")" without pending "(" is a syntax error."""
    with pytest.raises(UnbalancedClosingParenthesisError, match="Too many closing parenthesis"):
        engine.parse(expr)


def test_syntax_errors_share_a_base_class() -> None:
    """Both parenthesis errors are SyntaxErrors."""
    for error in (UnbalancedOpeningParenthesisError(), UnbalancedClosingParenthesisError()):
        assert isinstance(error, ExpressionSyntaxError)
        assert isinstance(error, SyntaxError)


@pytest.mark.parametrize("expr,expected", [
    ("3+4*2", 11),
    ("(3+4)*2", 14),
    ("2^3^2", 512),
    ("8-3-2", 3),
    ("-5+3", -2),
    ("(-2)^2", 4),
    ("1.5*4", 6),
    ("100/(2+3)/4", 5),
])
def test_resolve(engine: ShuntingYard, expr: str, expected: float) -> None:
    """resolve evaluates infix expressions."""
    assert engine.resolve(expr) == expected


@pytest.mark.parametrize("expr", ["3+4*2", "(3+4)*2", "2^3^2", "-5+3"])
def test_resolve_is_parse_then_resolve_rpn(engine: ShuntingYard, expr: str) -> None:
    """resolve(x) == resolve_rpn(parse(x))."""
    assert engine.resolve(expr) == engine.resolve_rpn(engine.parse(expr))


def test_register_operator(engine: ShuntingYard) -> None:
    """A registered operator takes part in parsing and evaluation."""
    engine.register_operator("%", Operator(symbol="%", precedence=3, arity=2, method=operator.mod))
    assert engine.is_operator("%")
    assert engine.parse("10%3") == ["10", "3", "%"]
    assert engine.resolve("10%3") == 1


def test_register_overwrites_with_warning(engine: ShuntingYard, caplog: pytest.LogCaptureFixture) -> None:
    """Registering an existing symbol logs a warning and replaces it."""
    with caplog.at_level(logging.WARNING, logger="shunting_yard"):
        engine.register_operator("+", Operator(symbol="+", precedence=2, method=operator.sub))
        engine.register_function("neg", Operator(symbol="neg", arity=1, method=operator.neg))
        engine.register_function("neg", Operator(symbol="neg", arity=1, method=abs))
    assert "Operator + already exists" in caplog.text
    assert "Function neg already exists" in caplog.text
    assert engine.resolve("5+3") == 2
    assert engine.resolve_rpn(["-3", "neg"]) == 3


def test_engines_do_not_share_tables() -> None:
    """Each engine owns its operator and function tables."""
    first, second = ShuntingYard(), ShuntingYard()
    first.register_operator("%", Operator(symbol="%", precedence=3, method=operator.mod))
    first.register_function("neg", Operator(symbol="neg", arity=1, method=operator.neg))
    assert not second.is_operator("%")
    assert not second.is_function("neg")


def test_predicates(engine: ShuntingYard) -> None:
    """Membership and parenthesis predicates."""
    assert engine.is_operator("^")
    assert not engine.is_operator("(")
    assert not engine.is_function("sqrt")
    assert engine.is_left_paren("(")
    assert not engine.is_left_paren(")")
    assert engine.is_right_paren(")")


def test_raw_literals() -> None:
    """With raw literals, operands reach the behaviors as strings."""
    engine = ShuntingYard(raw_literals=True)
    assert engine.resolve("ab+cd") == "abcd"
    assert engine.parse("ab+cd") == ["ab", "cd", "+"]


def test_custom_operator_table() -> None:
    """A caller-provided table replaces the default one."""
    engine = ShuntingYard(operators={
        "&": Operator(symbol="&", precedence=1, method=lambda a, b: min(a, b)),
        "|": Operator(symbol="|", precedence=0, method=lambda a, b: max(a, b)),
    })
    assert not engine.is_operator("+")
    assert engine.parse("1|0&1") == ["1", "0", "1", "&", "|"]
    assert engine.resolve("1|0&1") == 1


def test_function_markers() -> None:
    """Functions stay on the stack until the end of input or an enclosing ")"."""
    engine = ShuntingYard(functions=math_functions())
    assert engine.parse("2*sqrt(16)") == ["2", "16", "sqrt", "*"]
    assert engine.resolve("2*sqrt(16)") == 8
    # Dropped by the enclosing parenthesis
    assert engine.parse("(sqrt(16))") == ["16"]


def test_operator_after_operator_is_not_a_sign(engine: ShuntingYard) -> None:
    """"2*-3" yields two consecutive operators and runs out of operands when evaluated."""
    assert engine.parse("2*-3") == ["2", "*", "3", "-"]
    with pytest.raises(IndexError):
        engine.resolve("2*-3")


@pytest.mark.parametrize("expr,expected", [
    ("1/0", math.inf),
    ("(-1)/0", -math.inf),
    ("1/(0-0)", math.inf),
    ("10^400", math.inf),
    ("(-10)^401", -math.inf),
    ("0^(-1)", math.inf),
    ("(-0)^(-1)", -math.inf),
])
def test_default_operators_return_infinities(engine: ShuntingYard, expr: str, expected: float) -> None:
    """Division by zero and overflowing powers give signed infinities."""
    assert engine.resolve(expr) == expected


@pytest.mark.parametrize("expr", ["0/0", "(-8)^0.5"])
def test_default_operators_return_nan(engine: ShuntingYard, expr: str) -> None:
    """Undefined results give NaN."""
    assert math.isnan(engine.resolve(expr))


def test_operator_errors_propagate() -> None:
    """Exceptions raised by behaviors are not wrapped."""
    engine = ShuntingYard(functions=math_functions())
    with pytest.raises(ValueError):
        engine.resolve("sqrt(0-1)")


def test_unparsable_literal_is_nan(engine: ShuntingYard) -> None:
    """Unknown literals evaluate to NaN instead of failing."""
    assert math.isnan(engine.resolve("abc+1"))
