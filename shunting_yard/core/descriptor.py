"""Operator and function descriptors."""
from enum import Enum
import math
import operator
from typing import Any, Callable, Dict, Sequence

from pydantic import BaseModel, ConfigDict, Field


class Associativity(str, Enum):
    """Tie-break rule when chaining operators of equal precedence."""

    LEFT = "left"
    RIGHT = "right"


class Operator(BaseModel):
    """
    Immutable description of one operator or function symbol.

    The same model describes functions: they are stored in a separate table and only act as
    stack markers while parsing, so their precedence and associativity are never consulted.
    """

    # Descriptors are shared between parse and evaluation calls, they must never change
    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, description="Symbol or function name")
    precedence: int = Field(default=0, description="Binding strength, higher binds tighter")
    associativity: Associativity = Field(default=Associativity.LEFT, description="Grouping of equal precedence")
    arity: int = Field(default=2, ge=1, description="Exact number of operands consumed by method")
    method: Callable[..., Any] = Field(..., description="Behavior applied to the popped operands")

    def less_than(self, other: "Operator") -> bool:
        """Return True if this operator binds strictly looser than ``other``."""
        return self.precedence < other.precedence

    def less_than_or_equal(self, other: "Operator") -> bool:
        """Return True if this operator binds looser than or as tight as ``other``."""
        return self.precedence <= other.precedence

    def is_left_associative(self) -> bool:
        return self.associativity == Associativity.LEFT

    def apply(self, operands: Sequence[Any]) -> Any:
        """
        Apply the behavior to operands given in left-to-right order.

        :param Sequence operands: Exactly ``arity`` operands

        :return: Result of the behavior
        """
        return self.method(*operands)


def _is_odd_integer(value: float) -> bool:
    value = float(value)
    return value.is_integer() and value % 2 == 1


def divide(a: float, b: float) -> float:
    """
    IEEE division: a zero divisor gives a signed infinity, or NaN for ``0/0``.

    :param float a: Dividend
    :param float b: Divisor

    :return: Quotient
    :rtype: float
    """
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def power(a: float, b: float) -> float:
    """
    ``math.pow`` returning infinities and NaN instead of raising.

    :param float a: Base
    :param float b: Exponent

    :return: ``a`` raised to ``b``
    :rtype: float
    """
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        # Zero to a negative power, or a negative base to a fractional one
        if a == 0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


def default_operators() -> Dict[str, Operator]:
    """
    Build the standard arithmetic operator table.

    A new dictionary is returned on every call so that engines never share a table.

    :return: Mapping of symbol to descriptor for ``+ - * / ^``
    :rtype: Dict[str, Operator]
    """
    return {
        "+": Operator(symbol="+", precedence=2, arity=2, method=operator.add),
        "-": Operator(symbol="-", precedence=2, arity=2, method=operator.sub),
        "*": Operator(symbol="*", precedence=3, arity=2, method=operator.mul),
        "/": Operator(symbol="/", precedence=3, arity=2, method=divide),
        "^": Operator(symbol="^", precedence=4, associativity=Associativity.RIGHT, arity=2, method=power),
    }
