"""Stack machine evaluating RPN token sequences."""
import math
import re
from typing import Any, Dict, Iterable, List

from shunting_yard.core.descriptor import Operator


# Longest numeric prefix accepted by parse_float, e.g. "3.5" in "3.5kg"
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float(token: str) -> float:
    """
    Parse the leading floating-point number of a token.

    Never raises: a token without a numeric prefix gives ``math.nan``.

    :param str token: Literal token

    :return: Parsed number or NaN
    :rtype: float
    """
    match = _FLOAT_PREFIX.match(token)
    if match is None:
        return math.nan
    return float(match.group(0))


def evaluate_rpn(
    tokens: Iterable[str],
    operators: Dict[str, Operator],
    functions: Dict[str, Operator],
    raw_literals: bool = False,
) -> Any:
    """
    Evaluate an RPN token sequence.

    Operators and functions pop exactly ``arity`` operands and push one result. Every other token
    is a literal, pushed as is when ``raw_literals`` is set, else through ``parse_float``.

    Arity is not checked against the stack: running short of operands surfaces as an IndexError.

    :param Iterable[str] tokens: RPN tokens
    :param dict operators: Operator table, looked up first
    :param dict functions: Function table
    :param bool raw_literals: Keep literals as strings

    :return: Bottom element of the operand stack, None if nothing was pushed
    """
    stack: List[Any] = []

    for token in tokens:
        descriptor = operators.get(token) or functions.get(token)
        if descriptor is not None:
            operands = [stack.pop() for _ in range(descriptor.arity)]
            operands.reverse()
            stack.append(descriptor.apply(operands))
        else:
            stack.append(token if raw_literals else parse_float(token))

    return stack[0] if stack else None
