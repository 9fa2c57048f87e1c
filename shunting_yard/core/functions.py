"""Optional library of single-argument math functions."""
import math
from typing import Dict

from shunting_yard.core.descriptor import Operator


# Name -> behavior, all unary
MATH_FUNCTIONS = {
    "sqrt": math.sqrt,
    "abs": abs,
    "exp": math.exp,
    "ln": math.log,
    "log10": math.log10,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "floor": math.floor,
    "ceil": math.ceil,
}


def math_functions() -> Dict[str, Operator]:
    """
    Build a fresh function table from ``MATH_FUNCTIONS``.

    Pass the result as ``functions=`` when constructing an engine, e.g. ``2*sqrt(16)``.

    :return: Mapping of function name to descriptor
    :rtype: Dict[str, Operator]
    """
    return {name: Operator(symbol=name, arity=1, method=method) for name, method in MATH_FUNCTIONS.items()}
