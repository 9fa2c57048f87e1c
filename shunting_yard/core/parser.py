"""Parse infix expressions to RPN with the shunting-yard algorithm and evaluate them."""
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from shunting_yard.common.logger import logger
from shunting_yard.core.descriptor import Operator, default_operators
from shunting_yard.core.errors import UnbalancedClosingParenthesisError, UnbalancedOpeningParenthesisError
from shunting_yard.core.evaluator import evaluate_rpn
from shunting_yard.core.tokenizer import Expression, Tokenizer


LEFT_PAREN = "("
RIGHT_PAREN = ")"


class ShuntingYard(BaseModel):
    """
    Expression engine: infix -> RPN -> value.

    Each instance owns its operator and function tables. They are only changed through
    ``register_operator`` and ``register_function``, never while parsing or evaluating, so
    concurrent ``resolve`` calls on a stable engine are safe. Registering while another thread
    evaluates is up to the caller to serialize.

    The Shunting-yard algorithm keeps pending operators on a stack and moves them to the output
    queue once an operator of looser binding, a closing parenthesis or the end of input shows up.

    Examples:
        - Infix expression: 3+4*2
        - Reverse Polish Notation: 3 4 2 * +
    """

    operators: Dict[str, Operator] = Field(default_factory=default_operators, description="Symbol -> operator")
    functions: Dict[str, Operator] = Field(default_factory=dict, description="Name -> function")
    raw_literals: bool = Field(default=False, description="Keep literals as strings instead of parsing floats")

    def register_operator(self, symbol: str, descriptor: Operator) -> None:
        """Add an operator, overwriting (with a warning) any previous one."""
        if symbol in self.operators:
            logger.warning("Operator %s already exists", symbol)
        self.operators[symbol] = descriptor

    def register_function(self, name: str, descriptor: Operator) -> None:
        """Add a function, overwriting (with a warning) any previous one."""
        if name in self.functions:
            logger.warning("Function %s already exists", name)
        self.functions[name] = descriptor

    def is_operator(self, token: str) -> bool:
        return token in self.operators

    def is_function(self, token: str) -> bool:
        return token in self.functions

    @staticmethod
    def is_left_paren(token: str) -> bool:
        return token == LEFT_PAREN

    @staticmethod
    def is_right_paren(token: str) -> bool:
        return token == RIGHT_PAREN

    def _symbols(self) -> List[str]:
        # Registration order, operators first
        return list(self.operators) + list(self.functions)

    def _pops_before(self, token: str, top: str) -> bool:
        """Whether the stacked operator ``top`` must be output before pushing ``token``."""
        current = self.operators[token]
        stacked = self.operators[top]
        return (current.is_left_associative() and current.less_than_or_equal(stacked)) or current.less_than(stacked)

    def parse(self, expression: Expression) -> List[str]:
        """
        Convert an infix expression into a list of RPN tokens.

        Literals are assembled from consecutive non-symbol tokens: a literal token following
        another literal (or a closing parenthesis) is appended to the last output entry.

        :param Expression expression: Raw string, or already tokenized sequence

        :return: Tokens in RPN order
        :rtype: List[str]
        :raises UnbalancedClosingParenthesisError: On a ")" with no pending "("
        :raises UnbalancedOpeningParenthesisError: On a "(" still pending at the end
        """
        # Each output entry is a buffer of fragments, joined once parsing is done
        output: List[List[str]] = []
        stack: List[str] = []
        last_token = ""

        tokenizer = Tokenizer(self._symbols, self.is_operator, self.is_left_paren)
        for token in tokenizer.tokenize(expression):
            if self.is_left_paren(token) or self.is_function(token):
                stack.append(token)

            elif self.is_right_paren(token):
                while True:
                    if not stack:
                        raise UnbalancedClosingParenthesisError()
                    top = stack.pop()
                    if self.is_left_paren(top):
                        break
                    # Function markers are dropped
                    if not self.is_function(top):
                        output.append([top])

            elif self.is_operator(token):
                while stack and self.is_operator(stack[-1]) and self._pops_before(token, stack[-1]):
                    output.append([stack.pop()])
                stack.append(token)

            elif not output or not last_token or self.is_left_paren(last_token) or self.is_operator(last_token):
                output.append([token])
            else:
                output[-1].append(token)

            last_token = token

        while stack:
            top = stack.pop()
            if self.is_left_paren(top):
                raise UnbalancedOpeningParenthesisError()
            output.append([top])

        rpn = ["".join(entry) for entry in output]
        logger.debug("Parsed %r into %s", expression, rpn)
        return rpn

    def resolve_rpn(self, tokens: List[str]) -> Any:
        """
        Evaluate RPN tokens against this engine's tables.

        :param List[str] tokens: Tokens in RPN order

        :return: Result, a float unless raw literals are enabled and the behaviors say otherwise
        """
        return evaluate_rpn(tokens, self.operators, self.functions, self.raw_literals)

    def resolve(self, expression: Expression) -> Any:
        """
        Parse and evaluate an infix expression.

        :param Expression expression: Raw string, or already tokenized sequence

        :return: Evaluated result
        :raises ExpressionSyntaxError: On unbalanced parentheses
        """
        return self.resolve_rpn(self.parse(expression))
