"""Syntax errors raised while converting an expression to RPN."""


class ExpressionSyntaxError(SyntaxError):
    """Base class for malformed expressions."""


class UnbalancedClosingParenthesisError(ExpressionSyntaxError):
    """A closing parenthesis has no matching opening parenthesis on the operator stack."""

    def __init__(self, message: str = "Too many closing parenthesis"):
        super().__init__(message)


class UnbalancedOpeningParenthesisError(ExpressionSyntaxError):
    """Opening parentheses are still pending once the input is exhausted."""

    def __init__(self, message: str = "Too many opening parenthesis"):
        super().__init__(message)
