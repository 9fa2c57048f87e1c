"""Pydantic models for engine configuration and evaluation payloads."""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shunting_yard.core.functions import math_functions
from shunting_yard.core.parser import ShuntingYard


class EngineConfig(BaseModel):
    """Options used to build a ShuntingYard engine, shareable across processes."""

    model_config = ConfigDict(frozen=True)

    raw_literals: bool = Field(default=False, description="Keep literals as strings")
    math_functions: bool = Field(default=False, description="Register the single-argument math functions")

    def build(self) -> ShuntingYard:
        """
        Create a new engine with this configuration.

        :return: Fresh engine, owning its own tables
        :rtype: ShuntingYard
        """
        functions = math_functions() if self.math_functions else {}
        return ShuntingYard(functions=functions, raw_literals=self.raw_literals)


class EvaluationRequest(BaseModel):
    """A single expression to evaluate."""

    expression: str = Field(..., description="Infix expression as a string")

    @field_validator("expression")
    def expression_must_not_be_blank(cls, v: str) -> str:
        """Ensure that the expression is not blank."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v


class EvaluationResult(BaseModel):
    """Outcome of a successfully evaluated expression."""

    expression: str = Field(..., description="Original infix expression")
    rpn: List[str] = Field(default_factory=list, description="Expression in Reverse Polish Notation")
    result: Optional[Union[float, str]] = Field(..., description="Evaluated value")


class EvaluationError(BaseModel):
    """Outcome of an expression that could not be evaluated."""

    expression: str = Field(..., description="Original infix expression")
    error: str = Field(..., description="Error message")
    kind: str = Field(..., description="Exception class name, e.g. UnbalancedOpeningParenthesisError")
