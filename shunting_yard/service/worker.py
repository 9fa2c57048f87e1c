"""Worker process evaluating one infix expression."""
from multiprocessing.connection import Connection
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shunting_yard.common.logger import logger
from shunting_yard.common.models import EngineConfig, EvaluationError, EvaluationResult


class EvaluationWorker(BaseModel):
    """
    Worker responsible for evaluating a single expression.

    Lifecycle:
        - Spawned by the server, one per input line
        - Builds its own engine from the shared configuration
        - Sends an EvaluationResult or EvaluationError payload through a Pipe
        - Terminates right after
    """

    # Immutable once spawned, and allows multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection used to send the payload back to the server")
    expression: str = Field(..., description="Single infix expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")
    config: EngineConfig = Field(default_factory=EngineConfig, description="Engine options")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def evaluate(self) -> Dict[str, Any]:
        """
        Evaluate the expression and build the payload to send.

        Any exception raised by parsing or by an operator behavior becomes an error payload.

        :return: Payload with ``line`` and either ``result`` or ``error`` keys
        :rtype: Dict[str, Any]
        """
        engine = self.config.build()
        try:
            rpn = engine.parse(self.expression)
            outcome = EvaluationResult(expression=self.expression, rpn=rpn, result=engine.resolve_rpn(rpn))
        except Exception as exc:
            logger.error(f"👷❌ Worker failed on line {self.line_number}: {exc!r} in {self.expression!r}")
            outcome = EvaluationError(expression=self.expression, error=str(exc), kind=type(exc).__name__)
        return {"line": self.line_number, **outcome.model_dump()}

    def run(self) -> None:
        """
        Evaluate the expression and send the payload through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")
        try:
            payload = self.evaluate()
            self.conn.send(payload)
        finally:
            # Always close the connection
            self.conn.close()

        if "result" in payload:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {payload['result']}")
