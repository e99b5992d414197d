"""Worker process for evaluating arithmetic expressions."""
from multiprocessing.connection import Connection

from pydantic import BaseModel, ConfigDict, Field, field_validator

from keypad_calculator.common.logger import logger
from keypad_calculator.common.operations import OperationResult


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch evaluator
        - Receives one expression only
        - Sends an OperationResult payload (value or error) through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only)
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the evaluator")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def run(self) -> None:
        """
        Evaluate the arithmetic expression and send the result record through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        try:
            outcome = OperationResult.from_expression(self.expression, line=self.line_number)

            if outcome.ok:
                logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.display}")
            else:
                logger.error(
                    f"👷❌ Worker failed on line {self.line_number}: {outcome.error}\n"
                    f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
                )

            self.conn.send(outcome.model_dump())

        finally:
            # Always close the connection
            self.conn.close()
