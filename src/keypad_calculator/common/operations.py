"""Pydantic models for arithmetic operation requests and results."""
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, model_validator

from keypad_calculator.common.errors import EvaluationError
from keypad_calculator.common.parser import evaluate

ERROR_DISPLAY = "Error"


def format_result(value: float) -> str:
    """
    Format a computed value for display.

    Integer-valued results drop their fractional part ("5" rather than "5.0");
    any other value uses its shortest decimal representation.

    :param float value: Computed value

    :return: Display string
    :rtype: str
    """
    if math.isfinite(value) and value.is_integer():
        # int() also turns -0.0 into 0
        return str(int(value))
    return repr(value)


class OperationRequest(BaseModel):
    """Represents a single arithmetic operation request."""

    model_config = ConfigDict(frozen=True)

    expression: StrictStr = Field(..., description="Arithmetic expression as a string")


class OperationResult(BaseModel):
    """Represents the outcome of an evaluated arithmetic operation: a value or an error."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(default=1, ge=1, description="Line number of the expression in its input")
    expression: StrictStr = Field(..., description="Original arithmetic expression")
    result: Optional[float] = Field(default=None, description="Evaluated numeric result of the expression")
    error: Optional[str] = Field(default=None, description="Error message when evaluation failed")
    error_kind: Optional[str] = Field(default=None, description="Stable identifier of the error class")

    @model_validator(mode="after")
    def exactly_one_outcome(self) -> "OperationResult":
        """Ensure that the record holds either a result or an error, never both or neither."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of 'result' and 'error' must be set")
        return self

    @classmethod
    def from_expression(cls, expression: str, line: int = 1) -> "OperationResult":
        """
        Evaluate ``expression`` and capture the value or the evaluation error.

        :param str expression: Arithmetic expression
        :param int line: Line number of the expression in its input

        :return: Result record
        :rtype: OperationResult
        """
        try:
            return cls(line=line, expression=expression, result=evaluate(expression))
        except EvaluationError as exc:
            return cls(line=line, expression=expression, error=str(exc), error_kind=exc.kind)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display(self) -> str:
        """Formatted value, or the generic error marker."""
        if self.result is None:
            return ERROR_DISPLAY
        return format_result(self.result)

    def to_line(self) -> str:
        """Render the record as one line of a results file."""
        if self.ok:
            return f"{self.expression} = {self.display}"
        return f"{self.expression} -> ERROR: {self.error}"
