"""Errors raised while evaluating an arithmetic expression."""
from typing import Optional


class EvaluationError(ValueError):
    """
    Base class for every failure of a single evaluation.

    Errors are local to one call and never fatal: callers catch this class
    uniformly and show a generic error state.
    """

    kind: str = "evaluation_error"


class InvalidCharacterError(EvaluationError):
    """The tokenizer met a character that is not part of the grammar."""

    kind = "invalid_character"

    def __init__(self, char: str, position: int) -> None:
        self.char = char
        self.position = position
        super().__init__(f"Invalid character {char!r} at position {position}")


class MalformedNumberError(EvaluationError):
    """A run of digits and dots does not parse to a number."""

    kind = "malformed_number"

    def __init__(self, literal: str, position: Optional[int] = None) -> None:
        self.literal = literal
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Malformed number {literal!r}{where}")


class MismatchedParenthesisError(EvaluationError):
    kind = "mismatched_parenthesis"


class StackUnderflowError(EvaluationError):
    kind = "stack_underflow"


class EmptyExpressionError(EvaluationError):
    kind = "empty_expression"


class DivisionByZeroError(EvaluationError):
    kind = "division_by_zero"


class MathDomainError(EvaluationError):
    """The power function has no finite real result for its operands."""

    kind = "math_domain"
