"""Token models and the operator table."""
from collections.abc import Callable as ABCCallable
from enum import Enum
import math
from typing import Annotated, Callable, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from keypad_calculator.common.errors import DivisionByZeroError, MathDomainError


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

OperatorSymbol = Literal["+", "-", "*", "/", "%", "^"]


class Associativity(str, Enum):
    """Grouping direction of repeated operators with equal precedence."""

    LEFT = "left"
    RIGHT = "right"


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise DivisionByZeroError(f"Division by zero: {a} / {b}")
    return a / b


def _remainder(a: float, b: float) -> float:
    # fmod keeps the sign of the dividend, unlike the % operator on floats
    if b == 0:
        raise DivisionByZeroError(f"Division by zero: {a} % {b}")
    try:
        return math.fmod(a, b)
    except ValueError as exc:
        raise MathDomainError(f"Remainder undefined: {a} % {b}") from exc


def _power(a: float, b: float) -> float:
    if a == 0 and b < 0:
        raise DivisionByZeroError(f"Division by zero: {a} ^ {b}")
    try:
        return math.pow(a, b)
    except OverflowError:
        # Saturate like float multiplication does; only odd integer powers keep a negative sign
        negative = a < 0 and b.is_integer() and b % 2 == 1
        return -math.inf if negative else math.inf
    except ValueError as exc:
        raise MathDomainError(f"No real result for {a} ^ {b}") from exc


# Mapping of operator symbols to (precedence, associativity, function)
OPERATOR_TABLE: Dict[str, tuple[int, Associativity, OperatorFn]] = {
    "+": (1, Associativity.LEFT, lambda a, b: a + b),
    "-": (1, Associativity.LEFT, lambda a, b: a - b),
    "*": (2, Associativity.LEFT, lambda a, b: a * b),
    "/": (2, Associativity.LEFT, _divide),
    "%": (2, Associativity.LEFT, _remainder),
    "^": (3, Associativity.RIGHT, _power),
}


class NumberToken(BaseModel):
    """A numeric literal, already signed when a unary minus was folded into it."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: float = Field(..., description="Numeric value of the literal")


class OperatorToken(BaseModel):
    """A binary operator carrying its precedence and associativity as data."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["operator"] = "operator"
    symbol: OperatorSymbol = Field(..., description="Operator character")
    precedence: int = Field(..., ge=1, description="Binding strength, higher binds tighter")
    associativity: Associativity = Field(..., description="Grouping of equal-precedence operators")

    def yields_to(self, other: "OperatorToken") -> bool:
        """
        Tell whether ``other``, sitting on the operator stack, must be output before this operator is pushed.

        :param OperatorToken other: Operator on top of the stack

        :return: True if ``other`` has to be popped first
        :rtype: bool
        """
        if self.associativity is Associativity.LEFT:
            return self.precedence <= other.precedence
        return self.precedence < other.precedence

    def apply(self, a: float, b: float) -> float:
        """
        Compute ``a <symbol> b``.

        :param float a: Left operand
        :param float b: Right operand

        :return: Result of the operation
        :rtype: float
        :raises DivisionByZeroError: If ``/``, ``%`` or ``^`` would divide by zero
        :raises MathDomainError: If the result is not a real number
        """
        return OPERATOR_TABLE[self.symbol][2](a, b)


class LeftParenToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["lparen"] = "lparen"


class RightParenToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rparen"] = "rparen"


Token = Annotated[
    Union[NumberToken, OperatorToken, LeftParenToken, RightParenToken],
    Field(discriminator="kind"),
]

# One immutable token per operator symbol, shared by every tokenizer call
OPERATORS: Dict[str, OperatorToken] = {
    symbol: OperatorToken(symbol=symbol, precedence=precedence, associativity=associativity)
    for symbol, (precedence, associativity, _) in OPERATOR_TABLE.items()
}

LEFT_PAREN = LeftParenToken()
RIGHT_PAREN = RightParenToken()
