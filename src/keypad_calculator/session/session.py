"""Keypad session: the expression buffer behind a calculator screen."""
from typing import Tuple

from pydantic import BaseModel, Field

from keypad_calculator.common.errors import EvaluationError
from keypad_calculator.common.logger import logger
from keypad_calculator.common.operations import ERROR_DISPLAY, format_result
from keypad_calculator.common.parser import evaluate

CLEAR_KEY = "C"
BACKSPACE_KEY = "⌫"
EQUALS_KEY = "="

# Button grid, top row first
KEYPAD: Tuple[Tuple[str, ...], ...] = (
    ("C", "(", ")", "⌫"),
    ("7", "8", "9", "÷"),
    ("4", "5", "6", "×"),
    ("1", "2", "3", "-"),
    ("%", "0", ".", "+"),
    ("^", "="),
)

# Keys whose label differs from the character they insert
KEY_ALIASES = {"×": "*", "÷": "/"}

KEYS = frozenset(key for row in KEYPAD for key in row)


class CalculatorSession(BaseModel):
    """
    State of one calculator screen.

    The session owns the mutable expression and result strings; evaluation
    itself is delegated to the stateless :func:`evaluate`.
    """

    expression: str = Field(default="", description="Expression typed so far")
    result: str = Field(default="", description="Last displayed result, empty before the first evaluation")

    @property
    def display(self) -> str:
        return self.expression or "0"

    def press(self, key: str) -> None:
        """
        Handle one keypad button.

        :param str key: Button label from :data:`KEYPAD`

        :return: None
        :raises ValueError: If the key is not on the keypad
        """
        if key not in KEYS:
            raise ValueError(f"Unknown key: {key!r}")

        if key == CLEAR_KEY:
            self.clear()
        elif key == BACKSPACE_KEY:
            self.backspace()
        elif key == EQUALS_KEY:
            self.evaluate()
        else:
            self.append(KEY_ALIASES.get(key, key))

    def press_all(self, keys: str) -> None:
        """Press every character of ``keys`` in order."""
        for key in keys:
            self.press(key)

    def append(self, token: str) -> None:
        """
        Append raw text to the expression.

        Typing a digit while a result is shown starts a new expression.
        """
        if self.result and token[:1].isdigit():
            self.expression = ""
            self.result = ""
        self.expression += token

    def backspace(self) -> None:
        self.expression = self.expression[:-1]

    def clear(self) -> None:
        self.expression = ""
        self.result = ""

    def evaluate(self) -> str:
        """
        Evaluate the current expression and store the displayed outcome.

        Any evaluation failure shows the generic error marker; the error kind is only logged.

        :return: New result string
        :rtype: str
        """
        try:
            self.result = format_result(evaluate(self.expression))
        except EvaluationError as exc:
            logger.debug(f"🧮❌ {self.expression!r}: {exc}")
            self.result = ERROR_DISPLAY
        return self.result
