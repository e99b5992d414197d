"""Parse and evaluate arithmetic expressions safely."""
from typing import List

from keypad_calculator.common.errors import (
    EmptyExpressionError,
    InvalidCharacterError,
    MalformedNumberError,
    MismatchedParenthesisError,
    StackUnderflowError,
)
from keypad_calculator.common.logger import logger
from keypad_calculator.common.tokens import (
    LEFT_PAREN,
    OPERATORS,
    RIGHT_PAREN,
    LeftParenToken,
    NumberToken,
    OperatorToken,
    RightParenToken,
    Token,
)

NUMBER_CHARS = frozenset("0123456789.")


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - No state kept between calls: every stack lives inside one call

    Algorithm:
        1. Tokenize character by character, folding unary minus into literals
        2. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        3. Evaluate RPN using a stack

    The Shunting-yard algorithm converts an infix expression into Reverse Polish Notation (RPN), allowing safe, stack-based evaluation without parentheses.
    It handles operator precedence by temporarily storing operators on a stack and outputting them in the correct order.

    Examples:
        - Infix expression (standard notation): 3 + 4 * 2 ^ 2
        - Corresponding Reverse Polish Notation (RPN): 3 4 2 2 ^ * +

    """

    @staticmethod
    def _read_number(expr: str, start: int) -> int:
        """
        Return the index just past the run of digits and dots starting at ``start``.

        :param str expr: Arithmetic expression
        :param int start: Index of the first character of the run

        :return: End index (exclusive) of the run
        :rtype: int
        """
        end = start
        while end < len(expr) and expr[end] in NUMBER_CHARS:
            end += 1
        return end

    @staticmethod
    def _parse_number(literal: str, position: int) -> NumberToken:
        """
        Convert a lexical number run into a Number token.

        :param str literal: Digits and dots, optionally preceded by ``-``
        :param int position: Index of the literal in the expression

        :return: Number token
        :rtype: NumberToken
        :raises MalformedNumberError: If the literal is not a finite number
        """
        try:
            value = float(literal)
        except ValueError as exc:
            raise MalformedNumberError(literal, position) from exc
        # Overlong digit runs overflow to inf
        if value in (float("inf"), float("-inf")):
            raise MalformedNumberError(literal, position)
        return NumberToken(value=value)

    @staticmethod
    def _starts_operand(tokens: List[Token]) -> bool:
        """A ``-`` can only be a sign at the start or after an operator or ``(``."""
        return not tokens or isinstance(tokens[-1], (OperatorToken, LeftParenToken))

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split an arithmetic expression into tokens.

        Whitespace is optional (e.g. "3+4*2" and "3 + 4 * 2" are equivalent).
        A ``-`` directly followed by a digit or a dot becomes the sign of a
        Number token when it opens the expression or follows an operator or
        ``(``; otherwise it is the subtraction operator.

        :param str expr: Arithmetic expression as a string

        :return: List of tokens
        :rtype: List[Token]
        :raises InvalidCharacterError: If a character is not part of the grammar
        :raises MalformedNumberError: If a number literal does not parse (e.g. "1.2.3")
        """
        tokens: List[Token] = []
        i = 0
        while i < len(expr):
            char = expr[i]

            if char.isspace():
                i += 1

            elif char in NUMBER_CHARS:
                end = ExpressionParser._read_number(expr, i)
                tokens.append(ExpressionParser._parse_number(expr[i:end], i))
                i = end

            elif (
                char == "-"
                and ExpressionParser._starts_operand(tokens)
                and i + 1 < len(expr)
                and expr[i + 1] in NUMBER_CHARS
            ):
                # Unary minus: fold the sign into the following literal
                end = ExpressionParser._read_number(expr, i + 1)
                tokens.append(ExpressionParser._parse_number(expr[i:end], i))
                i = end

            elif char in OPERATORS:
                tokens.append(OPERATORS[char])
                i += 1

            elif char == "(":
                tokens.append(LEFT_PAREN)
                i += 1

            elif char == ")":
                tokens.append(RIGHT_PAREN)
                i += 1

            else:
                raise InvalidCharacterError(char, i)

        return tokens

    @staticmethod
    def to_rpn(tokens: List[Token]) -> List[Token]:
        """
        Convert a list of tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        :param List[Token] tokens: List of arithmetic tokens

        :return: Number and operator tokens in RPN order, parentheses removed
        :rtype: List[Token]
        :raises MismatchedParenthesisError: If parentheses are unbalanced
        """
        output: List[Token] = []
        stack: List[Token] = []

        for token in tokens:
            if isinstance(token, NumberToken):
                # Numbers are added directly to the output
                output.append(token)

            elif isinstance(token, OperatorToken):
                # Pop operators that bind at least as tightly (strictly tighter for right-associative ones)
                while stack and isinstance(stack[-1], OperatorToken) and token.yields_to(stack[-1]):
                    output.append(stack.pop())
                stack.append(token)

            elif isinstance(token, LeftParenToken):
                stack.append(token)

            elif isinstance(token, RightParenToken):
                while stack and not isinstance(stack[-1], LeftParenToken):
                    output.append(stack.pop())
                if not stack:
                    raise MismatchedParenthesisError("Unmatched closing parenthesis")
                # Discard the matching "("
                stack.pop()

        # Append remaining operators in reverse order (stack top first)
        while stack:
            token = stack.pop()
            if isinstance(token, LeftParenToken):
                raise MismatchedParenthesisError("Unmatched opening parenthesis")
            output.append(token)

        return output

    @staticmethod
    def evaluate_rpn(rpn: List[Token]) -> float:
        """
        Evaluate a sequence of tokens in Reverse Polish Notation.

        :param List[Token] rpn: Number and operator tokens in RPN order

        :return: Computed result as float
        :rtype: float
        :raises StackUnderflowError: If an operator lacks operands
        :raises EmptyExpressionError: If the expression does not reduce to exactly one value
        :raises DivisionByZeroError: If ``/``, ``%`` or ``^`` divides by zero
        :raises MathDomainError: If a power has no real result
        """
        stack: List[float] = []
        for token in rpn:
            if isinstance(token, NumberToken):
                stack.append(token.value)
            elif isinstance(token, OperatorToken):
                # Operator requires two operands
                if len(stack) < 2:
                    raise StackUnderflowError(f"Not enough operands for {token.symbol!r}")
                # First pop is the right operand
                b: float = stack.pop()
                a: float = stack.pop()
                stack.append(token.apply(a, b))
            else:
                raise MismatchedParenthesisError(f"Parenthesis left in RPN: {_describe(token)}")

        if len(stack) != 1:
            raise EmptyExpressionError(f"Expression reduced to {len(stack)} values instead of 1")

        return stack[0]

    @staticmethod
    def evaluate(expr: str) -> float:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises EvaluationError: If expression is invalid or malformed
        """
        tokens: List[Token] = ExpressionParser.tokenize(expr)
        rpn: List[Token] = ExpressionParser.to_rpn(tokens)
        if not any(isinstance(token, NumberToken) for token in rpn):
            # Blank or operators-only input has no value to compute
            raise EmptyExpressionError(f"No number in expression: {expr!r}")
        logger.debug(f"🧮 {expr!r} -> RPN {' '.join(_describe(t) for t in rpn)}")

        result: float = ExpressionParser.evaluate_rpn(rpn)
        logger.debug(f"🧮 {expr!r} = {result}")
        return result


def _describe(token: Token) -> str:
    if isinstance(token, NumberToken):
        return repr(token.value)
    if isinstance(token, OperatorToken):
        return token.symbol
    return "(" if isinstance(token, LeftParenToken) else ")"


def evaluate(expression: str) -> float:
    """
    Evaluate ``expression`` and return its value.

    Pure and re-entrant; raises an :class:`EvaluationError` subclass on failure.
    """
    return ExpressionParser.evaluate(expression)
