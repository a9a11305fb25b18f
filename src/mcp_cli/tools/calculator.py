"""
Arithmetic calculator.

Expressions are parsed with ``ast`` and evaluated by walking a whitelist of
node types; nothing is passed to ``eval``.
"""

import ast
import math
import operator
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Union

from pydantic import BaseModel

Number = Union[int, float]

MAX_EXPONENT = 1000
MAX_RESULT_DIGITS = 308


class CalculationError(ValueError):
    """Raised for invalid expressions or non-finite results."""


class MathOperator(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    POWER = "power"
    SQRT = "sqrt"


class MathOperation(BaseModel):
    operator: MathOperator
    operands: List[float]


class CalculationResult(BaseModel):
    expression: str
    processed_expression: str
    result: float
    timestamp: datetime


_BINARY_OPERATORS: Dict[type, Callable[[Number, Number], Number]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: Dict[type, Callable[[Number], Number]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

MATH_FUNCTIONS: Dict[str, Callable[[float], Number]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "sqrt": math.sqrt,
    "log": math.log,
    "exp": math.exp,
    "abs": abs,
    "round": round,
    "floor": math.floor,
    "ceil": math.ceil,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
}

MATH_CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

_BASIC_EXPRESSION = re.compile(r"^[0-9+\-*/().\s]+$")


class _Evaluator:
    def __init__(self, functions: Dict[str, Callable], constants: Dict[str, float]):
        self.functions = functions
        self.constants = constants

    def evaluate(self, expression: str) -> Number:
        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as e:
            raise CalculationError(f"Invalid expression: {e.msg}") from e
        return self._visit(tree.body)

    def _visit(self, node: ast.AST) -> Number:
        if isinstance(node, ast.Constant) and type(node.value) in (int, float):
            return node.value

        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
            left = self._visit(node.left)
            right = self._visit(node.right)
            if isinstance(node.op, ast.Pow):
                _check_power(left, right)
            return _BINARY_OPERATORS[type(node.op)](left, right)

        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
            return _UNARY_OPERATORS[type(node.op)](self._visit(node.operand))

        if isinstance(node, ast.Name) and node.id in self.constants:
            return self.constants[node.id]

        if (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id in self.functions
            and len(node.args) == 1
            and not node.keywords
        ):
            return self.functions[node.func.id](self._visit(node.args[0]))

        raise CalculationError(f"Unsupported syntax: {ast.dump(node)[:40]}")


def _check_power(base: Number, exponent: Number) -> None:
    """Reject powers whose result would exceed the float range."""
    if abs(exponent) > MAX_EXPONENT:
        raise CalculationError("Exponent too large")
    if abs(base) > 1 and exponent > 0 and exponent * math.log10(abs(base)) > MAX_RESULT_DIGITS:
        raise CalculationError("Result too large")


def _finite(value: Number) -> Number:
    if isinstance(value, complex) or not math.isfinite(value):
        raise CalculationError("Invalid calculation result")
    return value


class CalculatorTool:
    """Basic and function-aware arithmetic."""

    def __init__(self):
        self._basic = _Evaluator({}, {})
        self._advanced = _Evaluator(MATH_FUNCTIONS, MATH_CONSTANTS)

    def calculate(self, expression: str) -> Number:
        """Evaluate digits, + - * / and parentheses only."""
        try:
            if not expression.strip():
                raise CalculationError("Expression cannot be empty")
            if not _BASIC_EXPRESSION.match(expression):
                raise CalculationError("Invalid characters in expression")
            return _finite(self._basic.evaluate(expression))
        except (CalculationError, ArithmeticError, ValueError) as e:
            raise CalculationError(f"Calculation error: {_describe(e)}") from e

    def calculate_advanced(self, expression: str) -> CalculationResult:
        """Evaluate with math functions and the constants pi and e."""
        try:
            if not expression.strip():
                raise CalculationError("Expression cannot be empty")
            result = _finite(self._advanced.evaluate(expression))
        except (CalculationError, ArithmeticError, ValueError, TypeError) as e:
            raise CalculationError(f"Advanced calculation error: {_describe(e)}") from e

        return CalculationResult(
            expression=expression,
            processed_expression=_annotate(expression),
            result=result,
            timestamp=datetime.now(timezone.utc),
        )

    def perform_operation(self, operation: MathOperation) -> float:
        operands = operation.operands
        if not operands:
            raise CalculationError("No operands provided")

        op = operation.operator
        if op == MathOperator.ADD:
            return sum(operands)
        if op == MathOperator.SUBTRACT:
            if len(operands) == 1:
                return -operands[0]
            return operands[0] - sum(operands[1:])
        if op == MathOperator.MULTIPLY:
            return math.prod(operands)
        if op == MathOperator.DIVIDE:
            if len(operands) != 2:
                raise CalculationError("Division requires exactly 2 operands")
            if operands[1] == 0:
                raise CalculationError("Division by zero")
            return operands[0] / operands[1]
        if op == MathOperator.POWER:
            if len(operands) != 2:
                raise CalculationError("Power operation requires exactly 2 operands")
            return math.pow(operands[0], operands[1])
        if len(operands) != 1:
            raise CalculationError("Square root requires exactly 1 operand")
        if operands[0] < 0:
            raise CalculationError("Cannot take square root of negative number")
        return math.sqrt(operands[0])

    @staticmethod
    def get_supported_functions() -> List[str]:
        return list(MATH_FUNCTIONS)


def _describe(error: Exception) -> str:
    if isinstance(error, ZeroDivisionError):
        return "Division by zero"
    return str(error) or type(error).__name__


def _annotate(expression: str) -> str:
    """Render the expression with functions and constants qualified by ``math.``."""
    names = "|".join(list(MATH_FUNCTIONS) + list(MATH_CONSTANTS))
    return re.sub(rf"\b({names})\b", r"math.\1", expression)
