"""Four-function calculator driven by a single entry box."""

from __future__ import annotations

import logging
import math
import operator
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
}


def _to_number(text: str) -> float:
    """Number held by an entry box; anything that is not a number counts as 0."""
    text = text.strip()
    if not text or "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def format_number(value: float) -> str:
    """Display form of a result: up to six significant digits."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:.6g}"


@dataclass
class Calculator:
    """Holds the first operand and operator until '=' is pressed."""

    num1: float = 0.0
    num2: float = 0.0
    operation: str = ""
    result: float = 0.0

    def press_operator(self, op: str, text: str) -> str:
        """Store ``text`` as the first operand and ``op``; return the cleared entry."""
        if op not in OPERATORS:
            raise ValueError(f"unknown operator: {op!r}")
        self.num1 = _to_number(text)
        self.operation = op
        return ""

    def equals(self, text: str) -> str:
        """Apply the stored operator to ``text`` and return the result as shown."""
        self.num2 = _to_number(text)
        apply = OPERATORS.get(self.operation)
        if apply is not None:
            self.result = apply(self.num1, self.num2)
        logger.debug("%s %s %s = %s", self.num1, self.operation, self.num2, self.result)
        return format_number(self.result)

    def clear(self) -> str:
        """Reset both operands and return the cleared entry."""
        self.num1 = 0.0
        self.num2 = 0.0
        return ""