"""
Evaluation module for calcvault.

``EvaluationAdapter`` loads a workbook configuration into an evaluation
engine and returns sanitized values. ``FormualizerEngine`` is the default
engine, evaluating formulas in-process via formualizer.
"""

from calcvault.engine.adapter import AdapterState, EvaluationAdapter, coerce_input
from calcvault.engine.base import Engine
from calcvault.engine.formualizer_engine import FormualizerEngine
from calcvault.engine.values import (
    ERROR_CODES,
    EvaluatedValue,
    is_error_code,
    sanitize_value,
    to_error_code,
)

__all__ = [
    "AdapterState",
    "EvaluationAdapter",
    "coerce_input",
    "Engine",
    "FormualizerEngine",
    "ERROR_CODES",
    "EvaluatedValue",
    "is_error_code",
    "sanitize_value",
    "to_error_code",
]
