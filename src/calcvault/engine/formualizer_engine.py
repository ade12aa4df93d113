"""
Evaluation engine backed by formualizer.

Holds one in-memory formualizer Workbook with a single sheet and exposes the
three-method Engine contract on 0-indexed coordinates. formualizer tracks
dependencies and recalculates lazily on read, so every get_value() sees the
effect of all preceding writes.

The workbook itself accepts any formula text and only fails when the cell is
read, so set_formula() parses first: a syntax error surfaces as
``formualizer.ParserError`` at write time.
"""

from __future__ import annotations

from typing import Any

import formualizer as fz

from calcvault.engine.base import Literal


class FormualizerEngine:
    """In-process Engine implementation using formualizer.

    Usage::

        engine = FormualizerEngine()
        engine.set_value(0, 0, 5)
        engine.set_formula(0, 1, "=A1*2")
        engine.get_value(0, 1)  # 10.0
    """

    SHEET_NAME = "Calculator"

    def __init__(self) -> None:
        self.wb = fz.Workbook()
        self.wb.add_sheet(self.SHEET_NAME)
        self._sheet = self.wb.sheet(self.SHEET_NAME)

    def set_formula(self, row: int, col: int, formula: str) -> None:
        formula = formula if formula.startswith("=") else f"={formula}"
        fz.parse(formula)
        # formualizer is 1-indexed
        self.wb.set_formula(self.SHEET_NAME, row + 1, col + 1, formula)

    def set_value(self, row: int, col: int, value: Literal) -> None:
        self._sheet.set_value(row + 1, col + 1, _to_literal(value))

    def get_value(self, row: int, col: int) -> Any:
        return self.wb.evaluate_cell(self.SHEET_NAME, row + 1, col + 1)


def _to_literal(value: Literal) -> fz.LiteralValue:
    # Non-finite numbers never get here: CellDefinition and coerce_input reject them
    if value is None:
        return fz.LiteralValue.empty()
    if isinstance(value, bool):
        return fz.LiteralValue.boolean(value)
    if isinstance(value, (int, float)):
        return fz.LiteralValue.number(float(value))
    return fz.LiteralValue.text(value)
