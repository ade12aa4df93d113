"""
Abstract evaluation engine interface.

The Engine protocol is the whole contract calcvault relies on: a sparse grid
of (row, col) writes, each either a formula or a literal, and point reads that
reflect a full recalculation. Dependency ordering, cycle handling and the
formula grammar are entirely the engine's business.

The concrete implementation is FormualizerEngine; tests may substitute any
object with the same three methods.
"""

from typing import Any, Protocol, Union

Literal = Union[int, float, str, bool, None]


class Engine(Protocol):
    """Protocol for spreadsheet evaluation backends.

    All coordinates are 0-indexed.
    """

    def set_formula(self, row: int, col: int, formula: str) -> None:
        """Install *formula* (with leading '=') at (row, col).

        Implementations raise an exception of their own choosing if the
        formula is rejected; its message should describe the problem.
        """
        ...

    def set_value(self, row: int, col: int, value: Literal) -> None:
        """Write a literal at (row, col). ``None`` clears the cell."""
        ...

    def get_value(self, row: int, col: int) -> Any:
        """Read the recalculated value at (row, col).

        Returns a primitive, ``None`` for an empty cell, or a structured error
        value exposing at least an error code and a message.
        """
        ...
