"""
Dictionary-backed engine for adapter tests.

Records every write so tests can assert what the adapter sent to the engine.
Formulas are never evaluated: a formula cell reads back whatever the test put
in ``computed`` for that position (a primitive or a structured error), or
``None``. This is a contract-level stand-in, not a spreadsheet simulator.
"""

from typing import Any, Dict, Optional, Tuple

Position = Tuple[int, int]


class FakeEngine:
    """Engine stand-in.

    Args:
        computed: Values returned for formula cells, keyed by (row, col)
        reject_token: Formulas containing this substring are rejected with
            a SyntaxError, like a parser would
    """

    def __init__(
        self,
        computed: Optional[Dict[Position, Any]] = None,
        reject_token: Optional[str] = None,
    ) -> None:
        self.computed = dict(computed or {})
        self.reject_token = reject_token
        self.formulas: Dict[Position, str] = {}
        self.values: Dict[Position, Any] = {}
        self.writes = 0

    def set_formula(self, row: int, col: int, formula: str) -> None:
        if self.reject_token and self.reject_token in formula:
            raise SyntaxError(f"Unexpected token {self.reject_token!r} at position 1")
        self.formulas[(row, col)] = formula
        self.writes += 1

    def set_value(self, row: int, col: int, value: Any) -> None:
        self.formulas.pop((row, col), None)
        self.values[(row, col)] = value
        self.writes += 1

    def get_value(self, row: int, col: int) -> Any:
        if (row, col) in self.formulas:
            return self.computed.get((row, col))
        return self.values.get((row, col))


class EngineError:
    """Opaque engine error object exposing a kind and a message."""

    def __init__(self, kind: str, message: str) -> None:
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"<EngineError {self.kind} at 0x{id(self):x}>"
