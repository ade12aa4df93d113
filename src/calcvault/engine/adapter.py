"""
Evaluation adapter.

Loads a WorkbookConfig into an evaluation engine, applies client input
patches and reads back sanitized values. One adapter serves one request: it
is constructed from the persisted config, used and dropped, so no evaluator
state is ever shared between requests or users.

Only cells flagged as inputs can be written after loading. Formula cells are
never overwritten by a client patch, whatever it contains.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from calcvault.engine.base import Engine, Literal
from calcvault.engine.values import EvaluatedValue, is_error_code, sanitize_value
from calcvault.exceptions import EngineInitError
from calcvault.spreadsheet.address import encode
from calcvault.spreadsheet.model import CellDefinition, WorkbookConfig, export_public_view

logger = logging.getLogger(__name__)


class AdapterState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    EVALUATED = "evaluated"


class _Dropped(Exception):
    """Internal signal: an input value cannot be written."""


def _default_engine_factory() -> Engine:
    from calcvault.engine.formualizer_engine import FormualizerEngine

    return FormualizerEngine()


class EvaluationAdapter:
    """Per-request evaluator over a workbook configuration.

    Usage::

        adapter = EvaluationAdapter.from_config(config)
        adapter.apply_inputs({"B1": 20})
        results = adapter.read_all()
        grid = adapter.read_grid()

    Args:
        engine_factory: Zero-argument callable returning a fresh Engine.
            Defaults to FormualizerEngine.
    """

    def __init__(self, engine_factory: Optional[Callable[[], Engine]] = None) -> None:
        self._engine_factory = engine_factory or _default_engine_factory
        self._engine: Optional[Engine] = None
        self._config: Optional[WorkbookConfig] = None
        self._cells: Dict[str, CellDefinition] = {}
        self.state = AdapterState.UNINITIALIZED

    @classmethod
    def from_config(
        cls,
        config: WorkbookConfig,
        engine_factory: Optional[Callable[[], Engine]] = None,
    ) -> "EvaluationAdapter":
        adapter = cls(engine_factory)
        adapter.load(config)
        return adapter

    @property
    def config(self) -> WorkbookConfig:
        self._require_loaded()
        assert self._config is not None
        return self._config

    def load(self, config: WorkbookConfig) -> None:
        """Write every cell of *config* into a fresh engine.

        Formula cells receive their formula, literal cells their value. Cells
        absent from the config are left unset.

        Raises:
            RuntimeError: If the adapter was already loaded
            EngineInitError: If the engine rejects a cell; carries the engine's
                message unmodified
        """
        if self.state is not AdapterState.UNINITIALIZED:
            raise RuntimeError("EvaluationAdapter.load() may only be called once")

        engine = self._engine_factory()
        for cell in config.cells:
            row, col = cell.position
            try:
                if cell.formula is not None:
                    engine.set_formula(row, col, cell.formula)
                else:
                    engine.set_value(row, col, cell.value)
            except Exception as exc:  # engine-specific parser/type errors
                raise EngineInitError(cell.address, str(exc)) from exc

        self._engine = engine
        self._config = config
        self._cells = config.cell_map()
        self.state = AdapterState.LOADED

    def apply_inputs(self, patch: Mapping[Any, Any]) -> List[str]:
        """Write client-supplied values into input cells.

        Entries are skipped without error when the address is unknown, the
        cell is not an input, or the value cannot be coerced to a literal.

        Args:
            patch: Mapping of A1 address to new value

        Returns:
            Addresses that were actually written, in patch order
        """
        self._require_loaded()
        assert self._engine is not None

        applied: List[str] = []
        for address, raw in patch.items():
            cell = self._cells.get(address) if isinstance(address, str) else None
            if cell is None or not cell.is_input:
                logger.debug("Ignoring input for non-input cell %r", address)
                continue
            try:
                value = coerce_input(raw)
            except _Dropped:
                logger.debug("Ignoring malformed input for %s", address)
                continue
            row, col = cell.position
            self._engine.set_value(row, col, value)
            applied.append(address)

        self.state = AdapterState.EVALUATED
        return applied

    def read_all(self) -> Dict[str, EvaluatedValue]:
        """Sanitized value of every configured cell.

        Always covers the full cell list, never just the cells touched by the
        last patch.
        """
        self._require_loaded()
        assert self._engine is not None and self._config is not None

        values: Dict[str, EvaluatedValue] = {}
        for cell in self._config.cells:
            row, col = cell.position
            values[cell.address] = sanitize_value(self._engine.get_value(row, col))

        self.state = AdapterState.EVALUATED
        return values

    def read_grid(self) -> List[List[EvaluatedValue]]:
        """Dense rows x cols matrix of sanitized values, for display.

        Grid coordinates without a cell definition read as ``""``.
        """
        self._require_loaded()
        assert self._config is not None

        values = self.read_all()
        matrix: List[List[EvaluatedValue]] = []
        for r in range(self._config.rows):
            row: List[EvaluatedValue] = []
            for c in range(self._config.cols):
                address = encode(r, c)
                value = values.get(address, "")
                if is_error_code(value) and address in self._cells and self._cells[address].has_formula:
                    logger.warning("Cell error at %s: %s", address, value)
                row.append(value)
            matrix.append(row)
        return matrix

    def export_public_view(self) -> Dict[str, Any]:
        return export_public_view(self.config)

    def _require_loaded(self) -> None:
        if self.state is AdapterState.UNINITIALIZED:
            raise RuntimeError("EvaluationAdapter has not been loaded with a workbook")


def coerce_input(raw: Any) -> Literal:
    """Coerce a client input value to an engine literal.

    * ``None`` clears the cell
    * bool and finite numbers pass through
    * numeric strings become floats, other strings stay text
    * strings starting with '=' are refused (no formula injection)

    Raises:
        _Dropped: If the value cannot be written
    """
    if raw is None or isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            raise _Dropped()
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("="):
            raise _Dropped()
        if text:
            try:
                number = float(text)
            except ValueError:
                return raw
            if math.isfinite(number):
                return number
            raise _Dropped()
        return raw
    raise _Dropped()
