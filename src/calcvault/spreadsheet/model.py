"""
Workbook configuration model.

This module defines the persisted description of a calculator:
- CellDefinition: one populated cell (formula or literal, input flag, label)
- WorkbookConfig: name, description, display dimensions and the sparse cell list

and the pure operations on it:
- build_workbook: validated construction
- update_cell_input_flag: administrative promote/demote of a single cell
- export_public_view: the formula-free view handed to untrusted clients

Configurations are immutable. Every change produces a new WorkbookConfig.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from calcvault.exceptions import CellNotFound, InvalidWorkbook
from calcvault.spreadsheet.address import CellAddress, decode

CellValue = Union[int, float, str, bool]


@dataclass(frozen=True)
class CellDefinition:
    """One populated cell of a workbook.

    Attributes:
        address: Canonical A1 address (e.g. "B5")
        formula: Formula text starting with '=' when the cell is derived
        value: Literal content when the cell has no formula
        is_input: True if clients may set this cell's value
        label: Display-only description
    """
    address: str
    formula: Optional[str] = None
    value: Optional[CellValue] = None
    is_input: bool = False
    label: Optional[str] = None

    def __post_init__(self) -> None:
        decode(self.address)

        if self.formula is not None:
            if not isinstance(self.formula, str) or not self.formula.strip().lstrip("="):
                raise InvalidWorkbook(f"Cell {self.address} has an empty formula")
            formula = self.formula.strip()
            if not formula.startswith("="):
                object.__setattr__(self, "formula", f"={formula}")
            else:
                object.__setattr__(self, "formula", formula)

        has_formula = self.formula is not None
        has_value = self.value is not None

        if has_formula and has_value:
            raise InvalidWorkbook(
                f"Cell {self.address} defines both a formula and a literal value"
            )
        if not has_formula and not has_value:
            raise InvalidWorkbook(f"Cell {self.address} defines neither a formula nor a value")
        if has_formula and self.is_input:
            raise InvalidWorkbook(f"Formula cell {self.address} cannot be an input")
        if has_value and not isinstance(self.value, (int, float, str, bool)):
            raise InvalidWorkbook(
                f"Cell {self.address} has unsupported value type {type(self.value).__name__}"
            )
        if isinstance(self.value, float) and not math.isfinite(self.value):
            raise InvalidWorkbook(f"Cell {self.address} has a non-finite value")

    @property
    def position(self) -> CellAddress:
        """The cell's 0-indexed grid position."""
        return decode(self.address)

    @property
    def has_formula(self) -> bool:
        return self.formula is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (persistence format)."""
        data: Dict[str, Any] = {"address": self.address, "isInput": self.is_input}
        if self.formula is not None:
            data["formula"] = self.formula
        if self.value is not None:
            data["value"] = self.value
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CellDefinition":
        """Create from dictionary representation."""
        is_input = data.get("isInput", data.get("is_input", False))
        return cls(
            address=data["address"],
            formula=data.get("formula"),
            value=data.get("value"),
            is_input=bool(is_input),
            label=data.get("label"),
        )


@dataclass(frozen=True)
class WorkbookConfig:
    """Formula-bearing description of a calculator.

    ``rows`` and ``cols`` are the dense display grid; ``cells`` is sparse and
    only lists populated cells. Cell order is preserved but carries no meaning.
    """
    name: str
    rows: int
    cols: int
    cells: Tuple[CellDefinition, ...] = ()
    description: str = ""
    _index: Dict[str, CellDefinition] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "cells", tuple(self.cells))

        if not self.name or not isinstance(self.name, str):
            raise InvalidWorkbook("Workbook name must be a non-empty string")
        for dim_name, dim in (("rows", self.rows), ("cols", self.cols)):
            if isinstance(dim, bool) or not isinstance(dim, int) or dim < 0:
                raise InvalidWorkbook(f"Workbook {dim_name} must be a non-negative integer")

        index: Dict[str, CellDefinition] = {}
        for cell in self.cells:
            if not isinstance(cell, CellDefinition):
                raise InvalidWorkbook(f"Expected CellDefinition, got {type(cell).__name__}")
            if cell.address in index:
                raise InvalidWorkbook(f"Duplicate cell address: {cell.address}")
            pos = cell.position
            if pos.row >= self.rows or pos.col >= self.cols:
                raise InvalidWorkbook(
                    f"Cell {cell.address} lies outside the {self.rows}x{self.cols} grid"
                )
            index[cell.address] = cell
        object.__setattr__(self, "_index", index)

    def cell_map(self) -> Dict[str, CellDefinition]:
        """Address -> CellDefinition mapping (a copy, safe to mutate)."""
        return dict(self._index)

    def get(self, address: str) -> Optional[CellDefinition]:
        return self._index.get(address)

    def __contains__(self, address: object) -> bool:
        return address in self._index

    def input_addresses(self) -> List[str]:
        return [cell.address for cell in self.cells if cell.is_input]

    def formula_cells(self) -> List[CellDefinition]:
        return [cell for cell in self.cells if cell.has_formula]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (persistence format).

        This form includes formulas. Use export_public_view() for anything
        that leaves the server.
        """
        return {
            "name": self.name,
            "description": self.description,
            "rows": self.rows,
            "cols": self.cols,
            "cells": [cell.to_dict() for cell in self.cells],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkbookConfig":
        """Create from dictionary representation."""
        return build_workbook(
            name=data["name"],
            rows=data["rows"],
            cols=data["cols"],
            cells=[CellDefinition.from_dict(c) for c in data.get("cells", [])],
            description=data.get("description") or "",
        )


def build_workbook(
    name: str,
    rows: int,
    cols: int,
    cells: Iterable[CellDefinition],
    description: str = "",
) -> WorkbookConfig:
    """Build a validated WorkbookConfig.

    Args:
        name: Workbook name (non-empty)
        rows: Display grid height
        cols: Display grid width
        cells: Populated cell definitions, unique by address
        description: Free-text description

    Returns:
        A new WorkbookConfig

    Raises:
        InvalidWorkbook: If any schema invariant is violated
        InvalidAddress: If a cell address is malformed
    """
    return WorkbookConfig(
        name=name,
        rows=rows,
        cols=cols,
        cells=tuple(cells),
        description=description,
    )


def update_cell_input_flag(
    config: WorkbookConfig, address: str, is_input: bool
) -> WorkbookConfig:
    """Return a copy of *config* with one cell's input flag changed.

    The original config is left untouched.

    Raises:
        CellNotFound: If address is not defined in the config
        InvalidWorkbook: If the change would make a formula cell an input
    """
    if address not in config:
        raise CellNotFound(address)

    cells = [
        replace(cell, is_input=bool(is_input)) if cell.address == address else cell
        for cell in config.cells
    ]
    return replace(config, cells=tuple(cells))


def export_public_view(config: WorkbookConfig) -> Dict[str, Any]:
    """Formula-free view of a workbook, safe to send to clients.

    Only address, input flag, label and literal value of each cell are
    copied. Formula cells carry ``value: None``.
    """
    return {
        "name": config.name,
        "description": config.description,
        "rows": config.rows,
        "cols": config.cols,
        "cells": [
            {
                "address": cell.address,
                "isInput": cell.is_input,
                "label": cell.label,
                "value": cell.value,
            }
            for cell in config.cells
        ],
    }
