"""
Excel ingestion.

Turns the bytes of an uploaded ``.xlsx`` file into a WorkbookConfig plus a
display preview. Only the first worksheet is read. Every populated cell is
classified as one of:

- formula: stored with its formula, never an input
- number: stored as a literal and defaulted to input (admins demote later)
- text: stored as a literal caption, not an input
- boolean: stored as a literal, not an input
- empty: error cells, structured values (array/data-table formulas),
  dates and anything else unsupported; nothing is stored

The workbook is opened twice with openpyxl, once for formulas and once for
the values Excel cached when the file was last saved.
"""

from __future__ import annotations

import io
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from calcvault.exceptions import IngestionError
from calcvault.spreadsheet.address import encode
from calcvault.spreadsheet.model import CellDefinition, WorkbookConfig, build_workbook

logger = logging.getLogger(__name__)

PreviewValue = Union[int, float, str, bool]


@dataclass
class PreviewCell:
    """One entry of the dense preview grid shown to admins after upload."""
    value: PreviewValue
    type: str
    formula: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"value": self.value, "type": self.type}
        if self.formula is not None:
            data["formula"] = self.formula
        return data


EMPTY = PreviewCell(value="", type="empty")


@dataclass
class ParsedWorkbook:
    """Result of ingesting a spreadsheet."""
    config: WorkbookConfig
    preview: List[List[PreviewCell]] = field(default_factory=list)
    sheet_name: str = ""

    def preview_dicts(self) -> List[List[Dict[str, Any]]]:
        return [[cell.to_dict() for cell in row] for row in self.preview]


class ExcelParser:
    """Build workbook configurations from .xlsx files using openpyxl."""

    def __init__(self, max_size_bytes: Optional[int] = None) -> None:
        self.max_size_bytes = max_size_bytes

    def parse_file(self, path: Path, workbook_name: Optional[str] = None) -> ParsedWorkbook:
        """Ingest a spreadsheet from disk. The name defaults to the file stem."""
        path = Path(path)
        if not path.exists():
            raise IngestionError(f"Excel file not found: {path}")
        return self.parse_bytes(path.read_bytes(), workbook_name or path.stem)

    def parse_bytes(self, data: bytes, workbook_name: str = "Uploaded Workbook") -> ParsedWorkbook:
        """Ingest the first worksheet of an .xlsx document.

        Args:
            data: Raw file contents
            workbook_name: Name given to the resulting WorkbookConfig

        Returns:
            ParsedWorkbook holding the config and a rows x cols preview grid

        Raises:
            IngestionError: If the document is empty, too large, unreadable,
                has no worksheets, or its first worksheet has no populated cells
        """
        if not data:
            raise IngestionError("Uploaded file is empty")
        if self.max_size_bytes is not None and len(data) > self.max_size_bytes:
            raise IngestionError(
                f"Uploaded file is {len(data)} bytes, limit is {self.max_size_bytes}"
            )

        try:
            # Load twice: once to capture formulas, once for cached values
            workbook = load_workbook(io.BytesIO(data), data_only=False)
            computed_wb = load_workbook(io.BytesIO(data), data_only=True)
        except Exception as exc:  # zipfile, XML and openpyxl format errors
            raise IngestionError(f"Could not read spreadsheet: {exc}") from exc

        if not workbook.worksheets:
            raise IngestionError("Spreadsheet contains no worksheets")

        sheet = workbook.worksheets[0]
        computed_sheet = computed_wb.worksheets[0]
        cells, preview, counts = self._extract_sheet(sheet, computed_sheet)

        if not any(counts.values()):
            raise IngestionError(f"First worksheet {sheet.title!r} is empty")

        config = build_workbook(
            name=workbook_name,
            description=f"Imported from Excel file: {sheet.title}",
            rows=sheet.max_row,
            cols=sheet.max_column,
            cells=cells,
        )
        logger.info(
            "Ingested workbook %r: %dx%d grid, %d formula, %d number, %d text, %d boolean cells",
            workbook_name,
            config.rows,
            config.cols,
            counts["formula"],
            counts["number"],
            counts["text"],
            counts["boolean"],
        )
        return ParsedWorkbook(config=config, preview=preview, sheet_name=sheet.title)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _extract_sheet(
        self, sheet: Worksheet, computed_sheet: Worksheet
    ) -> Tuple[List[CellDefinition], List[List[PreviewCell]], Counter]:
        """Classify every cell of the used range in row-major order."""
        max_row, max_col = sheet.max_row, sheet.max_column
        cells: List[CellDefinition] = []
        preview: List[List[PreviewCell]] = []
        counts: Counter = Counter()

        row_iter = sheet.iter_rows(min_row=1, min_col=1, max_row=max_row, max_col=max_col)
        computed_iter = computed_sheet.iter_rows(
            min_row=1, min_col=1, max_row=max_row, max_col=max_col, values_only=True
        )

        for r, (row_cells, computed_values) in enumerate(zip(row_iter, computed_iter)):
            preview_row: List[PreviewCell] = []
            for c, (cell, computed_value) in enumerate(zip(row_cells, computed_values)):
                address = encode(r, c)
                definition, entry = self._classify(address, cell, computed_value)
                if definition is not None:
                    cells.append(definition)
                    counts[entry.type] += 1
                elif cell.value is not None:
                    counts["skipped"] += 1
                preview_row.append(entry)
            preview.append(preview_row)

        logger.debug("Classification counts for sheet %r: %s", sheet.title, dict(counts))
        return cells, preview, counts

    @staticmethod
    def _classify(
        address: str, cell: Cell, computed_value: Any
    ) -> Tuple[Optional[CellDefinition], PreviewCell]:
        """Map one openpyxl cell to a cell definition and preview entry."""
        value = cell.value

        if value is None or cell.data_type == "e":
            return None, EMPTY

        if cell.data_type == "f":
            # Array and data-table formulas come back as objects
            if not isinstance(value, str):
                return None, EMPTY
            raw = value[1:] if value.startswith("=") else value
            definition = CellDefinition(
                address=address,
                formula=f"={raw}",
                is_input=False,
                label=f"{address} Formula",
            )
            return definition, PreviewCell(
                value=_sanitize_cached(computed_value), type="formula", formula=raw
            )

        if isinstance(value, bool):
            definition = CellDefinition(
                address=address, value=value, is_input=False, label=f"{address} Boolean"
            )
            return definition, PreviewCell(value=str(value).lower(), type="boolean")

        if isinstance(value, (int, float)):
            definition = CellDefinition(
                address=address, value=value, is_input=True, label=f"{address} Value"
            )
            return definition, PreviewCell(value=value, type="number")

        if isinstance(value, str):
            if not value:
                return None, EMPTY
            definition = CellDefinition(
                address=address, value=value, is_input=False, label=f"{address} Label"
            )
            return definition, PreviewCell(value=value, type="text")

        return None, EMPTY


def _sanitize_cached(value: Any) -> PreviewValue:
    """Cached formula results are shown only if they are primitives."""
    if value is None:
        return ""
    if isinstance(value, (bool, int, float, str)):
        return value
    return ""


def parse_excel(data: bytes, workbook_name: str = "Uploaded Workbook") -> ParsedWorkbook:
    """Convenience wrapper around ``ExcelParser().parse_bytes``."""
    return ExcelParser().parse_bytes(data, workbook_name)
