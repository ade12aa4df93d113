"""
calcvault - Serve spreadsheet calculators without shipping their formulas.

An uploaded Excel workbook is ingested once into a workbook configuration
that keeps every formula on the server. Clients only ever see a formula-free
public view; they submit values for input cells and receive the recalculated
values of every cell.

Usage:
    >>> from calcvault import EvaluationAdapter, DEFAULT_WORKBOOK
    >>> adapter = EvaluationAdapter.from_config(DEFAULT_WORKBOOK)
    >>> applied = adapter.apply_inputs({"B1": 20})
    >>> adapter.read_all()["B5"]
    100.0

Key components:
- spreadsheet: cell addresses and the workbook configuration model
- ingestion: .xlsx files to workbook configurations
- engine: formula evaluation and value sanitization
- diagnostics: formula error and missing-reference reports
- export: DXF geometry from computed values
- service: request-level operations over a workbook store
"""

from .spreadsheet import (
    CellAddress,
    CellDefinition,
    WorkbookConfig,
    DEFAULT_WORKBOOK,
    build_workbook,
    decode,
    encode,
    export_public_view,
    update_cell_input_flag,
)
from .engine import EvaluationAdapter, FormualizerEngine
from .ingestion import ExcelParser, ParsedWorkbook, parse_excel
from .diagnostics import DiagnosticsReport, diagnose
from .export import DxfGenerator
from .service import CalculatorService
from .exceptions import *

# Version
__version__ = "0.1.0"

__all__ = [
    'CellAddress',
    'CellDefinition',
    'WorkbookConfig',
    'DEFAULT_WORKBOOK',
    'build_workbook',
    'decode',
    'encode',
    'export_public_view',
    'update_cell_input_flag',
    'EvaluationAdapter',
    'FormualizerEngine',
    'ExcelParser',
    'ParsedWorkbook',
    'parse_excel',
    'DiagnosticsReport',
    'diagnose',
    'DxfGenerator',
    'CalculatorService',
    'CalcVaultError',
    'InvalidAddress',
    'InvalidWorkbook',
    'CellNotFound',
    'EngineInitError',
    'IngestionError',
    'ExportError',
    'WorkbookNotFound',
]
