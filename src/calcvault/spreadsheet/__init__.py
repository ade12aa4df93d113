"""
Spreadsheet model module.

This module provides the cell address codec and the workbook configuration
model shared by every other calcvault component.
"""

from calcvault.spreadsheet.address import (
    CellAddress,
    column_index,
    column_letter,
    decode,
    encode,
    is_address,
)
from calcvault.spreadsheet.model import (
    CellDefinition,
    WorkbookConfig,
    build_workbook,
    export_public_view,
    update_cell_input_flag,
)
from calcvault.spreadsheet.defaults import DEFAULT_WORKBOOK

__all__ = [
    "CellAddress",
    "column_index",
    "column_letter",
    "decode",
    "encode",
    "is_address",
    "CellDefinition",
    "WorkbookConfig",
    "build_workbook",
    "export_public_view",
    "update_cell_input_flag",
    "DEFAULT_WORKBOOK",
]
