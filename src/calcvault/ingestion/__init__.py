"""
Spreadsheet ingestion for calcvault.

Converts uploaded .xlsx files into workbook configurations.
"""

from calcvault.ingestion.excel_parser import (
    ExcelParser,
    ParsedWorkbook,
    PreviewCell,
    parse_excel,
)

__all__ = [
    "ExcelParser",
    "ParsedWorkbook",
    "PreviewCell",
    "parse_excel",
]
