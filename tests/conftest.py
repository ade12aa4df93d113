"""Shared pytest configuration and fixtures for calcvault tests."""

import datetime
import io

import pytest
from openpyxl import Workbook
from openpyxl.worksheet.formula import ArrayFormula

from calcvault.config import Settings
from calcvault.spreadsheet import DEFAULT_WORKBOOK, CellDefinition, build_workbook
from calcvault.storage import InMemoryWorkbookStore


def _xlsx_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def default_config():
    return DEFAULT_WORKBOOK


@pytest.fixture
def box_config():
    """Three inputs and a product formula."""
    return build_workbook(
        name="Box",
        rows=5,
        cols=2,
        cells=[
            CellDefinition("B1", value=10, is_input=True, label="Length"),
            CellDefinition("B2", value=5, is_input=True, label="Width"),
            CellDefinition("B3", value=3, is_input=True, label="Height"),
            CellDefinition("B5", formula="=B1*B2", label="Area"),
        ],
    )


@pytest.fixture
def simple_xlsx() -> bytes:
    """A1=5, B1==A1*2, A2 text, C1 boolean, second sheet ignored."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Inputs"
    ws["A1"] = 5
    ws["B1"] = "=A1*2"
    ws["A2"] = "Length"
    ws["C1"] = True
    other = wb.create_sheet("Other")
    other["A1"] = 99
    return _xlsx_bytes(wb)


@pytest.fixture
def mixed_xlsx() -> bytes:
    """Error, date and array-formula cells plus a sparse used range."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Mixed"
    ws["A1"] = "#DIV/0!"
    ws["B1"] = datetime.date(2024, 1, 1)
    ws["A2"] = 2.5
    ws["C2"] = ArrayFormula("C2:C2", "=SUM(A2:A3*2)")
    ws["D3"] = "=SUM(A2:A3)"
    return _xlsx_bytes(wb)


@pytest.fixture
def empty_xlsx() -> bytes:
    return _xlsx_bytes(Workbook())


@pytest.fixture
def store():
    return InMemoryWorkbookStore()


@pytest.fixture
def settings():
    return Settings(_env_file=None)
