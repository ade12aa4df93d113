"""
Unit tests for Excel ingestion.

Workbooks are built in memory with openpyxl in conftest.py, saved to bytes and
fed through ExcelParser.
"""

import pytest

from calcvault.engine import EvaluationAdapter
from calcvault.exceptions import IngestionError
from calcvault.ingestion import ExcelParser, parse_excel


class TestClassification:
    """Test suite for per-cell classification."""

    def test_simple_sheet_dimensions(self, simple_xlsx):
        parsed = parse_excel(simple_xlsx, "Simple")
        config = parsed.config
        assert config.name == "Simple"
        assert config.rows == 2
        assert config.cols == 3
        assert parsed.sheet_name == "Inputs"
        assert config.description == "Imported from Excel file: Inputs"

    def test_number_defaults_to_input(self, simple_xlsx):
        config = parse_excel(simple_xlsx).config
        a1 = config.get("A1")
        assert a1.value == 5
        assert a1.is_input
        assert a1.label == "A1 Value"

    def test_formula_cell(self, simple_xlsx):
        config = parse_excel(simple_xlsx).config
        b1 = config.get("B1")
        assert b1.formula == "=A1*2"
        assert b1.value is None
        assert not b1.is_input
        assert b1.label == "B1 Formula"

    def test_text_and_boolean_are_not_inputs(self, simple_xlsx):
        config = parse_excel(simple_xlsx).config
        assert config.get("A2").value == "Length"
        assert config.get("A2").label == "A2 Label"
        assert not config.get("A2").is_input
        assert config.get("C1").value is True
        assert config.get("C1").label == "C1 Boolean"
        assert not config.get("C1").is_input

    def test_only_first_sheet_is_read(self, simple_xlsx):
        config = parse_excel(simple_xlsx).config
        assert all(cell.value != 99 for cell in config.cells)
        assert len(config.cells) == 4

    def test_array_formula_is_skipped(self, mixed_xlsx):
        parsed = parse_excel(mixed_xlsx)
        assert "C2" not in parsed.config
        assert parsed.preview_dicts()[1][2] == {"value": "", "type": "empty"}

    def test_error_and_date_cells_are_skipped(self, mixed_xlsx):
        config = parse_excel(mixed_xlsx).config
        assert "A1" not in config
        assert "B1" not in config
        assert config.get("A2").value == 2.5
        assert config.get("D3").formula == "=SUM(A2:A3)"
        assert config.rows == 3
        assert config.cols == 4

    def test_ingested_workbook_evaluates(self, simple_xlsx):
        config = parse_excel(simple_xlsx).config
        adapter = EvaluationAdapter.from_config(config)
        assert adapter.read_all()["B1"] == 10
        adapter.apply_inputs({"A1": 7})
        assert adapter.read_all()["B1"] == 14


class TestPreview:
    """Test suite for the preview grid."""

    def test_preview_is_dense(self, mixed_xlsx):
        preview = parse_excel(mixed_xlsx).preview
        assert len(preview) == 3
        assert all(len(row) == 4 for row in preview)

    def test_preview_entries(self, simple_xlsx):
        rows = parse_excel(simple_xlsx).preview_dicts()
        assert rows[0][0] == {"value": 5, "type": "number"}
        assert rows[0][1]["type"] == "formula"
        assert rows[0][1]["formula"] == "A1*2"
        assert rows[0][2] == {"value": "true", "type": "boolean"}
        assert rows[1][0] == {"value": "Length", "type": "text"}
        assert rows[1][1] == {"value": "", "type": "empty"}

    def test_uncached_formula_previews_empty_value(self, simple_xlsx):
        # openpyxl does not compute formulas, so there is no cached result
        rows = parse_excel(simple_xlsx).preview_dicts()
        assert rows[0][1]["value"] == ""

    def test_skipped_cells_preview_as_empty(self, mixed_xlsx):
        rows = parse_excel(mixed_xlsx).preview_dicts()
        assert rows[0][0] == {"value": "", "type": "empty"}
        assert rows[0][1] == {"value": "", "type": "empty"}


class TestRejection:
    """Test suite for unreadable uploads."""

    def test_empty_bytes(self):
        with pytest.raises(IngestionError, match="empty"):
            parse_excel(b"")

    def test_garbage_bytes(self):
        with pytest.raises(IngestionError, match="Could not read"):
            parse_excel(b"this is not a spreadsheet")

    def test_empty_first_sheet(self, empty_xlsx):
        with pytest.raises(IngestionError, match="is empty"):
            parse_excel(empty_xlsx)

    def test_size_limit(self, simple_xlsx):
        parser = ExcelParser(max_size_bytes=16)
        with pytest.raises(IngestionError, match="limit"):
            parser.parse_bytes(simple_xlsx)

    def test_size_limit_not_hit(self, simple_xlsx):
        parser = ExcelParser(max_size_bytes=len(simple_xlsx))
        assert parser.parse_bytes(simple_xlsx).config.rows == 2


class TestParseFile:
    def test_name_defaults_to_stem(self, simple_xlsx, tmp_path):
        path = tmp_path / "pricing.xlsx"
        path.write_bytes(simple_xlsx)
        parsed = ExcelParser().parse_file(path)
        assert parsed.config.name == "pricing"

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestionError, match="not found"):
            ExcelParser().parse_file(tmp_path / "missing.xlsx")
