"""
Unit tests for workbook diagnostics.

Tests cover:
- extract_references: $ markers, ranges, sheet prefixes, string literals, function names
- explain_error: reason table, #REF! expansion, unknown codes
- diagnose: errors, dangling-reference warnings, summary and recommendations
"""

import pytest

from calcvault.diagnostics import (
    diagnose,
    explain_error,
    extract_references,
    missing_references,
)
from calcvault.engine import EvaluationAdapter
from calcvault.spreadsheet import CellDefinition, build_workbook


@pytest.fixture
def dangling_config():
    return build_workbook(
        "Dangling", 2, 2,
        [
            CellDefinition("A1", value=1, is_input=True),
            CellDefinition("B1", formula="=Z99+1"),
            CellDefinition("B2", formula="=A1*2"),
        ],
    )


class TestExtractReferences:
    @pytest.mark.parametrize(
        "formula, expected",
        [
            ("=A1+B2", ["A1", "B2"]),
            ("=$A$1*A$2+$B3", ["A1", "A2", "B3"]),
            ("=A1+A1*A1", ["A1"]),
            ("=SUM(A1:B10)", ["A1", "B10"]),
            ("=LOG10(C4)", ["C4"]),
            ('=IF(A1>0,"B2 is fine",C3)', ["A1", "C3"]),
            ('="Sheet2!A1"&B1', ["B1"]),
            ("=Sheet2!A1+D4", ["Sheet2!A1", "D4"]),
            ("='My Sheet'!$B$2*2", ["'My Sheet'!B2"]),
            ("=SUM(Sheet2!A1:B2)", ["Sheet2!A1", "Sheet2!B2"]),
            ("=SUM(Sheet2!A1,B2)", ["Sheet2!A1", "B2"]),
            ("=AA10*ZZ1", ["AA10", "ZZ1"]),
            ("=A01+B1", ["B1"]),
            ("=PI()*2", []),
            ("", []),
        ],
    )
    def test_references(self, formula, expected):
        assert extract_references(formula) == expected

    @pytest.mark.parametrize("formula", [None, 42, "=((", "=A1+", '="unterminated'])
    def test_never_raises(self, formula):
        assert isinstance(extract_references(formula), list)


class TestExplainError:
    def test_known_reason(self, box_config):
        reason = explain_error("#DIV/0!", "=B1/B4", box_config)
        assert reason.startswith("Division by zero")

    def test_ref_lists_missing_cells(self, box_config):
        reason = explain_error("#REF!", "=B1+Z99", box_config)
        assert "Formula references: B1, Z99" in reason
        assert "Missing cells: Z99" in reason

    def test_ref_without_missing_cells(self, box_config):
        reason = explain_error("#REF!", "=B1", box_config)
        assert reason.endswith("Missing cells: none")

    def test_ref_to_other_sheet(self, box_config):
        reason = explain_error("#REF!", "=Sheet2!Z99+1", box_config)
        assert "Formula references: Sheet2!Z99" in reason
        assert reason.endswith("Missing cells: Sheet2!Z99")

    def test_no_formula(self, box_config):
        assert explain_error("#VALUE!", None, box_config) == "No formula defined"

    def test_unknown_code(self, box_config):
        assert explain_error("#SPILL!", "=B1", box_config) == "Unknown error: #SPILL!"


class TestDiagnose:
    def test_dangling_reference_warning(self, dangling_config):
        report = diagnose(dangling_config, {"A1": 1, "B1": 1, "B2": 2})
        assert report.errors == []
        assert len(report.warnings) == 1
        warning = report.warnings[0]
        assert warning.address == "B1"
        assert warning.missing_cells == ["Z99"]
        assert "Z99" in warning.message
        assert not report.ok

    def test_warning_with_real_engine(self, dangling_config):
        values = EvaluationAdapter.from_config(dangling_config).read_all()
        report = diagnose(dangling_config, values)
        assert [w.missing_cells for w in report.warnings] == [["Z99"]]

    def test_error_cell(self, dangling_config):
        report = diagnose(dangling_config, {"A1": 1, "B1": "#REF!", "B2": 2})
        assert len(report.errors) == 1
        error = report.errors[0]
        assert error.address == "B1"
        assert error.error_code == "#REF!"
        assert error.formula == "=Z99+1"
        assert "Missing cells: Z99" in error.reason

    def test_other_sheet_reference_warning(self):
        config = build_workbook(
            "CrossSheet", 1, 2,
            [CellDefinition("A1", value=1, is_input=True), CellDefinition("B1", formula="=Sheet2!Z99+1")],
        )
        report = diagnose(config, {"A1": 1, "B1": "#REF!"})
        assert [w.missing_cells for w in report.warnings] == [["Sheet2!Z99"]]
        assert "Missing cells: Sheet2!Z99" in report.errors[0].reason

    def test_hash_prefixed_label_is_not_an_error(self):
        config = build_workbook("Tags", 1, 1, [CellDefinition("A1", value="#hashtag")])
        report = diagnose(config, {"A1": "#hashtag"})
        assert report.errors == []
        assert report.ok

    def test_summary(self, dangling_config):
        summary = diagnose(dangling_config, {}).summary
        assert summary["totalCells"] == 3
        assert summary["inputCells"] == 1
        assert summary["formulaCells"] == 2
        assert summary["errorCells"] == 0
        assert summary["warningCells"] == 1
        assert summary["dimensions"] == "2 rows × 2 cols"

    def test_clean_workbook(self, box_config):
        report = diagnose(box_config, {"B1": 10, "B2": 5, "B3": 3, "B5": 50})
        assert report.ok
        assert report.recommendations == [
            "No errors or warnings found! Your workbook looks good."
        ]

    def test_recommendations_for_errors(self, dangling_config):
        report = diagnose(dangling_config, {"A1": 1, "B1": "#REF!", "B2": "#ERROR!"})
        recs = report.recommendations
        assert recs[0].startswith("Found 2 formula error(s)")
        assert any(r.startswith("1 #REF! error(s)") for r in recs)
        assert any(r.startswith("1 #ERROR! found") for r in recs)
        assert any("missing cell dependencies" in r for r in recs)
        assert recs[-1].startswith("To fix")

    def test_to_dict_keys(self, dangling_config):
        data = diagnose(dangling_config, {"B1": "#REF!"}).to_dict()
        assert set(data) == {
            "workbookName", "summary", "errors", "warnings", "cellInfo", "recommendations",
        }
        assert data["errors"][0]["error"] == "#REF!"
        assert data["warnings"][0]["missingCells"] == ["Z99"]
        b1_info = next(info for info in data["cellInfo"] if info["address"] == "B1")
        assert b1_info["hasError"] is True
        assert b1_info["missingDependencies"] == ["Z99"]


class TestMissingReferences:
    def test_unqualified_references_checked_against_config(self, box_config):
        assert missing_references("=B1*B2+C9", box_config) == ["C9"]

    def test_sheet_qualified_references_are_always_missing(self, box_config):
        # B1 exists locally, but the configuration has no other sheets
        assert missing_references("=Sheet2!B1+B2", box_config) == ["Sheet2!B1"]

    def test_non_string_formula(self, box_config):
        assert missing_references(None, box_config) == []
