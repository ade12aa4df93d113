"""
Workbook diagnostics.

Explains why formulas in a workbook fail. Given a configuration and the values
an EvaluationAdapter produced for it, diagnose() reports:

- errors: cells whose value is an error code, with a human explanation
- warnings: formulas referencing addresses that no cell defines, whether or
  not the engine surfaced an error for them
- a summary of cell counts and a list of recommendations

Detection is best-effort. Malformed formula text is skipped, never raised on.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from calcvault.engine.values import is_error_code
from calcvault.spreadsheet.model import WorkbookConfig

logger = logging.getLogger(__name__)

# A1, $A1, A$1, $A$1, optionally sheet-qualified (Sheet2!A1, 'My Sheet'!A1);
# not part of a longer identifier, not a function name (LOG10( ).
_REFERENCE_RE = re.compile(
    r"(?<![A-Za-z0-9_.!$'])"
    r"(?:(?P<sheet>'(?:[^']|'')+'|[A-Za-z_][A-Za-z0-9_.]*)!)?"
    r"\$?(?P<col>[A-Z]{1,3})\$?(?P<row>[0-9]+)(?![A-Za-z0-9_(!])"
)
_STRING_LITERAL_RE = re.compile(r'"(?:[^"]|"")*"')

ERROR_REASONS: Dict[str, str] = {
    "#VALUE!": "Wrong type of argument or operand. Check if you're trying to do math with text values.",
    "#DIV/0!": "Division by zero. One of the cells in the formula has a value of 0.",
    "#NAME?": "Unrecognized function name. The formula uses a function that the evaluation engine doesn't support.",
    "#N/A": "Value not available. Common in VLOOKUP when the value isn't found.",
    "#NUM!": "Invalid numeric value. The formula produces a number that's too large or too small.",
    "#ERROR!": "General error. The formula has a syntax error or references cells that don't exist yet.",
}


@dataclass
class FormulaError:
    address: str
    error_code: str
    formula: Optional[str]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "error": self.error_code,
            "formula": self.formula,
            "reason": self.reason,
        }


@dataclass
class MissingDependency:
    address: str
    formula: str
    missing_cells: List[str]

    @property
    def message(self) -> str:
        return f"Formula references cells that don't exist: {', '.join(self.missing_cells)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "formula": self.formula,
            "missingCells": list(self.missing_cells),
            "message": self.message,
        }


@dataclass
class DiagnosticsReport:
    """Outcome of diagnose(). Contains formulas: admin use only."""
    workbook_name: str
    summary: Dict[str, Any]
    errors: List[FormulaError] = field(default_factory=list)
    warnings: List[MissingDependency] = field(default_factory=list)
    cell_info: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workbookName": self.workbook_name,
            "summary": dict(self.summary),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "cellInfo": [dict(info) for info in self.cell_info],
            "recommendations": list(self.recommendations),
        }


def extract_references(formula: Any) -> List[str]:
    """Cell addresses referenced by a formula.

    ``$`` markers are stripped, duplicates removed, first-seen order kept.
    Range endpoints (``A1:B10``) count as two references; the end of a
    sheet-qualified range keeps the sheet (``Sheet2!A1:B2`` yields
    ``Sheet2!A1`` and ``Sheet2!B2``). Text inside string literals is ignored.
    Never raises; non-string input yields ``[]``.
    """
    if not isinstance(formula, str):
        return []

    text = _STRING_LITERAL_RE.sub('""', formula)
    seen: Dict[str, None] = {}
    prev_sheet: Optional[str] = None
    prev_end = -1
    for match in _REFERENCE_RE.finditer(text):
        sheet = match.group("sheet")
        if sheet is None and prev_sheet and match.start() == prev_end + 1 and text[prev_end] == ":":
            sheet = prev_sheet
        prev_sheet, prev_end = sheet, match.end()

        row = match.group("row")
        if row.startswith("0"):
            continue
        ref = f"{match.group('col')}{row}"
        seen.setdefault(f"{sheet}!{ref}" if sheet else ref, None)
    return list(seen)


def missing_references(formula: Any, config: WorkbookConfig) -> List[str]:
    """References of *formula* that no cell of *config* defines.

    A workbook configuration holds a single sheet, so every sheet-qualified
    reference is missing.
    """
    return [
        ref for ref in extract_references(formula)
        if "!" in ref or ref not in config
    ]


def explain_error(error_code: str, formula: Optional[str], config: WorkbookConfig) -> str:
    """Human-readable reason for an error code in a cell."""
    if not formula:
        return "No formula defined"

    if error_code == "#REF!":
        refs = extract_references(formula)
        missing = missing_references(formula, config)
        return (
            f"Invalid cell reference. Formula references: {', '.join(refs)}. "
            f"Missing cells: {', '.join(missing) or 'none'}"
        )

    reason = ERROR_REASONS.get(error_code)
    if reason is None:
        return f"Unknown error: {error_code}"
    return reason


def diagnose(config: WorkbookConfig, values: Mapping[str, Any]) -> DiagnosticsReport:
    """Analyse evaluated values of a workbook for errors and dangling references.

    Args:
        config: The workbook configuration
        values: Address -> evaluated value, as returned by
            EvaluationAdapter.read_all()

    Returns:
        DiagnosticsReport
    """
    errors: List[FormulaError] = []
    warnings: List[MissingDependency] = []
    cell_info: List[Dict[str, Any]] = []

    for cell in config.cells:
        value = values.get(cell.address, "")
        info: Dict[str, Any] = {
            "address": cell.address,
            "isInput": cell.is_input,
            "hasFormula": cell.has_formula,
            "formula": cell.formula,
            "value": value,
        }

        if is_error_code(value):
            errors.append(
                FormulaError(
                    address=cell.address,
                    error_code=value,
                    formula=cell.formula,
                    reason=explain_error(value, cell.formula, config),
                )
            )
            info["hasError"] = True
            info["errorType"] = value

        if cell.formula is not None:
            missing = missing_references(cell.formula, config)
            if missing:
                warnings.append(
                    MissingDependency(address=cell.address, formula=cell.formula, missing_cells=missing)
                )
                info["missingDependencies"] = missing

        cell_info.append(info)

    summary = {
        "totalCells": len(config.cells),
        "inputCells": len(config.input_addresses()),
        "formulaCells": len(config.formula_cells()),
        "errorCells": len(errors),
        "warningCells": len(warnings),
        "dimensions": f"{config.rows} rows × {config.cols} cols",
    }
    logger.debug(
        "Diagnosed workbook %r: %d errors, %d warnings", config.name, len(errors), len(warnings)
    )

    return DiagnosticsReport(
        workbook_name=config.name,
        summary=summary,
        errors=errors,
        warnings=warnings,
        cell_info=cell_info,
        recommendations=recommend(errors, warnings),
    )


def recommend(errors: List[FormulaError], warnings: List[MissingDependency]) -> List[str]:
    recommendations: List[str] = []

    if errors:
        recommendations.append(
            f"Found {len(errors)} formula error(s). Check the errors list for details."
        )

        ref_errors = [e for e in errors if e.error_code == "#REF!"]
        if ref_errors:
            recommendations.append(
                f"{len(ref_errors)} #REF! error(s) found. These formulas reference cells that "
                "don't exist in your Excel file. Make sure all referenced cells are included."
            )

        generic_errors = [e for e in errors if e.error_code == "#ERROR!"]
        if generic_errors:
            recommendations.append(
                f"{len(generic_errors)} #ERROR! found. These formulas have syntax errors or "
                "reference cells that haven't been initialized yet. Check the formula syntax."
            )

    if warnings:
        recommendations.append(
            f"Found {len(warnings)} warning(s) about missing cell dependencies."
        )

    if not errors and not warnings:
        recommendations.append("No errors or warnings found! Your workbook looks good.")
    else:
        recommendations.append("To fix: Open your Excel file, fix the errors, and re-upload.")

    return recommendations
