"""
Calculator service.

Request-level operations of the calculator, free of any HTTP framework. Each
call that evaluates formulas builds a fresh EvaluationAdapter from the stored
configuration and drops it before returning, so concurrent requests never
share evaluator state.

Client-facing responses (load_workbook, calculate) only carry the public view
and sanitized values. Admin responses (upload_workbook, diagnose) include
formulas.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from calcvault.config import Settings, get_settings
from calcvault.diagnostics import diagnose
from calcvault.engine.adapter import EvaluationAdapter
from calcvault.engine.base import Engine
from calcvault.export.dxf import DxfGenerator
from calcvault.ingestion.excel_parser import ExcelParser
from calcvault.spreadsheet.defaults import DEFAULT_WORKBOOK
from calcvault.spreadsheet.model import WorkbookConfig, update_cell_input_flag
from calcvault.storage import (
    InMemoryWorkbookStore,
    JsonFileWorkbookStore,
    WorkbookStore,
    new_record,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKBOOK_ID = "default"


def _grid_payload(grid: List[List[Any]]) -> List[List[Dict[str, Any]]]:
    return [[{"value": value} for value in row] for row in grid]


def store_from_settings(settings: Settings) -> WorkbookStore:
    if settings.storage_dir:
        return JsonFileWorkbookStore(Path(settings.storage_dir))
    return InMemoryWorkbookStore()


class CalculatorService:
    """Entry point for calculator requests.

    Usage::

        service = CalculatorService()
        upload = service.upload_workbook(xlsx_bytes, name="Shelf")
        result = service.calculate({"B1": 20}, upload["workbookId"])

    Args:
        store: Workbook store; built from settings when omitted
        settings: Settings; the process-wide settings when omitted
        engine_factory: Engine factory handed to every EvaluationAdapter
    """

    def __init__(
        self,
        store: Optional[WorkbookStore] = None,
        settings: Optional[Settings] = None,
        engine_factory: Optional[Callable[[], Engine]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store if store is not None else store_from_settings(self.settings)
        self.engine_factory = engine_factory
        self.parser = ExcelParser(max_size_bytes=self.settings.max_upload_size_bytes)

    def get_config(self, workbook_id: Optional[str] = None) -> WorkbookConfig:
        """Configuration for *workbook_id*; None or "default" is the built-in workbook.

        Raises:
            WorkbookNotFound: If the id is unknown
        """
        if not workbook_id or workbook_id == DEFAULT_WORKBOOK_ID:
            return DEFAULT_WORKBOOK
        return self.store.get(workbook_id).formula_config

    def _adapter(self, config: WorkbookConfig) -> EvaluationAdapter:
        return EvaluationAdapter.from_config(config, engine_factory=self.engine_factory)

    def load_workbook(self, workbook_id: Optional[str] = None) -> Dict[str, Any]:
        """Public view, initial values and display grid of a workbook."""
        adapter = self._adapter(self.get_config(workbook_id))
        return {
            "metadata": adapter.export_public_view(),
            "initialValues": adapter.read_all(),
            "spreadsheetData": _grid_payload(adapter.read_grid()),
        }

    def calculate(
        self, inputs: Optional[Mapping[str, Any]], workbook_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Apply client inputs and return every recalculated value.

        Raises:
            ValueError: If inputs is missing
            WorkbookNotFound: If the id is unknown
        """
        if inputs is None:
            raise ValueError("Missing inputs")

        adapter = self._adapter(self.get_config(workbook_id))
        adapter.apply_inputs(inputs)
        return {
            "results": adapter.read_all(),
            "spreadsheetData": _grid_payload(adapter.read_grid()),
            "metadata": adapter.export_public_view(),
        }

    def upload_workbook(
        self,
        data: bytes,
        name: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Ingest an uploaded spreadsheet and persist its configuration.

        The returned payload contains formulas and is for admins only.

        Raises:
            IngestionError: If the spreadsheet cannot be ingested
        """
        parsed = self.parser.parse_bytes(data, name or self.settings.default_upload_name)
        record = new_record(parsed.config, file_name=file_name)
        self.store.put(record)
        logger.info("Saved workbook %s (%r)", record.id, record.name)
        return {
            "workbookId": record.id,
            "config": parsed.config.to_dict(),
            "preview": parsed.preview_dicts(),
        }

    def set_cell_input(self, workbook_id: str, address: str, is_input: bool) -> WorkbookConfig:
        """Promote or demote one cell of a stored workbook.

        Concurrent edits of the same workbook are last-write-wins.

        Raises:
            ValueError: If workbook_id selects the built-in workbook
            WorkbookNotFound: If the id is unknown
            CellNotFound: If the address is not defined
            InvalidWorkbook: If a formula cell would become an input
        """
        if not workbook_id or workbook_id == DEFAULT_WORKBOOK_ID:
            raise ValueError("The default workbook cannot be modified")

        record = self.store.get(workbook_id)
        config = update_cell_input_flag(record.formula_config, address, is_input)
        self.store.put(record.with_config(config))
        logger.info("Workbook %s: cell %s is_input=%s", workbook_id, address, bool(is_input))
        return config

    def diagnose(self, workbook_id: Optional[str] = None) -> Dict[str, Any]:
        """Error and missing-dependency report for a workbook (admin only)."""
        config = self.get_config(workbook_id)
        values = self._adapter(config).read_all()
        return diagnose(config, values).to_dict()

    def export_dxf(self, values: Optional[Mapping[str, Any]]) -> Tuple[str, str]:
        """Render computed values as a DXF box.

        Returns:
            (filename, document text)

        Raises:
            ValueError: If values is missing
        """
        if values is None:
            raise ValueError("Missing calculation values")
        content = DxfGenerator.generate(values)
        return DxfGenerator.filename(self.settings.dxf_filename_prefix), content

    def list_workbooks(self) -> List[Dict[str, Any]]:
        """Summaries of every stored workbook, newest first. No formulas."""
        return [record.summary() for record in self.store.list()]

    def delete_workbook(self, workbook_id: str) -> None:
        self.store.delete(workbook_id)
        logger.info("Deleted workbook %s", workbook_id)

