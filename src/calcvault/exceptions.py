"""
Exception classes for calcvault.

These exceptions are used throughout the calcvault package to signal error
conditions while building workbook configurations, ingesting spreadsheets,
evaluating formulas and exporting geometry.

None of them ever carries formula text or an evaluation engine's internal
error object in its message.
"""


class CalcVaultError(Exception):
    """Base class for every error raised by calcvault."""
    pass


class InvalidAddress(CalcVaultError, ValueError):
    """Raised when a cell address string or index pair is malformed.

    Addresses must be upper-case column letters followed by a 1-based row
    number (``A1``, ``AA10``). Row and column indices must be non-negative
    integers.
    """

    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__(f"Invalid cell address: {address!r}")


class InvalidWorkbook(CalcVaultError, ValueError):
    """Raised when a workbook configuration violates a schema invariant.

    Examples:
        - Two cell definitions share an address
        - A cell has both a formula and a literal value, or neither
        - A formula cell is flagged as an input
        - A cell lies outside the declared rows x cols bounding box
    """
    pass


class CellNotFound(CalcVaultError, KeyError):
    """Raised when an update references an address absent from the workbook."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(address)

    def __str__(self) -> str:
        return f"Cell not found in workbook: {self.address}"


class EngineInitError(CalcVaultError):
    """Raised when the evaluation engine rejects a cell while loading a workbook.

    The engine's own diagnostic message is propagated unmodified; the formula
    text itself is not included.
    """

    def __init__(self, address: str, message: str) -> None:
        self.address = address
        self.engine_message = message
        super().__init__(f"Evaluation engine rejected cell {address}: {message}")


class IngestionError(CalcVaultError):
    """Raised when an uploaded spreadsheet cannot be turned into a workbook.

    Common causes include:
        - Empty upload or upload above the configured size limit
        - Bytes that are not a readable .xlsx container
        - A workbook without worksheets, or whose first sheet is empty
    """
    pass


class ExportError(CalcVaultError):
    """Raised when a geometry document cannot be rendered."""
    pass


class WorkbookNotFound(CalcVaultError, KeyError):
    """Raised when a workbook id is unknown to the store."""

    def __init__(self, workbook_id: str) -> None:
        self.workbook_id = workbook_id
        super().__init__(workbook_id)

    def __str__(self) -> str:
        return f"Workbook not found: {self.workbook_id}"
