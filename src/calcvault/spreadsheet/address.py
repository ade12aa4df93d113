"""
Cell address arithmetic.

Single shared implementation of the mapping between 0-indexed (row, col)
pairs and A1-style addresses. Ingestion, evaluation, display and diagnostics
all go through this module.

Column letters are bijective base-26: A..Z are 1..26 and there is no zero
digit, so column index 25 is ``Z`` and column index 26 is ``AA``.
"""

import re
from typing import NamedTuple

from calcvault.exceptions import InvalidAddress

_ADDRESS_RE = re.compile(r"^([A-Z]+)([0-9]+)$")


class CellAddress(NamedTuple):
    """A grid position, 0-indexed.

    Attributes:
        row: Row index (0 = spreadsheet row 1)
        col: Column index (0 = column A)
    """
    row: int
    col: int

    @property
    def a1(self) -> str:
        """Canonical A1 string for this position."""
        return encode(self.row, self.col)

    @classmethod
    def from_a1(cls, address: str) -> "CellAddress":
        return decode(address)

    def __str__(self) -> str:
        return self.a1


def column_letter(col: int) -> str:
    """Convert a 0-indexed column number to its letters.

    Args:
        col: Column number (0 = A, 25 = Z, 26 = AA, ...)

    Returns:
        Column letter(s)

    Raises:
        InvalidAddress: If col is negative or not an integer
    """
    if isinstance(col, bool) or not isinstance(col, int) or col < 0:
        raise InvalidAddress(col)

    col_1indexed = col + 1
    result = ""
    while col_1indexed > 0:
        col_1indexed -= 1
        result = chr(65 + (col_1indexed % 26)) + result
        col_1indexed //= 26
    return result


def column_index(letters: str) -> int:
    """Convert column letters to a 0-indexed column number.

    Args:
        letters: Upper-case column letters (A, Z, AA, ...)

    Returns:
        Column number (A = 0, Z = 25, AA = 26, ...)

    Raises:
        InvalidAddress: If letters is empty or not all upper-case A-Z
    """
    if not isinstance(letters, str) or not re.fullmatch(r"[A-Z]+", letters):
        raise InvalidAddress(letters)

    col_1indexed = 0
    for char in letters:
        col_1indexed = col_1indexed * 26 + (ord(char) - 64)
    return col_1indexed - 1


def encode(row: int, col: int) -> str:
    """Encode a 0-indexed (row, col) pair as an A1 address.

    >>> encode(0, 0)
    'A1'
    >>> encode(0, 26)
    'AA1'

    Raises:
        InvalidAddress: If row or col is negative or not an integer
    """
    if isinstance(row, bool) or not isinstance(row, int) or row < 0:
        raise InvalidAddress((row, col))
    return f"{column_letter(col)}{row + 1}"


def decode(address: str) -> CellAddress:
    """Decode an A1 address into a 0-indexed CellAddress.

    Only the canonical form is accepted: upper-case letters followed by a
    row number of at least 1. Lower-case letters, ``$`` markers, ranges and
    sheet prefixes are rejected.

    Raises:
        InvalidAddress: If address does not match ``^[A-Z]+[0-9]+$``
    """
    if not isinstance(address, str):
        raise InvalidAddress(address)

    match = _ADDRESS_RE.match(address)
    if not match:
        raise InvalidAddress(address)

    letters, row_str = match.groups()
    row_1indexed = int(row_str)
    if row_1indexed < 1:
        raise InvalidAddress(address)

    return CellAddress(row=row_1indexed - 1, col=column_index(letters))


def is_address(text: object) -> bool:
    """Return True if *text* is a canonical A1 address."""
    try:
        decode(text)  # type: ignore[arg-type]
    except InvalidAddress:
        return False
    return True
