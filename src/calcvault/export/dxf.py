"""
DXF export.

Renders computed workbook values as an ASCII DXF (AutoCAD R2000) document
describing the 12 edges of a rectangular box: 4 bottom edges, 4 vertical
edges and 4 top edges, all on layer 0, in millimetres. Length, width and
height are read from three cells of the evaluated values (B1, B2 and B3 in
the default workbook).
"""

import datetime
import io
import logging
import math
from collections.abc import Mapping
from typing import Any, List, Tuple

import ezdxf
from ezdxf import units

from calcvault.exceptions import ExportError

logger = logging.getLogger(__name__)

Point = Tuple[float, float, float]

DXF_VERSION = "R2000"


def _coerce_dimension(value: Any) -> float:
    """Numeric value of a cell, 0 when missing or not a finite number."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)):
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return number


def box_edges(length: float, width: float, height: float) -> List[Tuple[Point, Point]]:
    """The 12 edges of an axis-aligned box with one corner at the origin."""
    def ring(z: float) -> List[Point]:
        return [(0.0, 0.0, z), (length, 0.0, z), (length, width, z), (0.0, width, z)]

    bottom, top = ring(0.0), ring(height)
    edges: List[Tuple[Point, Point]] = []
    edges.extend((bottom[i], bottom[(i + 1) % 4]) for i in range(4))
    edges.extend((bottom[i], top[i]) for i in range(4))
    edges.extend((top[i], top[(i + 1) % 4]) for i in range(4))
    return edges


class DxfGenerator:
    """Generates DXF documents and download filenames from computed values."""

    @staticmethod
    def generate(
        values: Mapping,
        length_cell: str = "B1",
        width_cell: str = "B2",
        height_cell: str = "B3",
    ) -> str:
        """Render a box DXF from three evaluated cells.

        Missing, non-numeric, boolean and non-finite values are treated as 0.

        Args:
            values: Address -> evaluated value
            length_cell: Address holding the box length (x)
            width_cell: Address holding the box width (y)
            height_cell: Address holding the box height (z)

        Returns:
            DXF document text

        Raises:
            ExportError: If values is not a mapping
        """
        if not isinstance(values, Mapping):
            raise ExportError(f"Expected a mapping of cell values, got {type(values).__name__}")

        length = _coerce_dimension(values.get(length_cell))
        width = _coerce_dimension(values.get(width_cell))
        height = _coerce_dimension(values.get(height_cell))

        doc = ezdxf.new(DXF_VERSION)
        doc.units = units.MM
        msp = doc.modelspace()
        for start, end in box_edges(length, width, height):
            msp.add_line(start, end, dxfattribs={"layer": "0"})

        stream = io.StringIO()
        doc.write(stream)
        logger.info("Generated DXF box %g x %g x %g", length, width, height)
        return stream.getvalue()

    @staticmethod
    def filename(prefix: str = "design") -> str:
        """``<prefix>_<UTC ISO timestamp, ':' and '.' replaced by '-'>.dxf``."""
        now = datetime.datetime.now(datetime.timezone.utc)
        timestamp = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        timestamp = timestamp.replace(":", "-").replace(".", "-")
        return f"{prefix}_{timestamp}.dxf"
