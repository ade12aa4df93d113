"""
Geometry export for calcvault.
"""

from calcvault.export.dxf import DxfGenerator, box_edges

__all__ = ["DxfGenerator", "box_edges"]
