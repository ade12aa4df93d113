"""
End-to-end demo: Excel workbook → server-side calculator → DXF drawing.

This script demonstrates the full calcvault pipeline:
1. Build a small box calculator in an .xlsx file with openpyxl
2. Upload it, which ingests the first sheet into a workbook configuration
3. Show the formula-free view a client would receive
4. Recalculate with new inputs and export the box as a DXF file

Usage:
    python examples/end_to_end_demo.py [output-dir]
"""

import io
import json
import sys
from pathlib import Path

from openpyxl import Workbook

from calcvault import CalculatorService
from calcvault.config import Settings, configure_logging


def build_xlsx() -> bytes:
    """Create a box calculator: three dimensions and four derived values."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Box"
    for row, (label, value) in enumerate(
        [("Length", 10), ("Width", 5), ("Height", 3)], start=1
    ):
        ws.cell(row=row, column=1, value=label)
        ws.cell(row=row, column=2, value=value)
    ws["A5"], ws["B5"] = "Area", "=B1*B2"
    ws["A6"], ws["B6"] = "Volume", "=B1*B2*B3"
    ws["A7"], ws["B7"] = "Perimeter", "=2*(B1+B2)"
    ws["A8"], ws["B8"] = "Surface Area", "=2*(B1*B2+B2*B3+B1*B3)"

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def main():
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    settings = Settings()
    configure_logging(settings)
    service = CalculatorService(settings=settings)

    upload = service.upload_workbook(build_xlsx(), name="Box Calculator", file_name="box.xlsx")
    workbook_id = upload["workbookId"]
    print(f"Uploaded workbook {workbook_id}")

    view = service.load_workbook(workbook_id)
    print("Client view (no formulas):")
    print(json.dumps(view["metadata"], indent=2))

    results = service.calculate({"B1": 20, "B2": 8, "B3": 4}, workbook_id)["results"]
    for address in ("B5", "B6", "B7", "B8"):
        print(f"{address} = {results[address]}")

    report = service.diagnose(workbook_id)
    for recommendation in report["recommendations"]:
        print(recommendation)

    filename, content = service.export_dxf(results)
    path = output_dir / filename
    path.write_text(content, encoding="utf-8")
    print(f"Wrote {path}")


if __name__ == "__main__":
    main()
