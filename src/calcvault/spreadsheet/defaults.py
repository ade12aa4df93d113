"""Built-in workbook served when no uploaded workbook is selected."""

from calcvault.spreadsheet.model import CellDefinition, build_workbook

DEFAULT_WORKBOOK = build_workbook(
    name="AutoCAD Design Calculator",
    description="Calculate design parameters for AutoCAD",
    rows=20,
    cols=10,
    cells=[
        # Inputs
        CellDefinition("A1", value="Length", label="Length Label"),
        CellDefinition("B1", value=10, is_input=True, label="Length Value"),
        CellDefinition("A2", value="Width", label="Width Label"),
        CellDefinition("B2", value=5, is_input=True, label="Width Value"),
        CellDefinition("A3", value="Height", label="Height Label"),
        CellDefinition("B3", value=3, is_input=True, label="Height Value"),
        # Derived
        CellDefinition("A5", value="Area", label="Area Label"),
        CellDefinition("B5", formula="=B1*B2", label="Area Value"),
        CellDefinition("A6", value="Volume", label="Volume Label"),
        CellDefinition("B6", formula="=B1*B2*B3", label="Volume Value"),
        CellDefinition("A7", value="Perimeter", label="Perimeter Label"),
        CellDefinition("B7", formula="=2*(B1+B2)", label="Perimeter Value"),
        CellDefinition("A8", value="Surface Area", label="Surface Area Label"),
        CellDefinition("B8", formula="=2*(B1*B2+B2*B3+B1*B3)", label="Surface Area Value"),
    ],
)
