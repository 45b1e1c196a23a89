"""sheetdoc: spreadsheet (CSV / Excel) to Word document generator."""

__version__ = "0.1.0"
