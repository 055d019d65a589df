"""openpyxl-backed workbook I/O and grid view."""
