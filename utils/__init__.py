"""Export helpers (tables, workbooks) for finished plans."""
