"""Tabular input: header normalization and CSV/spreadsheet readers."""
