"""Command line interface (``python -m employee_import.cli``)."""
