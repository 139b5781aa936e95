"""Employee master-data importer: CSV/XLSX/XLS personnel exports -> PostgreSQL."""

__version__ = "0.1.0"
