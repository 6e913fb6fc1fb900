"""Scan a project tree, select files and export them as fixed-size line batches."""

__version__ = "0.1.0"
