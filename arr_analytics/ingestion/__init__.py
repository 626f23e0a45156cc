"""
Export Ingestion Module
"""
from .reader import ParseIssue, RawExport, RawRow, load_export_text, read_export, sniff_delimiter

__all__ = [
    "ParseIssue",
    "RawExport",
    "RawRow",
    "load_export_text",
    "read_export",
    "sniff_delimiter",
]
