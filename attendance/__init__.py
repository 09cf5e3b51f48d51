"""
This package contains:
- reading an uploaded enrollment spreadsheet (XLSX/XLS)
- column normalization and required-column validation
- the in-memory record store and subject list
- subject filtering and free-text search
- attendance sheet export (one subject or all subjects)
"""
from .ingest import load_enrollment, read_rows, check_extension
from .columns import normalize_header, build_header_map, normalize_row, missing_columns, validate_columns
from .store import RecordStore, derive_subjects
from .search import select_subject, search, search_all
from .export import build_sheet, build_single, build_all, workbook_bytes
from .models import ExportSheet, ExportArtifact, Outcome
from .session import AttendanceSession

__all__ = [
    "load_enrollment",
    "read_rows",
    "check_extension",
    "normalize_header",
    "build_header_map",
    "normalize_row",
    "missing_columns",
    "validate_columns",
    "RecordStore",
    "derive_subjects",
    "select_subject",
    "search",
    "search_all",
    "build_sheet",
    "build_single",
    "build_all",
    "workbook_bytes",
    "ExportSheet",
    "ExportArtifact",
    "Outcome",
    "AttendanceSession",
]
