"""Error taxonomy for the enrollment pipeline.

Every error is a recoverable, user-facing condition. Each carries a
``kind`` (stable identifier), a human ``title``/``message`` pair and a
``detail`` payload so the presentation layer can render it without
parsing strings.

Example:
    try:
        rows = load_enrollment(name, data)
    except AttendanceError as e:
        outcome = e.to_outcome()
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional


class AttendanceError(Exception):
    """Base exception for all enrollment/attendance errors."""

    kind = "AttendanceError"
    title = "Something went wrong"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail: Dict[str, Any] = dict(detail or {})

    def to_outcome(self):
        from .models import Outcome

        return Outcome(
            ok=False,
            kind=self.kind,
            title=self.title,
            message=self.message,
            detail=self.detail,
        )


class InvalidFileFormat(AttendanceError):
    """Uploaded file is not .xlsx / .xls; rejected before any parse attempt."""

    kind = "InvalidFileFormat"
    title = "Invalid file format"

    def __init__(self, file_name: str):
        super().__init__(
            "Please upload an Excel file (.xlsx or .xls)",
            {"file_name": file_name},
        )


class ParseFailure(AttendanceError):
    """Bytes could not be read as a spreadsheet."""

    kind = "ParseFailure"
    title = "Error reading file"

    def __init__(self, file_name: str, reason: str = ""):
        super().__init__(
            "Please ensure the file is a valid Excel format",
            {"file_name": file_name, "reason": reason},
        )


class SchemaValidationFailed(AttendanceError):
    """Required columns are missing from the first row."""

    kind = "SchemaValidationFailed"
    title = "Missing columns"

    def __init__(self, missing: List[str], available: List[str]):
        super().__init__(
            f"Missing: {', '.join(missing)}. Available: {', '.join(available)}",
            {"missing": list(missing), "available": list(available)},
        )
        self.missing = list(missing)
        self.available = list(available)


class EmptyExportSet(AttendanceError):
    """Export requested with zero records."""

    kind = "EmptyExportSet"
    title = "No data to export"

    def __init__(self, message: str = "There are no records to export", title: Optional[str] = None):
        super().__init__(message)
        if title:
            self.title = title


class DuplicateSheetName(AttendanceError):
    """Two or more subjects map to the same sheet name after truncation/stripping."""

    kind = "DuplicateSheetName"
    title = "Duplicate sheet names"

    def __init__(self, collisions: Dict[str, List[str]]):
        parts = [f"'{name}' <- {', '.join(subs)}" for name, subs in collisions.items()]
        super().__init__(
            "Several subjects produce the same sheet name: " + "; ".join(parts),
            {"collisions": {k: list(v) for k, v in collisions.items()}},
        )
        self.collisions = collisions
