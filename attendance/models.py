"""Pydantic models for export artifacts and operation outcomes."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

EnrollmentRecord = Dict[str, str]

# Output columns of every attendance sheet, in order
EXPORT_COLUMNS: List[str] = [
    "Course",
    "Reference",
    "First Name",
    "Last Name",
    "Email",
    "Alternative Email",
    "Mobile",
    "Subject",
    "Present",
    "Absent",
    "Notes",
]


class ExportSheet(BaseModel):
    """One named page of an export workbook."""

    name: str  # <= 31 chars, letters/digits/spaces for multi-sheet exports
    rows: List[Dict[str, str]] = Field(default_factory=list)


class ExportArtifact(BaseModel):
    """A workbook ready for download: suggested file name plus its sheets."""

    file_name: str
    sheets: List[ExportSheet]

    @property
    def row_count(self) -> int:
        return sum(len(s.rows) for s in self.sheets)

    def to_bytes(self) -> bytes:
        from .export import workbook_bytes

        return workbook_bytes(self)


class Outcome(BaseModel):
    """Structured result of a user-facing operation.

    The presentation layer decides how to show it (toast, banner, ...);
    the core never notifies the user itself.
    """

    ok: bool
    title: str
    message: str = ""
    kind: Optional[str] = None  # error kind when ok is False
    detail: Dict[str, Any] = Field(default_factory=dict)
    artifact: Optional[ExportArtifact] = None
