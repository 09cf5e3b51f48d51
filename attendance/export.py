from __future__ import annotations
import re
from datetime import date
from io import BytesIO
from typing import Dict, List, Mapping, Optional, Sequence
import pandas as pd

from .config import get_config
from .errors import DuplicateSheetName, EmptyExportSet
from .logging import get_logger
from .models import EXPORT_COLUMNS, ExportArtifact, ExportSheet
from .search import select_subject
from .utils import iso_today

log = get_logger(__name__)

SHEET_NAME_MAX = 31  # Excel limit

_FILE_LABEL_RE = re.compile(r"[^A-Za-z0-9]")
_SHEET_NAME_RE = re.compile(r"[^A-Za-z0-9 ]")


def _export_row(r: Mapping[str, str]) -> Dict[str, str]:
    return {
        "Course": r.get("course_offer_desc", ""),
        "Reference": r.get("client_ref_external", ""),
        "First Name": r.get("client_first_name", ""),
        "Last Name": r.get("client_last_name", ""),
        "Email": r.get("client_email", ""),
        "Alternative Email": r.get("client_alternative_email") or "",
        "Mobile": r.get("client_mobile") or "",
        "Subject": r.get("unit_desc", ""),
        "Present": "",
        "Absent": "",
        "Notes": "",
    }


def build_sheet(records: Sequence[Mapping[str, str]], subject_label: str = "") -> List[Dict[str, str]]:
    # records -> attendance rows (fixed columns, same order)
    if not records:
        raise EmptyExportSet(f"No records to export for '{subject_label}'" if subject_label else "No records to export")
    return [_export_row(r) for r in records]


def single_file_name(subject_label: str, today: Optional[date] = None) -> str:
    ext = get_config().export_extension
    return f"Attendance_{_FILE_LABEL_RE.sub('_', subject_label)}_{iso_today(today)}.{ext}"


def all_file_name(today: Optional[date] = None) -> str:
    ext = get_config().export_extension
    return f"All_Attendance_Lists_{iso_today(today)}.{ext}"


def sheet_name_for(subject: str) -> str:
    # truncate first, then strip: the result can be shorter than 31
    return _SHEET_NAME_RE.sub("", subject[:SHEET_NAME_MAX])


def build_single(records: Sequence[Mapping[str, str]], subject_label: str, today: Optional[date] = None) -> ExportArtifact:
    rows = build_sheet(records, subject_label)
    artifact = ExportArtifact(
        file_name=single_file_name(subject_label, today),
        sheets=[ExportSheet(name=get_config().single_sheet_name, rows=rows)],
    )
    log.info("export_built", file_name=artifact.file_name, sheets=1, rows=len(rows))
    return artifact


def _check_sheet_names(subjects: Sequence[str]) -> None:
    # Excel compares sheet names case-insensitively; an empty name is invalid
    groups: Dict[str, List[str]] = {}
    display: Dict[str, str] = {}
    for s in subjects:
        name = sheet_name_for(s)
        key = name.lower()
        display.setdefault(key, name)
        groups.setdefault(key, []).append(s)

    collisions = {
        display[k]: subs for k, subs in groups.items()
        if len(subs) > 1 or k.strip() == ""
    }
    if collisions:
        log.warning("sheet_name_collision", collisions=collisions)
        raise DuplicateSheetName(collisions)


def build_all(table: Sequence[Mapping[str, str]], subjects: Sequence[str], today: Optional[date] = None) -> ExportArtifact:
    """
    One sheet per subject, in the order of `subjects`.
    Sheet rows are the table records whose unit_desc equals the subject.
    Raises EmptyExportSet for an empty table/subject list and DuplicateSheetName
    when two subjects end up with the same sheet name.
    """
    if not table or not subjects:
        raise EmptyExportSet("Please upload an enrollment file first", title="No data available")

    _check_sheet_names(subjects)

    sheets = []
    for subject in subjects:
        part = select_subject(table, subject)
        rows = [_export_row(r) for r in part]
        sheets.append(ExportSheet(name=sheet_name_for(subject), rows=rows))

    artifact = ExportArtifact(file_name=all_file_name(today), sheets=sheets)
    log.info("export_built", file_name=artifact.file_name, sheets=len(sheets), rows=artifact.row_count)
    return artifact
# =========================

# Workbook bytes
# =========================
def workbook_bytes(artifact: ExportArtifact) -> bytes:
    bio = BytesIO()

    # cell text is written as text: "=..." stays a string, not a formula
    options = {"strings_to_formulas": False, "strings_to_urls": False}

    with pd.ExcelWriter(bio, engine="xlsxwriter", engine_kwargs={"options": options}) as writer:
        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})

        def format_df_sheet(sheet_name: str, df: pd.DataFrame, default_width: int = 14, max_width: int = 40):
            ws = writer.sheets.get(sheet_name)
            if ws is None:
                return
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, max(1, len(df)), max(0, len(df.columns) - 1))
            for col, name in enumerate(df.columns):
                ws.write(0, col, name, fmt_header)
                w = max(10, min(max_width, int(len(str(name)) * 1.2) + 10))
                ws.set_column(col, col, max(default_width, w))

        for sheet in artifact.sheets:
            df = pd.DataFrame(sheet.rows, columns=EXPORT_COLUMNS)
            df.to_excel(writer, index=False, sheet_name=sheet.name)
            format_df_sheet(sheet.name, df)

    return bio.getvalue()
