from __future__ import annotations
from datetime import date
from typing import Optional, Tuple

from .errors import AttendanceError, EmptyExportSet
from .export import build_all, build_single
from .ingest import load_enrollment
from .logging import get_logger
from .models import EnrollmentRecord, Outcome
from .search import search, search_all, select_subject
from .store import RecordStore

log = get_logger(__name__)


class AttendanceSession:
    """
    State of one user's page: the loaded table plus the current subject/search.

    Operations that can fail return an Outcome; on failure nothing changes.
    """

    def __init__(self, store: Optional[RecordStore] = None) -> None:
        self.store = store or RecordStore()
        self.file_name: str = ""
        self.selected_subject: str = ""
        self.search_term: str = ""
        self.filtered: Tuple[EnrollmentRecord, ...] = ()
        self.enrollment_term: str = ""
        self.enrollment_results: Tuple[EnrollmentRecord, ...] = ()

    # ---- upload ----
    def upload(self, file_name: str, data: bytes) -> Outcome:
        try:
            records = load_enrollment(file_name, data)
        except AttendanceError as e:
            log.info("upload_rejected", file_name=file_name, kind=e.kind, detail=e.detail)
            return e.to_outcome()

        self.store.load(records)
        self.file_name = file_name
        self.selected_subject = ""
        self.search_term = ""
        self.filtered = ()
        self.enrollment_term = ""
        self.enrollment_results = ()

        n_subjects = len(self.store.subjects())
        return Outcome(
            ok=True,
            title="File uploaded successfully",
            message=f"Loaded {len(self.store)} records with {n_subjects} subjects",
            detail={"records": len(self.store), "subjects": n_subjects},
        )

    # ---- filtering ----
    def select_subject(self, subject: str) -> Tuple[EnrollmentRecord, ...]:
        self.selected_subject = subject
        self.search_term = ""
        self.filtered = select_subject(self.store.all_records(), subject)
        return self.filtered

    def clear_subject(self) -> None:
        self.selected_subject = ""
        self.search_term = ""
        self.filtered = ()

    def search(self, term: str) -> Tuple[EnrollmentRecord, ...]:
        self.search_term = term
        if not self.selected_subject:
            return self.filtered
        base = select_subject(self.store.all_records(), self.selected_subject)
        self.filtered = search(base, term)
        return self.filtered

    def search_enrollment(self, term: str) -> Tuple[EnrollmentRecord, ...]:
        self.enrollment_term = term
        self.enrollment_results = search_all(self.store.all_records(), term)
        return self.enrollment_results

    # ---- export ----
    def export_selected(self, today: Optional[date] = None) -> Outcome:
        if not self.filtered:
            return EmptyExportSet("Please select a subject first", title="No data to export").to_outcome()
        try:
            artifact = build_single(self.filtered, self.selected_subject, today)
        except AttendanceError as e:
            return e.to_outcome()
        return Outcome(
            ok=True,
            title="Attendance list exported",
            message=f"Downloaded {artifact.file_name}",
            artifact=artifact,
        )

    def export_all(self, today: Optional[date] = None) -> Outcome:
        try:
            artifact = build_all(self.store.all_records(), self.store.subjects(), today)
        except AttendanceError as e:
            return e.to_outcome()
        return Outcome(
            ok=True,
            title="All attendance lists generated",
            message=f"Downloaded {artifact.file_name} with {len(artifact.sheets)} sheets",
            artifact=artifact,
        )
