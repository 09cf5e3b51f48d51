from __future__ import annotations
from typing import Iterable, List, Mapping, Tuple

from .logging import get_logger
from .models import EnrollmentRecord

log = get_logger(__name__)


def derive_subjects(records: Iterable[Mapping[str, str]]) -> Tuple[str, ...]:
    # distinct non-empty unit_desc values, first-occurrence order
    seen = set()
    out: List[str] = []
    for r in records:
        s = r.get("unit_desc")
        if not s or s in seen:
            continue
        seen.add(s)
        out.append(s)
    return tuple(out)


class RecordStore:
    """
    In-memory enrollment table for the current upload.

    load() replaces everything; nothing is merged or edited in place.
    Rows must already be validated and normalized (see ingest.load_enrollment).
    """

    def __init__(self) -> None:
        self._records: Tuple[EnrollmentRecord, ...] = ()
        self._subjects: Tuple[str, ...] = ()

    def load(self, rows: Iterable[Mapping[str, str]]) -> None:
        records = tuple(dict(r) for r in rows)
        self._records = records
        self._subjects = derive_subjects(records)
        log.info("enrollment_loaded", records=len(records), subjects=len(self._subjects))

    def all_records(self) -> Tuple[EnrollmentRecord, ...]:
        return self._records

    def subjects(self) -> Tuple[str, ...]:
        return self._subjects

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)
