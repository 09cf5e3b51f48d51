import struct
from io import BytesIO

import pytest
from openpyxl import Workbook

from attendance.config import reset_config

HEADERS = [
    "Unit Desc",
    "Course Offer Desc",
    "Client RefExternal",
    "Client First Name",
    "Client Last Name",
    "Client Email",
]


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    monkeypatch.delenv("ATTENDANCE_EXPORT_EXTENSION", raising=False)
    monkeypatch.delenv("ATTENDANCE_SINGLE_SHEET_NAME", raising=False)
    reset_config()
    yield
    reset_config()


def make_xlsx(matrix, merges=()):
    wb = Workbook()
    ws = wb.active
    ws.title = "Enrollments"
    for row in matrix:
        ws.append(row)
    for rng in merges:
        ws.merge_cells(rng)
    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


# Minimal BIFF8 (.xls) workbook stream: one sheet, LABEL and NUMBER cells.
def _biff_record(opcode, data=b""):
    return struct.pack("<HH", opcode, len(data)) + data


def _biff_bof(stream_type):
    return _biff_record(0x0809, struct.pack("<HHHHII", 0x0600, stream_type, 0x0DBB, 0x07CC, 0, 0x06))


def _biff_text(s, lenlen):
    raw = s.encode("latin-1")
    return struct.pack("<B" if lenlen == 1 else "<H", len(raw)) + b"\x00" + raw


def make_xls(matrix, sheet_name="Enrollments"):
    cells = []
    for r, row in enumerate(matrix):
        for c, v in enumerate(row):
            if v is None:
                continue
            if isinstance(v, str):
                cells.append(_biff_record(0x0204, struct.pack("<HHH", r, c, 0) + _biff_text(v, 2)))
            else:
                cells.append(_biff_record(0x0203, struct.pack("<HHHd", r, c, 0, float(v))))
    sheet = _biff_bof(0x0010) + b"".join(cells) + _biff_record(0x000A)

    head = (
        _biff_bof(0x0005)
        + _biff_record(0x0042, struct.pack("<H", 1200))  # CODEPAGE utf-16le
        + _biff_record(0x00E0, b"\x00" * 20)  # one XF, "General"
    )
    name = _biff_text(sheet_name, 1)
    # sheet BOF comes right after BOUNDSHEET + globals EOF
    offset = len(head) + (4 + 6 + len(name)) + 4
    boundsheet = _biff_record(0x0085, struct.pack("<IBB", offset, 0, 0) + name)
    return head + boundsheet + _biff_record(0x000A) + sheet


def make_record(subject="Math", ref="1001", first="Ada", last="Lovelace", **extra):
    rec = {
        "unit_desc": subject,
        "course_offer_desc": "Diploma of IT",
        "client_ref_external": ref,
        "client_first_name": first,
        "client_last_name": last,
        "client_email": f"{first.lower()}@example.com",
    }
    rec.update(extra)
    return rec


@pytest.fixture
def table():
    return (
        make_record("Math", "1001", "Ada", "Lovelace"),
        make_record("Science", "1002", "Grace", "Hopper"),
        make_record("Math", "1003", "Alan", "Turing", client_mobile="0400 000 000"),
        make_record("", "1004", "Edsger", "Dijkstra"),
        make_record("Science", "1005", "Barbara", "Liskov", client_alternative_email="bl@uni.edu"),
        make_record("Math", "1006", "Donald", "Knuth"),
    )
