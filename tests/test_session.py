from datetime import date
from io import BytesIO

from openpyxl import load_workbook

from attendance.session import AttendanceSession

from conftest import HEADERS, make_xlsx

DAY = date(2024, 3, 5)

ROWS = [
    ["Math", "Diploma of IT", "1001", "Ada", "Lovelace", "ada@example.com"],
    ["Science", "Diploma of IT", "1002", "Grace", "Hopper", "grace@example.com"],
    ["Math", "Diploma of IT", "1003", "Alan", "Turing", "alan@example.com"],
    ["Math", "Cert IV", "1004", "Donald", "Knuth", "don@example.com"],
    ["Science", "Cert IV", "1005", "Barbara", "Liskov", "barbara@example.com"],
]


def _loaded():
    s = AttendanceSession()
    outcome = s.upload("enrolments.xlsx", make_xlsx([HEADERS] + ROWS))
    assert outcome.ok
    return s


def test_upload_single_row():
    s = AttendanceSession()
    outcome = s.upload("e.xlsx", make_xlsx([HEADERS, ["Networking 1", "Diploma", "R1", "Ada", "L", "a@x.org"]]))
    assert outcome.ok
    assert outcome.title == "File uploaded successfully"
    assert outcome.message == "Loaded 1 records with 1 subjects"
    assert len(s.store) == 1
    assert s.store.subjects() == ("Networking 1",)
    assert s.file_name == "e.xlsx"


def test_failed_upload_keeps_previous_table():
    s = _loaded()
    before = s.store.all_records()

    bad = make_xlsx([HEADERS[:-1], ["Art", "Diploma", "R9", "Zed", "Z"]])
    outcome = s.upload("other.xlsx", bad)
    assert not outcome.ok
    assert outcome.kind == "SchemaValidationFailed"
    assert outcome.detail["missing"] == ["client email"]
    assert outcome.detail["available"] == HEADERS[:-1]
    assert s.store.all_records() is before
    assert s.file_name == "enrolments.xlsx"


def test_invalid_format_and_parse_failure_outcomes():
    s = _loaded()
    bad_ext = s.upload("roster.csv", b"a,b")
    assert (bad_ext.ok, bad_ext.kind, bad_ext.title) == (False, "InvalidFileFormat", "Invalid file format")

    broken = s.upload("roster.xlsx", b"garbage")
    assert (broken.ok, broken.kind) == (False, "ParseFailure")
    assert len(s.store) == len(ROWS)


def test_empty_upload_clears_table():
    s = _loaded()
    outcome = s.upload("empty.xlsx", make_xlsx([HEADERS]))
    assert outcome.ok
    assert outcome.message == "Loaded 0 records with 0 subjects"
    assert s.store.is_empty
    assert s.store.subjects() == ()


def test_new_upload_resets_selection():
    s = _loaded()
    s.select_subject("Math")
    s.search("ada")
    s.upload("again.xlsx", make_xlsx([HEADERS] + ROWS[:2]))
    assert s.selected_subject == ""
    assert s.search_term == ""
    assert s.filtered == ()


def test_select_subject_resets_search():
    s = _loaded()
    s.select_subject("Math")
    assert len(s.search("turing")) == 1
    got = s.select_subject("Science")
    assert s.search_term == ""
    assert [r["client_ref_external"] for r in got] == ["1002", "1005"]


def test_search_within_subject():
    s = _loaded()
    s.select_subject("Math")
    assert [r["client_ref_external"] for r in s.search("cert")] == ["1004"]
    assert len(s.search("   ")) == 3
    # Science records never match while Math is selected
    assert s.search("hopper") == ()


def test_search_without_subject_keeps_current_list():
    s = _loaded()
    assert s.search("ada") == ()
    assert s.search_term == "ada"


def test_search_enrollment_spans_all_subjects():
    s = _loaded()
    s.select_subject("Science")
    got = s.search_enrollment("a")
    # first/last name or reference only
    assert [r["client_ref_external"] for r in got] == ["1001", "1002", "1003", "1004", "1005"]
    assert [r["client_ref_external"] for r in s.search_enrollment("KNU")] == ["1004"]
    assert s.search_enrollment("example.com") == ()
    assert s.search_enrollment("") == ()


def test_export_selected_without_subject():
    s = _loaded()
    outcome = s.export_selected(DAY)
    assert not outcome.ok
    assert outcome.kind == "EmptyExportSet"
    assert outcome.title == "No data to export"
    assert outcome.message == "Please select a subject first"
    assert outcome.artifact is None


def test_export_selected_uses_current_filter():
    s = _loaded()
    s.select_subject("Math")
    s.search("diploma")
    outcome = s.export_selected(DAY)
    assert outcome.ok
    assert outcome.title == "Attendance list exported"
    assert outcome.message == "Downloaded Attendance_Math_2024-03-05.xlsx"
    assert outcome.artifact.row_count == 2


def test_export_all():
    s = _loaded()
    outcome = s.export_all(DAY)
    assert outcome.ok
    assert outcome.message == "Downloaded All_Attendance_Lists_2024-03-05.xlsx with 2 sheets"
    wb = load_workbook(BytesIO(outcome.artifact.to_bytes()))
    assert wb.sheetnames == ["Math", "Science"]
    assert wb["Math"].max_row == 4
    assert wb["Science"].max_row == 3


def test_export_all_before_upload():
    outcome = AttendanceSession().export_all(DAY)
    assert (outcome.ok, outcome.kind, outcome.title) == (False, "EmptyExportSet", "No data available")


def test_clear_subject_drops_selection():
    s = _loaded()
    s.select_subject("Math")
    s.search("ada")
    s.clear_subject()
    assert s.selected_subject == ""
    assert s.search_term == ""
    assert s.filtered == ()
    assert s.export_selected(DAY).kind == "EmptyExportSet"
