from __future__ import annotations
import streamlit as st
import pandas as pd
from attendance.config import get_config
from attendance.logging import setup_logging
from attendance.models import Outcome
from attendance.session import AttendanceSession

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

TABLE_COLUMNS = {
    "client_ref_external": "Reference",
    "client_first_name": "First Name",
    "client_last_name": "Last Name",
    "client_email": "Email",
    "client_mobile": "Mobile",
    "course_offer_desc": "Course",
    "unit_desc": "Subject",
}

cfg = get_config()
setup_logging(json_output=cfg.log_json, log_level=cfg.log_level)

st.set_page_config(page_title="Attendance Manager", layout="wide")
st.title("Attendance Manager")
st.caption("Generate subject-wise attendance lists from enrollment data")
# =========================

# Helpers
# =========================
def _show(outcome: Outcome) -> None:
    text = f"**{outcome.title}** - {outcome.message}" if outcome.message else f"**{outcome.title}**"
    if outcome.ok:
        st.success(text)
    else:
        st.error(text)


def _table(records) -> None:
    df = pd.DataFrame(list(records))
    cols = [c for c in TABLE_COLUMNS if c in df.columns]
    st.dataframe(df[cols].rename(columns=TABLE_COLUMNS), width="stretch", hide_index=True)


def _download(outcome: Outcome, label: str, key: str) -> None:
    if not outcome.ok or outcome.artifact is None:
        _show(outcome)
        return
    st.download_button(
        label,
        data=outcome.artifact.to_bytes(),
        file_name=outcome.artifact.file_name,
        mime=XLSX_MIME,
        key=key,
    )


if "session" not in st.session_state:
    st.session_state["session"] = AttendanceSession()
session: AttendanceSession = st.session_state["session"]
# =========================

# Upload
# =========================
st.subheader("Upload Enrollment File")
upload = st.file_uploader(
    "Upload an Excel file containing enrollment data with student information",
    type=["xlsx", "xls"],
    accept_multiple_files=False,
)

if upload is not None and st.session_state.get("last_upload_id") != upload.file_id:
    st.session_state["last_upload_id"] = upload.file_id
    st.session_state["upload_outcome"] = session.upload(upload.name, upload.getvalue())
    st.session_state.pop("all_outcome", None)
    st.session_state.pop("single_outcome", None)

if st.session_state.get("upload_outcome") is not None:
    _show(st.session_state["upload_outcome"])

subjects = list(session.store.subjects())

if subjects:
    if st.button("Generate Attendance List", type="primary"):
        st.session_state["all_outcome"] = session.export_all()
    if st.session_state.get("all_outcome") is not None:
        _download(st.session_state["all_outcome"], "Download all attendance lists", key="dl_all")
# =========================

# Check student enrollment
# =========================
if not session.store.is_empty:
    st.subheader("Check Student Enrollment")
    term = st.text_input("Search by first name, last name, or reference...", value=session.enrollment_term)
    results = session.search_enrollment(term)
    if results:
        st.caption(f"{len(results)} found")
        _table(results)
    elif term:
        st.info(f'No students found matching "{term}"')
# =========================

# Subject selection + list
# =========================
if subjects:
    st.subheader(f"Select Subject ({len(subjects)} available)")
    options = [""] + subjects
    current = session.selected_subject if session.selected_subject in subjects else ""
    choice = st.selectbox(
        "Available subjects",
        options,
        index=options.index(current),
        format_func=lambda s: s or "Select a subject...",
    )
    if choice != session.selected_subject:
        if choice:
            session.select_subject(choice)
        else:
            session.clear_subject()
        st.session_state["subject_query"] = ""
        st.session_state.pop("single_outcome", None)

    if session.selected_subject:
        q = st.text_input("Search by name, email, or reference...", key="subject_query")
        filtered = session.search(q)

        st.subheader(f"Attendance List - {session.selected_subject} ({len(filtered)} students)")
        if filtered:
            _table(filtered)
        else:
            st.info("No students found")

        if st.button("Export List"):
            st.session_state["single_outcome"] = session.export_selected()
        if st.session_state.get("single_outcome") is not None:
            _download(st.session_state["single_outcome"], "Download attendance list", key="dl_single")
else:
    st.subheader("Getting Started")
    st.markdown(
        """
**Upload your enrollment Excel file** - make sure it contains the following columns:
- `unit desc` - Subject/Unit descriptions
- `course offer desc` - Course information
- `client refexternal` - Student reference
- `client first name` - Student first name
- `client last name` - Student last name
- `client email` - Primary email
- `client alternative email` - Secondary email
- `client mobile` - Mobile number

**Select a subject** from the dropdown to filter students.

**Export attendance lists** for printing or digital use.
"""
    )
