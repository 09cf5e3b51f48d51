from __future__ import annotations
from io import BytesIO
from typing import List, Dict, Any
import pandas as pd
from openpyxl import load_workbook

from .columns import normalize_rows, validate_columns
from .errors import InvalidFileFormat, ParseFailure
from .logging import get_logger
from .utils import cell_text

log = get_logger(__name__)

ACCEPTED_EXTENSIONS = (".xlsx", ".xls")
# xlsx is a zip container; anything else goes to xlrd (BIFF)
_ZIP_MAGIC = b"PK\x03\x04"
# =========================

# Excel: first sheet as a matrix, merged cells expanded
# =========================
def _sheet_to_matrix_with_merged(wb_bytes: bytes) -> List[List[Any]]:
    wb = load_workbook(BytesIO(wb_bytes), read_only=False, data_only=True)
    ws = wb.worksheets[0]
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    max_r = ws.max_row
    max_c = ws.max_column

    for r in range(1, max_r + 1):
        row_vals = []
        for c in range(1, max_c + 1):
            v = ws.cell(r, c).value
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(v)
        rows.append(row_vals)

    return rows


def _legacy_sheet_to_matrix(wb_bytes: bytes) -> List[List[Any]]:
    # BIFF (.xls) - openpyxl can't read it, pandas + xlrd can
    df = pd.read_excel(BytesIO(wb_bytes), sheet_name=0, header=None, dtype=object, engine="xlrd")
    return df.astype(object).where(df.notna(), None).values.tolist()
# =========================

# Matrix -> header + rows
# =========================
def _is_blank_row(row: List[Any]) -> bool:
    return all(cell_text(v).strip() == "" for v in row)


def _unique_headers(header_row: List[Any]) -> List[str]:
    # empty header cells -> __EMPTY, __EMPTY_1, ...; repeated text -> "X", "X_1", ...
    out: List[str] = []
    used = set()
    counters: Dict[str, int] = {}
    for v in header_row:
        base = cell_text(v)
        if base.strip() == "":
            base = "__EMPTY"
        name = base
        n = counters.get(base, 0)
        while name in used:
            n += 1
            name = f"{base}_{n}"
        counters[base] = n
        used.add(name)
        out.append(name)
    return out


def matrix_to_rows(matrix: List[List[Any]]) -> List[Dict[str, str]]:
    """
    The first non-blank row is the header row.
    Blank data rows are skipped; every row gets every header (missing cells -> "").
    Cell values are coerced to text here, nothing downstream sees raw cell types.
    """
    start = 0
    while start < len(matrix) and _is_blank_row(matrix[start]):
        start += 1
    if start >= len(matrix):
        return []

    headers = _unique_headers(matrix[start])
    rows: List[Dict[str, str]] = []
    for raw in matrix[start + 1:]:
        if _is_blank_row(raw):
            continue
        vals = list(raw) + [None] * max(0, len(headers) - len(raw))
        rows.append({h: cell_text(v) for h, v in zip(headers, vals)})
    return rows
# =========================

# Main: upload -> rows
# =========================
def check_extension(file_name: str) -> str:
    name = (file_name or "").lower()
    for ext in ACCEPTED_EXTENSIONS:
        if name.endswith(ext):
            return ext
    raise InvalidFileFormat(file_name)


def read_rows(file_name: str, data: bytes) -> List[Dict[str, str]]:
    # bytes -> ordered row mappings (raw header -> text), first sheet only
    check_extension(file_name)
    try:
        # reader picked from the content, not the extension
        if data[:4] == _ZIP_MAGIC:
            matrix = _sheet_to_matrix_with_merged(data)
        else:
            matrix = _legacy_sheet_to_matrix(data)
    except Exception as e:
        log.warning("spreadsheet_parse_failed", file_name=file_name, error=str(e))
        raise ParseFailure(file_name, reason=str(e)) from e
    return matrix_to_rows(matrix)


def load_enrollment(file_name: str, data: bytes) -> List[Dict[str, str]]:
    """
    Full ingest for one upload:
      extension check -> parse -> validate first row -> normalize every row

    Returns records keyed by canonical field names (unknown columns keep their raw header).
    Raises InvalidFileFormat / ParseFailure / SchemaValidationFailed.
    Zero data rows -> [] (not an error).
    """
    rows = read_rows(file_name, data)
    log.debug("spreadsheet_read", file_name=file_name, rows=len(rows))
    if not rows:
        return []
    validate_columns(rows)
    return normalize_rows(rows)
