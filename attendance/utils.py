from __future__ import annotations
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # NBSP variants


def norm_header(s: Any) -> str:
    """
    Header matching key:
    - BOM removed
    - non-breaking spaces -> ordinary spaces
    - leading/trailing whitespace stripped
    - lower
    Inner whitespace is kept as is: "client  email" does not match "client email".
    """
    if s is None:
        return ""
    s = str(s).replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    return s.strip().lower()


def cell_text(v: Any) -> str:
    # Excel cell (str | int | float | bool | date | None) -> str
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, float):
        if math.isnan(v):
            return ""
        if v.is_integer():
            return str(int(v))
        return repr(v)

    # pandas.Timestamp / datetime.datetime / datetime.date
    if isinstance(v, datetime):
        if str(v) == "NaT":
            return ""
        if (v.hour, v.minute, v.second, v.microsecond) == (0, 0, 0, 0):
            return f"{int(v.year):04d}-{int(v.month):02d}-{int(v.day):02d}"
        return v.isoformat()
    if isinstance(v, date):
        return v.isoformat()

    s = str(v)
    # pandas NaT/NA
    if s in ("NaT", "<NA>", "nan"):
        return ""
    return s


def iso_today(today: Optional[date] = None) -> str:
    # ISO date for file names; UTC, like a browser's toISOString()
    if today is None:
        today = datetime.now(timezone.utc).date()
    return today.isoformat()
