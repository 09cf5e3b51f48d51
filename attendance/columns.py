from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping

from .errors import SchemaValidationFailed
from .utils import norm_header

# header (after trim + lower) -> canonical field
REQUIRED_HEADERS: Dict[str, str] = {
    "unit desc": "unit_desc",
    "course offer desc": "course_offer_desc",
    "client refexternal": "client_ref_external",
    "client first name": "client_first_name",
    "client last name": "client_last_name",
    "client email": "client_email",
}

OPTIONAL_HEADERS: Dict[str, str] = {
    "client alternative email": "client_alternative_email",
    "client mobile": "client_mobile",
}

KNOWN_HEADERS: Dict[str, str] = {**REQUIRED_HEADERS, **OPTIONAL_HEADERS}

REQUIRED_FIELDS: List[str] = list(REQUIRED_HEADERS.values())

# canonical names are accepted as headers too ("unit_desc" -> "unit_desc")
_ALIASES: Dict[str, str] = {**KNOWN_HEADERS, **{c: c for c in KNOWN_HEADERS.values()}}


def normalize_header(header: Any) -> str:
    # Exact match on the trimmed lowercase form; anything else is returned untouched
    canon = _ALIASES.get(norm_header(header))
    if canon is not None:
        return canon
    return header if isinstance(header, str) else str(header)


def _free_key(base: str, taken) -> str:
    # "unit_desc" -> "unit_desc_1", "unit_desc_2", ... (same scheme as repeated raw headers)
    n = 1
    name = f"{base}_{n}"
    while name in taken:
        n += 1
        name = f"{base}_{n}"
    return name


def build_header_map(headers: Iterable[Any]) -> Dict[str, str]:
    """
    Maps every raw header to its output key, once per upload.
    Two raw headers normalizing to the same field: the left-most one gets the
    canonical name, the rest keep their raw header. A later header that is
    spelled exactly like the claimed canonical name gets a suffix instead.
    """
    raws = [h if isinstance(h, str) else str(h) for h in headers]
    out: Dict[str, str] = {}
    claimed = set()
    taken = set(raws)
    for raw in raws:
        if raw in out:
            continue
        target = normalize_header(raw)
        if target in KNOWN_HEADERS.values():
            if target in claimed:
                target = raw if raw not in claimed else _free_key(raw, taken)
            else:
                claimed.add(target)
        taken.add(target)
        out[raw] = target
    return out


def normalize_row(row: Mapping[str, Any], header_map: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in row.items():
        key = header_map.get(k)
        if key is None:
            key = normalize_header(k)
            if key in out:
                key = k if k not in out else _free_key(k, set(out) | set(row))
        out[key] = v
    return out


def normalize_rows(rows: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    if not rows:
        return []
    header_map = build_header_map(rows[0].keys())
    return [normalize_row(r, header_map) for r in rows]


def missing_columns(headers: Iterable[Any]) -> List[str]:
    # required headers (in declared order) not present among the given raw headers
    present = {normalize_header(h) for h in headers}
    return [h for h, canon in REQUIRED_HEADERS.items() if canon not in present]


def validate_columns(rows: List[Mapping[str, Any]]) -> None:
    # Checks the first row only; zero rows is not an error
    if not rows:
        return
    first = rows[0]
    missing = missing_columns(first.keys())
    if missing:
        raise SchemaValidationFailed(missing, [str(k) for k in first.keys()])
