from __future__ import annotations
from typing import Mapping, Sequence, Tuple, TypeVar

R = TypeVar("R", bound=Mapping[str, str])

# fields the enrollment lookup looks at
LOOKUP_FIELDS = ("client_first_name", "client_last_name", "client_ref_external")


def select_subject(table: Sequence[R], subject: str) -> Tuple[R, ...]:
    # exact, case-sensitive match on unit_desc; table order kept
    return tuple(r for r in table if r.get("unit_desc") == subject)


def _contains(value, needle: str) -> bool:
    if value is None:
        return False
    return needle in str(value).lower()


def search(base: Sequence[R], term: str) -> Tuple[R, ...]:
    """
    Free-text filter over every field of every record in `base`.
    Blank term -> `base` as is. The term itself is not trimmed for matching.
    """
    if not term or not term.strip():
        return tuple(base)
    needle = term.lower()
    return tuple(r for r in base if any(_contains(v, needle) for v in r.values()))


def search_all(table: Sequence[R], term: str) -> Tuple[R, ...]:
    # Enrollment lookup over the whole table: first name, last name, reference only.
    # Blank term -> nothing.
    if not term or not term.strip():
        return ()
    needle = term.lower()
    return tuple(r for r in table if any(_contains(r.get(f), needle) for f in LOOKUP_FIELDS))
