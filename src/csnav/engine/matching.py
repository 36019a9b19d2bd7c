"""Symbol equivalence and name matching shared by every query."""

from __future__ import annotations

from typing import Optional, Tuple

from ..frontend.symbols import Symbol

ATTRIBUTE_SUFFIX = "Attribute"


def symbols_match(target: Optional[Symbol], candidate: Optional[Symbol]) -> bool:
    """True when both handles denote the same declared entity.

    Compares original definitions by identity first. Symbols bound by
    different compilations are distinct objects for the same declaration,
    so the fully qualified display string is the fallback.
    """
    if target is None or candidate is None:
        return False
    target_def = target.original_definition
    candidate_def = candidate.original_definition
    if target_def is candidate_def:
        return True
    return target_def.display_string() == candidate_def.display_string()


def split_member_query(query: str) -> Tuple[str, Optional[str]]:
    """Split ``Type.Member`` into (member, type). A bare name has no type."""
    parts = query.split(".")
    member = parts[-1]
    containing = parts[-2] if len(parts) > 1 else None
    return member, containing


def same_name(left: Optional[str], right: Optional[str]) -> bool:
    if left is None or right is None:
        return False
    return left.lower() == right.lower()


def contains_ignore_case(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def attribute_forms(attribute_name: str) -> Tuple[str, str]:
    """(as given, short form without the ``Attribute`` suffix)."""
    if attribute_name.lower().endswith(ATTRIBUTE_SUFFIX.lower()):
        return attribute_name, attribute_name[: -len(ATTRIBUTE_SUFFIX)]
    return attribute_name, attribute_name


def attribute_name_matches(written: str, attribute_name: str) -> bool:
    """Match a written attribute name against a query, whole or as the last dotted segment."""
    written = written.lower()
    for form in attribute_forms(attribute_name):
        form = form.lower()
        if written == form or written.endswith("." + form):
            return True
    return False
