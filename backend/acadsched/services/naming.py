"""Canonical normalisation for the string identities used as join keys.

* Subject names: a trailing ``(LEC)``/``(LAB)`` marker is stripped before any
  comparison, then the text is case-folded and every non-alphanumeric
  character (spaces, dots, dashes, parentheses) is removed.
* Professor names: surrounding whitespace trimmed, inner runs collapsed.
* Room names: compared exactly.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

SubjectKind = Literal["LEC", "LAB"]

_KIND_SUFFIX = re.compile(r"^(?P<base>.*?)\(\s*(?P<kind>lec|lab)\s*\)\s*$", re.IGNORECASE)
_NON_ALNUM = re.compile(r"[^0-9a-z]+")


@dataclass(frozen=True)
class ParsedSubjectName:
    base: str
    kind: SubjectKind | None


def parse_subject_name(name: str | None) -> ParsedSubjectName:
    raw = str(name or "")
    match = _KIND_SUFFIX.match(raw)
    if match:
        return ParsedSubjectName(base=match.group("base").strip(), kind=match.group("kind").upper())
    return ParsedSubjectName(base=raw.strip(), kind=None)


def normalize_token(value: str | None) -> str:
    return _NON_ALNUM.sub("", str(value or "").casefold())


def subject_token(name: str | None) -> str:
    return normalize_token(parse_subject_name(name).base)


def normalize_professor(name: str | None) -> str:
    return " ".join(str(name or "").split())


def same_professor(left: str | None, right: str | None) -> bool:
    normalized = normalize_professor(left)
    return bool(normalized) and normalized == normalize_professor(right)
