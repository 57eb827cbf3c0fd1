from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from acadsched.services.naming import SubjectKind, normalize_token, parse_subject_name

SLOTS_PER_UNIT = 2
MIN_SLOTS = 2
DEFAULT_SUBJECT_SLOTS = 4


@dataclass(frozen=True)
class SubjectMeta:
    name: str
    lec_units: float = 0
    lab_units: float = 0
    is_computer_lab: bool = False
    kind: SubjectKind | None = None

    @property
    def is_lab_session(self) -> bool:
        if self.kind == "LAB":
            return True
        if self.kind == "LEC":
            return False
        return self.is_computer_lab and self.lab_units > 0


def slots_for(meta: SubjectMeta) -> int:
    """Number of half-hour slots a placement of ``meta`` occupies.

    One unit is one hour (two slots). A ``LEC``/``LAB`` marker schedules only
    that half of the course; otherwise lab units count only for computer-lab
    courses. Never less than one hour, even for zero units.
    """
    if meta.kind == "LEC":
        total = meta.lec_units * SLOTS_PER_UNIT
    elif meta.kind == "LAB":
        total = meta.lab_units * SLOTS_PER_UNIT
    else:
        total = meta.lec_units * SLOTS_PER_UNIT
        if meta.is_computer_lab:
            total += meta.lab_units * SLOTS_PER_UNIT
    return max(MIN_SLOTS, int(total))


def _as_units(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _as_flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"yes", "true", "1", "y"}


def record_name(record: Mapping) -> str:
    return str(record.get("name") or record.get("courseName") or record.get("courseCode") or "")


class SubjectCatalog:
    """Curriculum subject records looked up by placeable subject name.

    A curriculum lists ``"WEB DEV (LEC)"`` and ``"WEB DEV (LAB)"`` as separate
    placeable subjects backed by one course record; the marker decides which
    half of the units a placement uses.
    """

    def __init__(self, records: Iterable[Mapping] = (), default_slots: int = DEFAULT_SUBJECT_SLOTS) -> None:
        self.default_slots = default_slots
        self._records: dict[str, Mapping] = {}
        self._names: list[str] = []
        for record in records:
            name = record_name(record)
            if not name:
                continue
            self._names.append(name)
            self._records.setdefault(normalize_token(parse_subject_name(name).base), record)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def meta_for(self, subject_name: str) -> SubjectMeta | None:
        parsed = parse_subject_name(subject_name)
        record = self._records.get(normalize_token(parsed.base))
        if record is None:
            return None
        lec = _as_units(record.get("lec", record.get("lecUnits")))
        lab = _as_units(record.get("lab", record.get("labUnits")))
        if parsed.kind == "LEC":
            lab = 0
        elif parsed.kind == "LAB":
            lec = 0
        return SubjectMeta(
            name=subject_name,
            lec_units=lec,
            lab_units=lab,
            is_computer_lab=_as_flag(record.get("compLab", record.get("isComputerLab"))),
            kind=parsed.kind,
        )

    def slots_for_subject(self, subject_name: str) -> int:
        meta = self.meta_for(subject_name)
        if meta is None:
            # No curriculum record at all: fall back to a two-hour block.
            return max(MIN_SLOTS, self.default_slots)
        return slots_for(meta)
