# app/services/truck_identity.py
"""
Truck identifier normalization.

Operators type truck identifiers freely: "170", "TR170", "tr170-2", "gap",
"end". Everything that compares trucks (automation triggers, subscriptions,
notification labels) goes through normalize() first so the three spellings
of the same tractor/trailer agree.

    normalize("TR170-1")  -> TruckIdentity(base="170", slot=1)
    normalize("170")      -> TruckIdentity(base="170", slot=None)
    normalize("GAP")      -> TruckIdentity(base="gap", slot=None)
"""

import re
from dataclasses import dataclass
from typing import Optional

END_MARKER = "end"
SENTINELS = {END_MARKER, "gap", "cpu"}

_PREFIX_RE = re.compile(r"^tr", re.IGNORECASE)
_SLOT_RE = re.compile(r"^(\d+)-(\d+)$")


@dataclass(frozen=True)
class TruckIdentity:
    base: str                    # lowercase, TR prefix stripped, never None
    slot: Optional[int] = None   # trailer position, only for "<base>-<slot>" input

    @property
    def is_trailer_specific(self) -> bool:
        return self.slot is not None

    @property
    def key(self) -> str:
        """Canonical comparable form: "170" or "170-2"."""
        return f"{self.base}-{self.slot}" if self.slot is not None else self.base

    @property
    def label(self) -> str:
        """Display label used in notifications: "TR170" / "TR170 (trailer 2)"."""
        text = f"TR{self.base}"
        if self.slot is not None:
            text += f" (trailer {self.slot})"
        return text


def strip_prefix(raw: Optional[str]) -> str:
    """Drop surrounding whitespace and a leading TR/tr display prefix."""
    return _PREFIX_RE.sub("", (raw or "").strip(), count=1)


def normalize(raw: Optional[str]) -> TruckIdentity:
    """Total, side-effect free. Empty / None input gives base=""."""
    remainder = strip_prefix(raw).lower()
    m = _SLOT_RE.match(remainder)
    if m:
        return TruckIdentity(base=m.group(1), slot=int(m.group(2)))
    return TruckIdentity(base=remainder)


def is_sentinel(raw: Optional[str]) -> bool:
    """True for placeholder rows ("end", "gap", "cpu") that are not real trucks."""
    return (raw or "").strip().lower() in SENTINELS


def is_end_marker_text(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() == END_MARKER


def same_truck(a: Optional[str], b: Optional[str]) -> bool:
    return normalize(a) == normalize(b)
