"""Tolerance rules for leaf-to-frame gap measurements.

Each gap role has an allowed clearance in millimetres. A measurement that is
None has not been taken yet and is neither a pass nor a fail; whether it is
required is decided separately by the required-field check.
"""
import enum
from dataclasses import dataclass
from typing import List, Optional
from shared.enums import DoorType


class GapRole(str, enum.Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT_SIDE = "leftSide"
    RIGHT_SIDE = "rightSide"
    IN_BETWEEN = "inBetween"
    PROTRUSION = "protrusion"


class GapVerdict(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    NOT_EVALUATED = "not_evaluated"


@dataclass(frozen=True)
class GapRule:
    """Inclusive bounds for one gap role; None means unbounded on that side."""
    minimum: Optional[float]
    maximum: Optional[float]

    def allows(self, value: float) -> bool:
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True

    def describe(self, label: str) -> str:
        """Failure explanation for a measurement outside these bounds."""
        if self.minimum is None:
            return f"{label} exceeds {self.maximum:g}mm"
        return f"{label} not between {self.minimum:g}mm and {self.maximum:g}mm"


# The in-between gap used [3, 4] in an earlier revision of the form
GAP_RULES = {
    GapRole.TOP: GapRule(minimum=None, maximum=3),
    GapRole.LEFT_SIDE: GapRule(minimum=None, maximum=3),
    GapRole.RIGHT_SIDE: GapRule(minimum=None, maximum=3),
    GapRole.BOTTOM: GapRule(minimum=3, maximum=10),
    GapRole.IN_BETWEEN: GapRule(minimum=3, maximum=10),
    GapRole.PROTRUSION: GapRule(minimum=None, maximum=1),
}


def check_gap(role, value: Optional[float]) -> GapVerdict:
    """Decide whether one measurement is within tolerance for its role."""
    if value is None:
        return GapVerdict.NOT_EVALUATED
    rule = GAP_RULES[GapRole(role)]
    return GapVerdict.PASS if rule.allows(value) else GapVerdict.FAIL


@dataclass(frozen=True)
class GapCheck:
    """A single evaluated measurement."""
    label: str
    role: GapRole
    value: Optional[float]
    verdict: GapVerdict

    @property
    def failed(self) -> bool:
        return self.verdict == GapVerdict.FAIL

    @property
    def message(self) -> Optional[str]:
        if not self.failed:
            return None
        return GAP_RULES[self.role].describe(self.label)


def _measurements(gaps, door_type):
    """(label, role, value) for every measurement that applies to the door type."""
    yield "Top gap", GapRole.TOP, gaps.top
    yield "Bottom gap", GapRole.BOTTOM, gaps.bottom
    yield "Left side gap", GapRole.LEFT_SIDE, gaps.left_side
    yield "Right side gap", GapRole.RIGHT_SIDE, gaps.right_side
    if door_type == DoorType.DOUBLE:
        yield "In-between gap", GapRole.IN_BETWEEN, gaps.in_between
        yield "Left door top gap", GapRole.TOP, gaps.left_door.top
        yield "Left door bottom gap", GapRole.BOTTOM, gaps.left_door.bottom
        yield "Right door top gap", GapRole.TOP, gaps.right_door.top
        yield "Right door bottom gap", GapRole.BOTTOM, gaps.right_door.bottom
    yield "Protrusion", GapRole.PROTRUSION, gaps.protrusion


def evaluate_gaps(gaps, door_type=None) -> List[GapCheck]:
    """Check every measurement in a Gaps section.

    Double-door measurements (in-between and per-leaf top/bottom) are only
    checked when door_type is double.
    """
    return [
        GapCheck(label=label, role=role, value=value, verdict=check_gap(role, value))
        for label, role, value in _measurements(gaps, door_type)
    ]
