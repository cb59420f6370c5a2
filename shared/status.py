"""PASS/FAIL verdict for a survey record."""
from dataclasses import dataclass, field
from typing import List
from shared.enums import CRITICAL_INSPECTION_ITEMS, INSPECTION_ITEM_LABELS
from shared.gap_rules import evaluate_gaps


@dataclass(frozen=True)
class SurveyStatusResult:
    passed: bool
    failures: List[str] = field(default_factory=list)


def get_survey_status(record) -> SurveyStatusResult:
    """Score a record against gap tolerances and critical checklist items.

    Gap failures are listed first, in measurement order, followed by one
    line per critical inspection item that has defect tags recorded, e.g.
    "Door Leaf issues: Chipped, Cracked". Unmeasured gaps are skipped.
    Vision panel defects, materials and the checklist flags (slow closing,
    rattling, signage) are recorded on the survey but do not fail it.

    Completeness is not checked here; run validate_required_fields first.
    """
    failures = [check.message for check in evaluate_gaps(record.gaps, record.door_type) if check.failed]

    for name in CRITICAL_INSPECTION_ITEMS:
        item = record.inspection.item(name)
        if item.has_issues:
            failures.append(f"{INSPECTION_ITEM_LABELS[name]} issues: {', '.join(item.status)}")

    return SurveyStatusResult(passed=not failures, failures=failures)
