from collections import Counter
from datetime import datetime
from typing import List

from core.domain import EvaluationResult, Location, Report, age_ms, to_iso, utc_now
from core.geo import site_key

CONFIRM_THRESHOLD = 4
RECENT_WINDOW_MS = 7 * 86_400_000
CONFIRM_REASON = "Confirmed by multiple independent reports"


def reports_at_site(all_reports: List[Report], location: Location) -> List[Report]:
    key = site_key(location)
    return [r for r in all_reports if site_key(r.location) == key]


def evaluate_reports_at_location(
    all_reports: List[Report],
    location: Location,
    now: datetime | None = None,
) -> EvaluationResult:
    """
    Corroboration score for one site (locations equal after rounding to 4 decimals).

    +1 per report at the site (no reporter identity, so each report counts as a reporter),
    +1 when at least two of them are younger than seven days,
    +2 when at least two share a category.
    A trusted-reporter bonus is not scored until reporters exist in the data model.
    """
    now = now or utc_now()
    group = reports_at_site(all_reports, location)

    score = len(group)

    recent = sum(1 for r in group if age_ms(r.timestamp, now) < RECENT_WINDOW_MS)
    if recent >= 2:
        score += 1

    by_category = Counter(r.category for r in group)
    if max(by_category.values(), default=0) >= 2:
        score += 2

    confirm = score >= CONFIRM_THRESHOLD
    return EvaluationResult(
        score=score,
        confirm=confirm,
        reason=CONFIRM_REASON if confirm else None,
        evaluated_at=to_iso(now),
    )
