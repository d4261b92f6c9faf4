from datetime import datetime, timedelta, timezone

from core.domain import Location, ObservationType, Report, ReportCategory, to_iso

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_report(
    report_id,
    lat,
    lon,
    category=ReportCategory.ATM,
    age=timedelta(0),
    confidence=None,
    now=NOW,
):
    return Report(
        id=report_id,
        location=Location(lat, lon),
        category=category,
        observation_type=ObservationType.OVERLAY,
        timestamp=to_iso(now - age),
        confidence_score=confidence,
    )
