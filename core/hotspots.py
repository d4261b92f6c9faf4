import logging
from datetime import datetime
from typing import List

from core.domain import Hotspot, Report, ReportCategory, age_ms, parse_timestamp, to_iso, utc_now
from core.geo import centroid, distance_m

logger = logging.getLogger(__name__)

MS_PER_DAY = 86_400_000

CATEGORY_SEVERITY = {
    ReportCategory.ATM: 1.0,
    ReportCategory.GAS_PUMP: 1.0,
    ReportCategory.STORE_POS: 0.8,
}


def decay(age: float, half_life_ms: float) -> float:
    return 0.5 ** (age / half_life_ms)


def report_weight(report: Report, now: datetime, half_life_ms: float) -> float:
    severity = CATEGORY_SEVERITY.get(report.category, 1.0)
    confidence = report.confidence_score if report.confidence_score is not None else 1.0
    return decay(age_ms(report.timestamp, now), half_life_ms) * severity * confidence


def cluster_reports(reports: List[Report], radius_meters: float = 200.0) -> List[List[Report]]:
    """
    Greedy single pass: the first unvisited report seeds a cluster and takes every
    unvisited report within radius_meters of itself. Members are never used to
    extend the cluster, so the result depends on input order.
    """
    clusters: List[List[Report]] = []
    visited = set()
    for i, seed in enumerate(reports):
        if i in visited:
            continue
        members = []
        for j, other in enumerate(reports):
            if j in visited:
                continue
            if distance_m(seed.location, other.location) <= radius_meters:
                members.append(other)
                visited.add(j)
        clusters.append(members)
    return clusters


def generate_hotspots(
    reports: List[Report],
    radius_meters: float = 200.0,
    half_life_days: float = 7.0,
    now: datetime | None = None,
) -> List[Hotspot]:
    now = now or utc_now()
    half_life_ms = half_life_days * MS_PER_DAY

    hotspots: List[Hotspot] = []
    for members in cluster_reports(reports, radius_meters):
        score = sum(report_weight(r, now, half_life_ms) for r in members)
        last_ts = max((parse_timestamp(r.timestamp) for r in members), default=now)
        hotspots.append(
            Hotspot(
                id=f"hs-{members[0].id}",
                center=centroid(r.location for r in members),
                radius=radius_meters,
                risk_score=round(score, 3),
                report_count=len(members),
                last_report_timestamp=to_iso(last_ts),
            )
        )

    # sorted() is stable, ties keep discovery order
    hotspots = sorted(hotspots, key=lambda h: h.risk_score, reverse=True)
    logger.debug("Clustered %d reports into %d hotspots", len(reports), len(hotspots))
    return hotspots
