from dataclasses import dataclass
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.database import run_with_retry
from core.db_models import HotspotModel, ReportModel
from core.domain import (
    EvaluationResult,
    Hotspot,
    Location,
    ObservationType,
    Report,
    ReportCategory,
    ReportStatus,
    parse_timestamp,
)
from core.geo import SITE_KEY_SCALE, distance_m, site_key


@dataclass
class ReportFilter:
    min_timestamp: str | None = None
    category: ReportCategory | None = None
    center: Location | None = None
    radius: float | None = None  # meters, used together with center


def report_to_domain(m: ReportModel) -> Report:
    return Report(
        id=m.id,
        location=Location(m.latitude, m.longitude),
        category=ReportCategory(m.category),
        observation_type=ObservationType(m.observation_type),
        timestamp=m.timestamp,
        confidence_score=m.confidence_score,
        description=m.description,
    )


def report_to_dict(m: ReportModel):
    return {
        "id": m.id,
        "location": {"latitude": m.latitude, "longitude": m.longitude},
        "category": m.category,
        "observation_type": m.observation_type,
        "description": m.description,
        "timestamp": m.timestamp,
        "confidence_score": m.confidence_score,
        "status": m.status,
        "status_reason": m.status_reason,
        "confirmation_reason": m.confirmation_reason,
        "last_evaluated_at": m.last_evaluated_at,
    }


def hotspot_to_dict(h: Hotspot):
    return {
        "id": h.id,
        "center": {"latitude": h.center.latitude, "longitude": h.center.longitude},
        "radius": h.radius,
        "risk_score": h.risk_score,
        "report_count": h.report_count,
        "last_report_timestamp": h.last_report_timestamp,
    }


def create_report(session: Session, report: Report):
    model = ReportModel(
        id=report.id,
        latitude=report.location.latitude,
        longitude=report.location.longitude,
        category=report.category.value,
        observation_type=report.observation_type.value,
        description=report.description,
        timestamp=report.timestamp,
        confidence_score=report.confidence_score,
        status=ReportStatus.UNDER_REVIEW.value,
    )
    session.add(model)
    return model


def get_report(session: Session, report_id: str):
    return session.get(ReportModel, report_id)


def list_reports(session: Session, report_filter: ReportFilter | None = None) -> List[ReportModel]:
    stmt = select(ReportModel).order_by(ReportModel.timestamp)
    if report_filter and report_filter.category is not None:
        stmt = stmt.where(ReportModel.category == ReportCategory(report_filter.category).value)
    rows = session.scalars(stmt).all()
    if not report_filter:
        return list(rows)

    if report_filter.min_timestamp:
        min_ts = parse_timestamp(report_filter.min_timestamp)
        rows = [r for r in rows if parse_timestamp(r.timestamp) >= min_ts]
    if report_filter.center is not None and report_filter.radius is not None:
        center = report_filter.center
        rows = [
            r for r in rows
            if distance_m(center, Location(r.latitude, r.longitude)) <= report_filter.radius
        ]
    return list(rows)


def list_reports_at_site(session: Session, location: Location) -> List[ReportModel]:
    key = site_key(location)
    # coarse box in SQL, exact key match in Python
    pad = 1.0 / SITE_KEY_SCALE
    rows = session.scalars(
        select(ReportModel)
        .where(ReportModel.latitude.between(location.latitude - pad, location.latitude + pad))
        .where(ReportModel.longitude.between(location.longitude - pad, location.longitude + pad))
        .order_by(ReportModel.timestamp, ReportModel.id)
    ).all()
    return [r for r in rows if site_key(Location(r.latitude, r.longitude)) == key]


def update_report_evaluation(session: Session, report: ReportModel, result: EvaluationResult, confidence: float):
    report.confidence_score = confidence
    report.status = (ReportStatus.COMMUNITY_SUPPORTED if result.confirm else ReportStatus.UNDER_REVIEW).value
    report.confirmation_reason = result.reason
    report.last_evaluated_at = result.evaluated_at
    return report


def save_hotspots(session: Session, hotspots: Iterable[Hotspot], computed_at: str):
    run_with_retry(lambda: session.execute(delete(HotspotModel)))
    for h in hotspots:
        session.add(
            HotspotModel(
                hotspot_id=h.id,
                center_lat=h.center.latitude,
                center_lon=h.center.longitude,
                radius_m=h.radius,
                risk_score=h.risk_score,
                report_count=h.report_count,
                last_report_timestamp=h.last_report_timestamp,
                computed_at=computed_at,
            )
        )


def get_hotspots(session: Session):
    rows = session.scalars(select(HotspotModel).order_by(HotspotModel.risk_score.desc(), HotspotModel.id)).all()
    return [
        {
            "id": h.hotspot_id,
            "center": {"latitude": h.center_lat, "longitude": h.center_lon},
            "radius": h.radius_m,
            "risk_score": h.risk_score,
            "report_count": h.report_count,
            "last_report_timestamp": h.last_report_timestamp,
            "computed_at": h.computed_at,
        }
        for h in rows
    ]
