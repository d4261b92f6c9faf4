import logging
import uuid
from typing import Callable

from core.confirmation import CONFIRM_THRESHOLD, evaluate_reports_at_location
from core.domain import (
    EvaluationResult,
    Location,
    ObservationType,
    Report,
    ReportCategory,
    ReportStatus,
    parse_timestamp,
    to_iso,
    utc_now,
)
from core.hotspots import generate_hotspots
from core.repository import (
    create_report,
    get_report,
    hotspot_to_dict,
    list_reports,
    list_reports_at_site,
    report_to_dict,
    report_to_domain,
    save_hotspots,
    update_report_evaluation,
)
from core.validation import sanitize_coordinates, sanitize_text, validate_report_payload

logger = logging.getLogger(__name__)

Notifier = Callable[[dict, EvaluationResult], None]


class ReportValidationError(ValueError):
    def __init__(self, errors):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class ReportNotFoundError(ValueError):
    pass


def log_notifier(report: dict, result: EvaluationResult):
    logger.info("Site confirmed by report %s (score=%s): %s", report["id"], result.score, result.reason)


def confidence_from_score(score: int) -> float:
    return min(1.0, score / CONFIRM_THRESHOLD)


class ReportIngestor:
    """
    Saves new reports and keeps every report at the same site in step with the latest
    evaluation. Delivery of confirmation notices is left to the injected notifier.
    """

    def __init__(self, session_factory, notifier: Notifier | None = None):
        self.session_factory = session_factory
        self.notifier = notifier or log_notifier

    def _build_report(self, payload: dict) -> Report:
        ok, errors = validate_report_payload(payload)
        if not ok:
            raise ReportValidationError(errors)
        loc = payload["location"]
        description = payload.get("description")
        timestamp = payload.get("timestamp")
        return Report(
            id=payload.get("id") or uuid.uuid4().hex[:12],
            location=sanitize_coordinates(loc["latitude"], loc["longitude"]),
            category=ReportCategory(payload["category"]),
            observation_type=ObservationType(payload["observation_type"]),
            # stored in one UTC form so string order is time order
            timestamp=to_iso(parse_timestamp(timestamp)) if timestamp else to_iso(utc_now()),
            description=sanitize_text(description) if description else None,
        )

    def submit(self, payload: dict):
        report = self._build_report(payload)
        with self.session_factory() as session:
            if get_report(session, report.id):
                raise ReportValidationError([f"Report {report.id} already exists"])
            create_report(session, report)
            session.commit()
        logger.info("Saved report %s (%s at %.6f, %.6f)", report.id, report.category.value,
                    report.location.latitude, report.location.longitude)

        result = self.reevaluate_site(report.location, trigger_id=report.id)
        with self.session_factory() as session:
            saved = report_to_dict(get_report(session, report.id))
        return {"report": saved, "evaluation": result}

    def reevaluate_site(self, location: Location, trigger_id: str | None = None) -> EvaluationResult:
        with self.session_factory() as session:
            site_reports = list_reports_at_site(session, location)
            was_confirmed = any(
                r.status == ReportStatus.COMMUNITY_SUPPORTED.value and r.id != trigger_id for r in site_reports
            )
            result = evaluate_reports_at_location([report_to_domain(r) for r in site_reports], location)
            confidence = confidence_from_score(result.score)
            for r in site_reports:
                update_report_evaluation(session, r, result, confidence)
            session.commit()
            trigger = next((r for r in site_reports if r.id == trigger_id), None)
            trigger_view = report_to_dict(trigger) if trigger is not None else None

        logger.info("Re-evaluated %d reports at (%.4f, %.4f): score=%s confirm=%s",
                    len(site_reports), location.latitude, location.longitude, result.score, result.confirm)

        if result.confirm and not was_confirmed and trigger_view is not None:
            try:
                self.notifier(trigger_view, result)
            except Exception:
                logger.exception("Notifier failed for report %s", trigger_id)
        return result

    def evaluate(self, location: Location) -> EvaluationResult:
        with self.session_factory() as session:
            reports = [report_to_domain(r) for r in list_reports_at_site(session, location)]
        return evaluate_reports_at_location(reports, location)

    def get(self, report_id: str):
        with self.session_factory() as session:
            report = get_report(session, report_id)
            if not report:
                raise ReportNotFoundError(f"Report {report_id} not found")
            return report_to_dict(report)

    def hotspots(self, radius_meters: float, half_life_days: float):
        with self.session_factory() as session:
            reports = [report_to_domain(r) for r in list_reports(session)]
        return generate_hotspots(reports, radius_meters=radius_meters, half_life_days=half_life_days)

    def refresh_hotspots(self, radius_meters: float, half_life_days: float):
        hotspots = self.hotspots(radius_meters, half_life_days)
        with self.session_factory() as session:
            save_hotspots(session, hotspots, computed_at=to_iso(utc_now()))
            session.commit()
        logger.info("Stored %d hotspots", len(hotspots))
        return [hotspot_to_dict(h) for h in hotspots]
