from dataclasses import asdict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from core.domain import ObservationType, ReportCategory
from core.ingestion import ReportNotFoundError, ReportValidationError
from core.repository import ReportFilter, list_reports, report_to_dict
from core.validation import sanitize_coordinates
from web.models import SessionLocal, ingestor

router = APIRouter()

INTERNAL_FIELDS = ("confidence_score", "last_evaluated_at", "confirmation_reason", "status_reason")


class LocationBody(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class ReportCreateRequest(BaseModel):
    id: str | None = None
    location: LocationBody
    category: ReportCategory
    observation_type: ObservationType
    description: str | None = Field(default=None, max_length=2000)
    timestamp: str | None = None


def public_view(report: dict):
    return {k: v for k, v in report.items() if k not in INTERNAL_FIELDS}


@router.post("/reports", status_code=201)
def create_report_endpoint(body: ReportCreateRequest):
    payload = body.model_dump(mode="json", exclude_none=True)
    try:
        result = ingestor.submit(payload)
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)
    return {
        "report": public_view(result["report"]),
        "confirmed": result["evaluation"].confirm,
    }


@router.get("/reports")
def list_reports_endpoint(
    category: ReportCategory | None = None,
    since: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
    radius: float | None = None,
):
    center = None
    if lat is not None or lon is not None:
        center = sanitize_coordinates(lat, lon)
        if center is None:
            raise HTTPException(status_code=400, detail="lat and lon must both be valid coordinates")
    report_filter = ReportFilter(min_timestamp=since, category=category, center=center, radius=radius)
    try:
        with SessionLocal() as session:
            reports = [report_to_dict(r) for r in list_reports(session, report_filter)]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [public_view(r) for r in reports]


@router.get("/reports/{report_id}")
def get_report_endpoint(report_id: str):
    try:
        return public_view(ingestor.get(report_id))
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/evaluate")
def evaluate_endpoint(lat: float, lon: float):
    location = sanitize_coordinates(lat, lon)
    if location is None:
        raise HTTPException(status_code=400, detail="Invalid coordinates")
    result = asdict(ingestor.evaluate(location))
    if result["reason"] is None:
        del result["reason"]
    return result
