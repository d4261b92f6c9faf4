from fastapi import APIRouter, Query

from core.config import settings
from core.repository import get_hotspots, hotspot_to_dict
from web.models import SessionLocal, ingestor

router = APIRouter()


@router.get("/hotspots")
def hotspots_endpoint(
    radius_meters: float = Query(default=settings.hotspot_radius_m, gt=0),
    half_life_days: float = Query(default=settings.half_life_days, gt=0),
):
    hotspots = ingestor.hotspots(radius_meters=radius_meters, half_life_days=half_life_days)
    return [hotspot_to_dict(h) for h in hotspots]


@router.post("/hotspots/refresh")
def refresh_hotspots_endpoint(
    radius_meters: float = Query(default=settings.hotspot_radius_m, gt=0),
    half_life_days: float = Query(default=settings.half_life_days, gt=0),
):
    return ingestor.refresh_hotspots(radius_meters=radius_meters, half_life_days=half_life_days)


@router.get("/hotspots/latest")
def latest_hotspots_endpoint():
    with SessionLocal() as session:
        return get_hotspots(session)
