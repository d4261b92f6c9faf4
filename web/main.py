import logging

from fastapi import FastAPI

from core.config import settings
from web.models import setup_database
from web.router_hotspots import router as hotspot_router
from web.router_reports import router as report_router

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="SkimmerWatch API")
logger = logging.getLogger("uvicorn.error")

app.include_router(report_router, prefix="/api")
app.include_router(hotspot_router, prefix="/api")
setup_database()
logger.info("Database ready at %s", settings.database_url)


@app.get("/health")
def health():
    return {"status": "ok"}
