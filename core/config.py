import os

from pydantic import BaseModel


class Settings(BaseModel):
    # SQLite file under data/ unless overridden
    database_url: str = os.getenv("SKIMMER_DATABASE_URL", "sqlite:///data/skimmerwatch.db")

    hotspot_radius_m: float = float(os.getenv("SKIMMER_HOTSPOT_RADIUS_M", "200"))
    half_life_days: float = float(os.getenv("SKIMMER_HALF_LIFE_DAYS", "7"))

    log_level: str = os.getenv("SKIMMER_LOG_LEVEL", "INFO")


settings = Settings()
