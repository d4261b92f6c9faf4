from sqlalchemy import Column, Float, Integer, String, Text

from core.database import Base


class ReportModel(Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True, index=True)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)  # "ATM", "Gas pump", "Store POS"
    observation_type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    timestamp = Column(String, nullable=False, index=True)  # ISO-8601, UTC
    confidence_score = Column(Float, nullable=True)
    status = Column(String, nullable=False, default="Under Review", index=True)
    status_reason = Column(Text, nullable=True)
    confirmation_reason = Column(Text, nullable=True)
    last_evaluated_at = Column(String, nullable=True)


class HotspotModel(Base):
    __tablename__ = "hotspots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    hotspot_id = Column(String, nullable=False, index=True)
    center_lat = Column(Float, nullable=False)
    center_lon = Column(Float, nullable=False)
    radius_m = Column(Float, nullable=False)
    risk_score = Column(Float, nullable=False)
    report_count = Column(Integer, nullable=False)
    last_report_timestamp = Column(String, nullable=False)
    computed_at = Column(String, nullable=False)
