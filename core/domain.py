from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class ReportCategory(str, Enum):
    ATM = "ATM"
    GAS_PUMP = "Gas pump"
    STORE_POS = "Store POS"


class ObservationType(str, Enum):
    LOOSE_CARD_SLOT = "Loose card slot"
    OVERLAY = "Overlay"
    CAMERA_SUSPECTED = "Camera suspected"
    FRAUD_AFTER_USE = "Fraud after use"
    OTHER = "Other"


class ReportStatus(str, Enum):
    UNDER_REVIEW = "Under Review"
    COMMUNITY_SUPPORTED = "Community Supported"
    REJECTED = "Rejected"


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Report:
    id: str
    location: Location
    category: ReportCategory
    observation_type: ObservationType
    timestamp: str
    confidence_score: float | None = None
    description: str | None = None


@dataclass(frozen=True)
class Hotspot:
    id: str
    center: Location
    radius: float
    risk_score: float
    report_count: int
    last_report_timestamp: str


@dataclass(frozen=True)
class EvaluationResult:
    score: int
    confirm: bool
    evaluated_at: str
    reason: str | None = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp. A trailing 'Z' is accepted and naive values are taken as UTC.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def age_ms(timestamp: str, now: datetime) -> float:
    return (now - parse_timestamp(timestamp)).total_seconds() * 1000.0
