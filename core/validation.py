import math
import re
from datetime import datetime, timedelta
from typing import Any, List, Tuple

from core.domain import Location, ObservationType, ReportCategory, parse_timestamp, utc_now

COORDINATE_PRECISION = 6
MAX_TEXT_LENGTH = 500
MAX_REPORT_ID_LENGTH = 50
MAX_TIMESTAMP_PAST = timedelta(days=365)
MAX_TIMESTAMP_FUTURE = timedelta(hours=24)

_REPORT_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})?$")
_DISALLOWED_TEXT_CHARS = re.compile(r"[^\sa-zA-Z0-9\-.,#'@:/&()]")
_XSS_PATTERNS = [
    re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE),
    re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE),
    re.compile(r"<object\b[^<]*(?:(?!</object>)<[^<]*)*</object>", re.IGNORECASE),
    re.compile(r"<embed\b[^<]*(?:(?!</embed>)<[^<]*)*</embed>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
]


def sanitize_text(value: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    if not isinstance(value, str):
        return ""
    for pattern in _XSS_PATTERNS:
        value = pattern.sub("", value)
    value = value[:max_length]
    return _DISALLOWED_TEXT_CHARS.sub("", value).strip()


def sanitize_coordinates(lat: Any, lon: Any) -> Location | None:
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return None
    if not (-90.0 <= lat_f <= 90.0) or not (-180.0 <= lon_f <= 180.0):
        return None
    return Location(round(lat_f, COORDINATE_PRECISION), round(lon_f, COORDINATE_PRECISION))


def validate_report_id(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if not value or len(value) > MAX_REPORT_ID_LENGTH:
        return False
    return bool(_REPORT_ID_RE.match(value))


def validate_timestamp(value: Any, now: datetime | None = None) -> bool:
    if not isinstance(value, str) or not _ISO_RE.match(value):
        return False
    try:
        ts = parse_timestamp(value)
    except ValueError:
        return False
    now = now or utc_now()
    return now - MAX_TIMESTAMP_PAST <= ts <= now + MAX_TIMESTAMP_FUTURE


def validate_category(value: Any) -> bool:
    return isinstance(value, str) and value in {c.value for c in ReportCategory}


def validate_observation_type(value: Any) -> bool:
    return isinstance(value, str) and value in {o.value for o in ObservationType}


def validate_report_payload(payload: dict, now: datetime | None = None) -> Tuple[bool, List[str]]:
    """
    Check a raw report submission. Returns (ok, errors); id and timestamp are optional
    because the ingestion pipeline assigns them when absent.
    """
    errors: List[str] = []

    report_id = payload.get("id")
    if report_id is not None and not validate_report_id(report_id):
        errors.append("Invalid report id")

    location = payload.get("location")
    if not isinstance(location, dict):
        location = {}
    if sanitize_coordinates(location.get("latitude"), location.get("longitude")) is None:
        errors.append("Valid location with latitude and longitude is required")

    if not validate_category(payload.get("category")):
        errors.append("Invalid category")
    if not validate_observation_type(payload.get("observation_type")):
        errors.append("Invalid observation type")

    timestamp = payload.get("timestamp")
    if timestamp is not None and not validate_timestamp(timestamp, now=now):
        errors.append("Valid timestamp is required")

    return not errors, errors
