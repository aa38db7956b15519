"""Shared service helpers and factories."""

from datetime import datetime, date, timedelta
from typing import Iterable, List, Optional

from rentease.models.listing import FleetListing, HostedListing
from rentease.models.profile import Profile
from rentease.models.store import Store
from rentease.utils.constants import (
    DATE_FMT,
    DEFAULT_LOCATION,
    DEFAULT_SEATS,
    PLACEHOLDER,
    BookingStatus,
    RentalPhase,
)


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


# -------- date & math helpers --------
def parse_date(s) -> date:
    """
    Coerce a date-like value to a date. Accepts date/datetime objects,
    'YYYY-MM-DD' and ISO strings with a time part; raises ValueError otherwise.
    """
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    if isinstance(s, str) and s.strip():
        base = s.strip().split("T", 1)[0].split(" ", 1)[0]
        return datetime.strptime(base, DATE_FMT).date()
    raise ValueError(f"Unsupported date: {s!r}")


def _today() -> date:
    """Wrapper for easier testing/mocking."""
    return date.today()


def _now() -> datetime:
    """Wrapper for easier testing/mocking."""
    return datetime.now()


def round2(x: float) -> float:
    return round(float(x), 2)


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int_safe(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def days_between(start: date, end: date) -> int:
    """Whole days from start to end; 0 when end is not after start."""
    return max((end - start).days, 0)


def days_inclusive(start: date, end: date) -> List[date]:
    """Every calendar day from start to end, both ends included."""
    out = []
    d = start
    while d <= end:
        out.append(d)
        d += timedelta(days=1)
    return out


def rental_phase(start: date, end: date, today: date) -> str:
    """Active while today is inside [start, end]; Past once end has gone by."""
    if today > end:
        return RentalPhase.PAST
    if start <= today:
        return RentalPhase.ACTIVE
    return RentalPhase.UPCOMING


def is_live_booking(row: dict) -> bool:
    return (row.get("status") or "").lower() != BookingStatus.CANCELLED


def _lc(s):
    """Safe lowercase for case-insensitive compare."""
    return (s or "").lower()


def normalize_transmission(value) -> str:
    """Collapse free-text gearbox values to Automatic/Manual."""
    if not value:
        return "Manual"
    if "auto" in str(value).strip().lower():
        return "Automatic"
    return "Manual"


def asset_url(url: Optional[str]) -> Optional[str]:
    """Content API asset URLs are protocol-relative ('//images...')."""
    if not url:
        return None
    return url if url.startswith("http") else f"https:{url}"


def average(values: Iterable[float]) -> Optional[float]:
    values = [float(v) for v in values if v is not None]
    if not values:
        return None
    return sum(values) / len(values)


def round_half_up(value) -> int:
    """Nearest whole number with .5 going up (star buckets, percentages)."""
    return int(float(value) + 0.5)


# -------- raw -> rich model mappers --------
def listing_from_entry(entry: Optional[dict]) -> Optional[FleetListing]:
    """Map a content API car entry (with resolved asset URLs) to a listing."""
    if not entry:
        return None
    f = entry.get("fields") or {}
    images = [u for u in (asset_url(i) for i in (f.get("images") or [])) if u]
    return FleetListing(
        id=entry.get("id"),
        slug=f.get("slug") or entry.get("id"),
        model=f.get("modelName") or "",
        price=to_float_safe(f.get("pricePerDay")) or 0.0,
        location=f.get("location") or DEFAULT_LOCATION,
        transmission=normalize_transmission(f.get("transmission")),
        seats=to_int_safe(f.get("seats")) or DEFAULT_SEATS,
        image=images[0] if images else PLACEHOLDER,
        type=f.get("type") or "Sedan",
        owner_id=None,
        year=to_int_safe(f.get("year")),
        fuel=f.get("fuel"),
        description=f.get("description") or "",
        features=list(f.get("features") or []),
        images=images,
    )


def listing_from_row(row: Optional[dict]) -> Optional[HostedListing]:
    """Map a hosted car row to a listing."""
    if not row:
        return None
    images = list(row.get("images") or [])
    if not images and row.get("image_url"):
        images = [row["image_url"]]
    return HostedListing(
        id=row.get("id"),
        slug=row.get("id"),
        model=f"{row.get('make', '')} {row.get('model', '')}".strip(),
        price=to_float_safe(row.get("price_per_day")) or 0.0,
        location=row.get("location") or DEFAULT_LOCATION,
        transmission=normalize_transmission(row.get("transmission")),
        seats=to_int_safe(row.get("seats")) or DEFAULT_SEATS,
        image=row.get("image_url") or PLACEHOLDER,
        type="Car",
        owner_id=row.get("owner_id"),
        year=to_int_safe(row.get("year")),
        fuel=row.get("fuel") or "Diesel",
        description=row.get("description") or "",
        features=[],
        images=images,
    )


def profile_from_dict(d: Optional[dict], email: str = "") -> Optional[Profile]:
    """Map a stored profile row to a Profile."""
    if not d:
        return None
    return Profile(
        id=d.get("id"),
        email=email or d.get("email") or "",
        full_name=d.get("full_name"),
        phone=d.get("phone"),
        location=d.get("location"),
        date_of_birth=d.get("date_of_birth"),
        avatar_url=d.get("avatar_url"),
        is_verified=bool(d.get("is_verified")),
        license_number=d.get("license_number"),
        license_expiry=d.get("license_expiry"),
        license_country=d.get("license_country"),
        license_image_url=d.get("license_image_url"),
    )
