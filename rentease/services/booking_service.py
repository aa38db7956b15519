"""Availability and pricing for the booking flow."""

from datetime import date
from typing import Iterable, List, Optional, Set, Tuple, Union

from rentease.exceptions import (
    CarNotFoundError,
    CarUnavailableError,
    InvalidDateRangeError,
    RentEaseError,
)
from rentease.models.listing import ListingBase
from rentease.services.catalog_service import CatalogService
from rentease.services.common import (
    _store,
    _today,
    days_between,
    days_inclusive,
    is_live_booking,
    parse_date,
    round2,
)
from rentease.utils.constants import (
    INSURANCE_FEE,
    PAYMENT_METHODS,
    SERVICE_FEE,
    BookingStatus,
)
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.booking")

CARD_FIELDS = ("card_holder", "card_number", "expiry", "cvv")
DRIVER_FIELDS = ("full_name", "email", "phone", "license_number")


def _keys_of(car: Union[str, ListingBase, Iterable[str]]) -> Set[str]:
    if isinstance(car, ListingBase):
        return {k for k in (car.id, car.slug) if k}
    if isinstance(car, str):
        return {car}
    return {str(k) for k in car if k}


class BookingService:
    """
    Booking flow: driver details -> dates -> payment -> confirmed booking.
    A booking blocks every calendar day from its start to its end date,
    both included.
    """

    @staticmethod
    def blocked_dates(car, store=None) -> List[date]:
        """Sorted days covered by non-cancelled bookings of ``car``."""
        st = store or _store()
        keys = _keys_of(car)
        blocked: Set[date] = set()
        for b in st.bookings.values():
            if b.get("car_id") not in keys or not is_live_booking(b):
                continue
            try:
                start = parse_date(b.get("start_date"))
                end = parse_date(b.get("end_date"))
            except ValueError:
                LOG.warning("skipping booking %s with bad dates", b.get("id"))
                continue
            blocked.update(days_inclusive(start, end))
        return sorted(blocked)

    @staticmethod
    def quote(daily_rate, pickup, return_date) -> dict:
        """Price breakdown; ``days`` is 0 for an empty or inverted range."""
        try:
            days = days_between(parse_date(pickup), parse_date(return_date))
        except ValueError:
            days = 0
        rate = float(daily_rate or 0)
        car_total = round2(rate * days)
        return {
            "days": days,
            "daily_rate": rate,
            "car_total": car_total,
            "insurance_fee": INSURANCE_FEE,
            "service_fee": SERVICE_FEE,
            "grand_total": round2(car_total + INSURANCE_FEE + SERVICE_FEE),
        }

    @staticmethod
    def validate_driver(form) -> Tuple[bool, str]:
        values = {f: (form.get(f) or "").strip() for f in DRIVER_FIELDS}
        if not all(values.values()):
            return False, "Please fill in all driver details."
        if "@" not in values["email"]:
            return False, "Please enter a valid email address."
        return True, "OK"

    @staticmethod
    def check_dates(listing: ListingBase, pickup, return_date, renter_id: Optional[str],
                    today: Optional[date] = None, store=None) -> Tuple[date, date]:
        """
        Parse and validate a requested range; return (pickup, return) dates.
        Raises InvalidDateRangeError or CarUnavailableError.
        """
        today = today or _today()
        try:
            start = parse_date(pickup)
            end = parse_date(return_date)
        except ValueError as exc:
            raise InvalidDateRangeError("Please select pickup and return dates.") from exc
        if start < today:
            raise InvalidDateRangeError("Pickup date cannot be in the past.")
        if end <= start:
            raise InvalidDateRangeError("Return date must be after pickup date.")
        if listing.is_owned_by(renter_id):
            raise CarUnavailableError("You cannot book your own car.")

        requested = set(days_inclusive(start, end))
        if requested.intersection(BookingService.blocked_dates(listing, store=store)):
            raise CarUnavailableError("Some of the selected dates are already booked.")
        return start, end

    @staticmethod
    def validate_payment(method: str, form) -> Tuple[bool, str]:
        if method not in PAYMENT_METHODS:
            return False, "Please choose a payment method."
        if method == "card":
            if not all((form.get(f) or "").strip() for f in CARD_FIELDS):
                return False, "Please fill in all required payment fields."
        return True, "OK"

    @staticmethod
    def create_booking(renter_id: str, car_id: str, pickup, return_date, method: str,
                       payment_form=None, store=None):
        """
        Validate payment and dates, then insert a confirmed booking.

        Returns:
            (ok: bool, message: str, booking_id: Optional[str])
        """
        st = store or _store()
        ok, msg = BookingService.validate_payment(method, payment_form or {})
        if not ok:
            return False, msg, None

        listing = CatalogService.find_listing(car_id, store=st)
        if listing is None:
            return False, CarNotFoundError().message, None

        # check and insert hold the same lock
        with st.locked():
            try:
                start, end = BookingService.check_dates(listing, pickup, return_date, renter_id, store=st)
            except RentEaseError as exc:
                return False, exc.message, None

            quote = BookingService.quote(listing.price, start, end)
            bid = st.insert("bookings", {
                "car_id": listing.booking_ref(),
                "renter_id": renter_id,
                "owner_id": listing.owner_id,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "total_price": quote["grand_total"],
                "payment_method": method,
                "status": BookingStatus.CONFIRMED,
            })
        LOG.info("booking created id=%s car=%s renter=%s total=%s",
                 bid, listing.booking_ref(), renter_id, quote["grand_total"])
        return True, "Booking confirmed!", bid
