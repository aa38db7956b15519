"""Rental-related service layer utilities."""

from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from rentease.exceptions import BookingNotFoundError
from rentease.services.catalog_service import CatalogService
from rentease.services.common import (
    _now,
    _store,
    _today,
    days_between,
    parse_date,
    rental_phase,
    to_float_safe,
)
from rentease.utils.constants import REVIEW_PROMPT_WINDOW_HOURS, RentalPhase
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.rentals")


def _view(b: dict, today: date, cars: Dict[str, dict], store) -> dict:
    """Booking row + car summary + phase, cached per car id."""
    cid = b.get("car_id")
    if cid not in cars:
        cars[cid] = CatalogService.car_summary(cid, store=store)
    car = cars[cid]
    start = parse_date(b["start_date"])
    end = parse_date(b["end_date"])
    return {
        "id": b["id"],
        "car_id": cid,
        "car_name": car["name"],
        "car_image": car["image"],
        "car_location": car["location"],
        "start_date": start,
        "end_date": end,
        "days": days_between(start, end),
        "total_price": to_float_safe(b.get("total_price")) or 0.0,
        "status": b.get("status"),
        "phase": rental_phase(start, end, today),
    }


class RentalService:
    """
    My Rentals: current/upcoming list, history, detail, delete and the
    post-rental review prompt.
    """

    @staticmethod
    def _views(user_id: str, today: Optional[date] = None, store=None) -> List[dict]:
        st = store or _store()
        today = today or _today()
        cars: Dict[str, dict] = {}
        out = []
        for b in st.select("bookings", renter_id=user_id):
            try:
                out.append(_view(b, today, cars, st))
            except (KeyError, ValueError):
                LOG.warning("skipping malformed booking id=%s", b.get("id"))
        return out

    @staticmethod
    def my_rentals(user_id: str, today: Optional[date] = None, store=None) -> List[dict]:
        """Active and upcoming bookings, soonest first."""
        views = [v for v in RentalService._views(user_id, today, store)
                 if v["phase"] != RentalPhase.PAST]
        return sorted(views, key=lambda v: v["start_date"])

    @staticmethod
    def history(user_id: str, today: Optional[date] = None, store=None) -> List[dict]:
        """Past bookings, most recently ended first."""
        views = [v for v in RentalService._views(user_id, today, store)
                 if v["phase"] == RentalPhase.PAST]
        return sorted(views, key=lambda v: v["end_date"], reverse=True)

    @staticmethod
    def detail(booking_id: str, user_id: str, today: Optional[date] = None, store=None) -> dict:
        st = store or _store()
        b = st.get("bookings", booking_id)
        if not b or b.get("renter_id") != user_id:
            raise BookingNotFoundError("Rental not found")
        view = _view(b, today or _today(), {}, st)
        if view["phase"] == RentalPhase.PAST:
            view["phase"] = RentalPhase.COMPLETED
        return view

    @staticmethod
    def delete_booking(booking_id: str, user_id: str, store=None):
        st = store or _store()
        b = st.get("bookings", booking_id)
        if not b or b.get("renter_id") != user_id:
            return False, "Booking not found or it does not belong to you."
        st.delete("bookings", booking_id)
        LOG.info("booking deleted id=%s by=%s", booking_id, user_id)
        return True, "Booking deleted."

    @staticmethod
    def review_prompt(user_id: str, dismissed: Iterable[str] = (),
                      now: Optional[datetime] = None, store=None) -> Optional[dict]:
        """
        The most recently ended rental still waiting for a review, if it ended
        (end of its last day) less than the prompt window ago.
        """
        st = store or _store()
        now = now or _now()
        dismissed = set(dismissed or ())
        reviewed = {r.get("car_id") for r in st.select("reviews", renter_id=user_id)}

        for view in RentalService.history(user_id, today=now.date(), store=st):
            if view["car_id"] in reviewed or view["id"] in dismissed:
                continue
            ended_at = datetime.combine(view["end_date"], time.max)
            if now - ended_at < timedelta(hours=REVIEW_PROMPT_WINDOW_HOURS):
                return view
            return None
        return None
