from typing import List, Optional

from rentease.services.catalog_service import CatalogService
from rentease.services.common import _store, average, profile_from_dict, round_half_up, to_float_safe
from rentease.services.rental_service import RentalService
from rentease.utils.constants import SIDEBAR_REVIEW_LIMIT
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.reviews")


def _author(st, review: dict) -> str:
    prof = st.get("profiles", review.get("renter_id")) or {}
    return prof.get("full_name") or review.get("user_name") or "Verified User"


def _stars(review: dict) -> int:
    rating = to_float_safe(review.get("rating"))
    return round_half_up(rating) if rating is not None else 0


class ReviewService:

    @staticmethod
    def submit(user_id: str, booking_id: str, rating, comment: str = "", store=None):
        """
        Review the car of one of the user's bookings.

        Returns:
            (ok: bool, message: str, review_id: Optional[str])
        """
        st = store or _store()
        rating = to_float_safe(rating)
        if rating is None or not rating > 0:
            return False, "Please select a rating.", None
        rating = round(min(rating, 5.0), 1)
        if rating.is_integer():
            rating = int(rating)

        booking = st.get("bookings", booking_id)
        if not booking or booking.get("renter_id") != user_id:
            return False, "Please choose one of your rentals.", None

        user = st.get("users", user_id) or {}
        profile = profile_from_dict(st.get("profiles", user_id) or {"id": user_id},
                                    email=user.get("email", ""))
        car = CatalogService.car_summary(booking["car_id"], store=st)

        rid = st.insert("reviews", {
            "car_id": booking["car_id"],
            "renter_id": user_id,
            "user_name": profile.display_name(),
            "rating": rating,
            "comment": (comment or "").strip(),
            "car_model": car["name"] if car["found"] else None,
        })
        LOG.info("review created id=%s car=%s rating=%s", rid, booking["car_id"], rating)
        return True, "Thank you for your review!", rid

    @staticmethod
    def all_reviews(store=None) -> List[dict]:
        st = store or _store()
        return [
            {**r, "author": _author(st, r), "avatar": (st.get("profiles", r.get("renter_id")) or {}).get("avatar_url")}
            for r in st.select("reviews", order_by="created_at", desc=True)
        ]

    @staticmethod
    def summary(store=None) -> dict:
        """Average rating ("0.0" when empty) and a 5..1 star breakdown."""
        reviews = ReviewService.all_reviews(store=store)
        total = len(reviews)
        avg = average(r.get("rating") for r in reviews)
        breakdown = []
        for stars in range(5, 0, -1):
            count = sum(1 for r in reviews if _stars(r) == stars)
            percent = round_half_up(count * 100 / total) if total else 0
            breakdown.append({"stars": stars, "count": count, "percent": percent})
        return {
            "reviews": reviews,
            "total": total,
            "average": f"{avg:.1f}" if avg is not None else "0.0",
            "breakdown": breakdown,
        }

    @staticmethod
    def reviewable_rentals(user_id: str, store=None) -> List[dict]:
        return RentalService.history(user_id, store=store)

    @staticmethod
    def recent_by_user(user_id: str, limit: Optional[int] = SIDEBAR_REVIEW_LIMIT, store=None) -> List[dict]:
        st = store or _store()
        rows = st.select("reviews", order_by="created_at", desc=True, renter_id=user_id)
        return rows[:limit] if limit else rows
