from __future__ import annotations

import math
from typing import List, Optional

from rentease.exceptions import CarNotFoundError, ContentAPIError
from rentease.models.listing import ListingBase
from rentease.services.common import (
    _lc,
    _store,
    average,
    listing_from_entry,
    listing_from_row,
    to_float_safe,
)
from rentease.services.content_service import ContentClient
from rentease.utils.constants import (
    DEFAULT_MAX_PRICE,
    DEFAULT_MIN_PRICE,
    ITEMS_PER_PAGE,
    PLACEHOLDER,
)
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.catalog")

CAR_CONTENT_TYPE = "car"


def _content() -> ContentClient:
    return ContentClient.instance()


class CatalogService:
    """Car catalogue: the content API fleet merged with privately hosted cars."""

    @staticmethod
    def _fleet_entries() -> List[dict]:
        try:
            return _content().get_entries(CAR_CONTENT_TYPE, order="-sys.createdAt")
        except ContentAPIError as exc:
            LOG.warning("fleet catalog unavailable: %s", exc)
            return []

    @staticmethod
    def review_stats(reviews: List[dict], car_id: str, model: str) -> dict:
        """Average (1 decimal) and count of reviews matching the id or model name."""
        matching = [r for r in reviews if r.get("car_id") == car_id or r.get("car_model") == model]
        avg = average(r.get("rating") for r in matching)
        if avg is None:
            return {"rating": 0, "reviews": 0}
        return {"rating": round(avg, 1), "reviews": len(matching)}

    @staticmethod
    def all_cars(store=None) -> List[dict]:
        """Fleet cars first, then hosted cars, each newest first."""
        st = store or _store()
        reviews = list(st.reviews.values())

        listings: List[ListingBase] = [
            item for item in (listing_from_entry(e) for e in CatalogService._fleet_entries()) if item
        ]
        rows = st.select("cars", order_by="created_at", desc=True)
        listings.extend(item for item in (listing_from_row(r) for r in rows) if item)

        out = []
        for listing in listings:
            stats = CatalogService.review_stats(reviews, listing.id, listing.model)
            listing.rating = stats["rating"]
            listing.reviews = stats["reviews"]
            out.append(listing.to_dict())
        return out

    @staticmethod
    def filter_cars(cars: List[dict], location=None, query=None, min_price=None, max_price=None,
                    transmission="any", seats="any", viewer_id=None) -> List[dict]:
        """
        Filter listings for the browse page.
        - The viewer's own cars are hidden.
        - Location is a case-insensitive substring match.
        - The model query matches the model name or the body type.
        - Invalid price bounds fall back to the defaults.
        """
        loc_kw = _lc(location).strip()
        model_kw = _lc(query).strip()
        min_val = to_float_safe(min_price)
        max_val = to_float_safe(max_price)
        if min_val is None:
            min_val = DEFAULT_MIN_PRICE
        if max_val is None:
            max_val = DEFAULT_MAX_PRICE
        transmission = _lc(transmission) or "any"
        seats = str(seats or "any")

        def keep(car: dict) -> bool:
            if viewer_id and car.get("owner_id") == viewer_id:
                return False
            if loc_kw and loc_kw not in _lc(car.get("location")):
                return False
            if model_kw and model_kw not in _lc(car.get("model")) and model_kw not in _lc(car.get("type")):
                return False
            price = to_float_safe(car.get("price"))
            if price is None or not (min_val <= price <= max_val):
                return False
            if transmission != "any" and _lc(car.get("transmission")) != transmission:
                return False
            if seats != "any" and str(car.get("seats")) != seats:
                return False
            return True

        return [c for c in cars if keep(c)]

    @staticmethod
    def paginate(items: List[dict], page=1, per_page: int = ITEMS_PER_PAGE) -> dict:
        total_pages = math.ceil(len(items) / per_page) if items else 0
        try:
            page = int(page)
        except (TypeError, ValueError):
            page = 1
        page = min(max(page, 1), max(total_pages, 1))
        start = (page - 1) * per_page
        return {
            "items": items[start:start + per_page],
            "page": page,
            "total_pages": total_pages,
            "total": len(items),
        }

    @staticmethod
    def browse(location=None, query=None, min_price=None, max_price=None,
               transmission="any", seats="any", viewer_id=None, page=1, *, store=None) -> dict:
        cars = CatalogService.all_cars(store=store)
        filtered = CatalogService.filter_cars(
            cars, location=location, query=query, min_price=min_price, max_price=max_price,
            transmission=transmission, seats=seats, viewer_id=viewer_id,
        )
        return CatalogService.paginate(filtered, page)

    @staticmethod
    def find_listing(car_id: str, store=None) -> Optional[ListingBase]:
        """Hosted table first, then the fleet by entry id, then by slug."""
        if not car_id:
            return None
        st = store or _store()
        row = st.get("cars", car_id)
        if row:
            return listing_from_row(row)
        try:
            entry = _content().get_entry(car_id)
            if not entry:
                matches = _content().get_entries(CAR_CONTENT_TYPE, limit=1, slug=car_id)
                entry = matches[0] if matches else None
        except ContentAPIError as exc:
            LOG.warning("fleet lookup failed for %s: %s", car_id, exc)
            return None
        return listing_from_entry(entry)

    @staticmethod
    def car_reviews(listing: ListingBase, store=None) -> List[dict]:
        """Reviews for a car, newest first, with the author's profile joined in."""
        st = store or _store()
        keys = listing.review_keys()
        out = []
        for r in st.select("reviews", order_by="created_at", desc=True):
            if r.get("car_id") not in keys and r.get("car_model") not in keys:
                continue
            prof = st.get("profiles", r.get("renter_id")) or {}
            out.append({
                "id": r["id"],
                "author": prof.get("full_name") or r.get("user_name") or "Verified User",
                "avatar": prof.get("avatar_url"),
                "rating": r.get("rating") or 0,
                "comment": r.get("comment") or "",
                "created_at": r.get("created_at"),
            })
        return out

    @staticmethod
    def get_car(car_id: str, store=None) -> dict:
        """Car detail with reviews; raise CarNotFoundError for unknown ids."""
        listing = CatalogService.find_listing(car_id, store=store)
        if listing is None:
            raise CarNotFoundError(f"Car '{car_id}' not found")
        reviews = CatalogService.car_reviews(listing, store=store)
        avg = average(r["rating"] for r in reviews)
        listing.rating = avg or 0
        listing.reviews = len(reviews)
        car = listing.to_dict()
        car["reviews_list"] = reviews
        return car

    @staticmethod
    def car_summary(car_id: str, store=None) -> dict:
        """Name, image, location and rate for booking/rental pages."""
        listing = CatalogService.find_listing(car_id, store=store)
        if listing is None:
            return {
                "id": car_id,
                "name": "Unknown Car",
                "image": PLACEHOLDER,
                "location": "Unknown",
                "price": 0.0,
                "owner_id": None,
                "found": False,
            }
        return {
            "id": listing.id,
            "name": listing.model,
            "image": listing.image,
            "location": listing.location,
            "price": listing.price,
            "owner_id": listing.owner_id,
            "found": True,
        }
