from __future__ import annotations

import secrets
from datetime import date
from typing import Iterable, List, Optional

from rentease.exceptions import CarNotFoundError, StorageError, ValidationError
from rentease.services.catalog_service import CatalogService
from rentease.services.common import (
    _store,
    _today,
    average,
    listing_from_row,
    parse_date,
    to_float_safe,
    to_int_safe,
)
from rentease.services.storage_service import _storage, file_extension, is_image_upload
from rentease.utils.constants import FUEL_TYPES, TRANSMISSIONS, Bucket
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.host")


class HostService:
    """Host dashboard stats and listing management for privately hosted cars."""

    @staticmethod
    def own_cars(user_id: str, store=None) -> List[dict]:
        st = store or _store()
        reviews = list(st.reviews.values())
        out = []
        for row in st.select("cars", order_by="created_at", desc=True, owner_id=user_id):
            listing = listing_from_row(row)
            stats = CatalogService.review_stats(reviews, listing.id, listing.model)
            listing.rating = stats["rating"]
            listing.reviews = stats["reviews"]
            out.append(listing.to_dict())
        return out

    @staticmethod
    def dashboard(user_id: str, today: Optional[date] = None, store=None) -> dict:
        """
        Stats:
          - total_earnings: bookings of own cars made by other renters
          - active_listings: number of own cars
          - bookings_this_month: those bookings starting this month
          - average_rating: mean of every review of an own car, "N/A" when none
        """
        st = store or _store()
        today = today or _today()
        cars = HostService.own_cars(user_id, store=st)
        car_ids = {c["id"] for c in cars}

        bookings = [b for b in st.select("bookings", car_id=car_ids)
                    if b.get("renter_id") != user_id]
        earnings = sum(to_float_safe(b.get("total_price")) or 0.0 for b in bookings)

        this_month = 0
        for b in bookings:
            try:
                start = parse_date(b.get("start_date"))
            except ValueError:
                continue
            if (start.year, start.month) == (today.year, today.month):
                this_month += 1

        avg = average(to_float_safe(r.get("rating")) for r in st.select("reviews", car_id=car_ids))
        return {
            "cars": cars,
            "stats": {
                "total_earnings": round(earnings, 2),
                "active_listings": len(cars),
                "bookings_this_month": this_month,
                "average_rating": f"{avg:.1f}" if avg is not None else "N/A",
            },
        }

    @staticmethod
    def listing_for_edit(car_id: str, user_id: str, store=None) -> dict:
        st = store or _store()
        row = st.get("cars", car_id)
        if not row or row.get("owner_id") != user_id:
            raise CarNotFoundError("Listing not found")
        data = dict(row)
        if not data.get("images") and data.get("image_url"):
            data["images"] = [data["image_url"]]
        return data

    @staticmethod
    def validate_listing(form) -> dict:
        """Return cleaned listing values or raise ValidationError."""
        errors = {}
        make = (form.get("make") or "").strip()
        model = (form.get("model") or "").strip()
        location = (form.get("location") or "").strip()
        if not make:
            errors["make"] = "Make is required."
        if not model:
            errors["model"] = "Model is required."
        if not location:
            errors["location"] = "Location is required."

        price = to_float_safe(form.get("price_per_day"))
        if price is None or price <= 0:
            errors["price_per_day"] = "Price per day must be a positive number."

        transmission = (form.get("transmission") or "automatic").strip().lower()
        if transmission not in TRANSMISSIONS:
            errors["transmission"] = "Choose automatic or manual."
        fuel = (form.get("fuel") or "Diesel").strip()
        if fuel not in FUEL_TYPES:
            errors["fuel"] = "Choose a valid fuel type."

        if errors:
            raise ValidationError(errors)
        return {
            "make": make,
            "model": model,
            "year": to_int_safe(form.get("year")),
            "seats": to_int_safe(form.get("seats")) or 5,
            "transmission": transmission,
            "fuel": fuel,
            "description": (form.get("description") or "").strip(),
            "price_per_day": price,
            "location": location,
        }

    @staticmethod
    def _upload_images(user_id: str, files: Iterable) -> List[str]:
        storage = _storage()
        urls = []
        for f in files:
            if not f or not f.filename:
                continue
            if not is_image_upload(f):
                raise StorageError(f"Unsupported image type: {f.filename}")
            name = f"{user_id}-{secrets.token_hex(8)}.{file_extension(f.filename)}"
            path = storage.upload(Bucket.CAR_IMAGES, name, f)
            urls.append(storage.public_url(Bucket.CAR_IMAGES, path))
        return urls

    @staticmethod
    def save_listing(user_id: str, form, files: Iterable = (), kept_images: Iterable[str] = (),
                     car_id: Optional[str] = None, store=None):
        """
        Create a listing, or update one the user owns.

        Returns:
            (ok: bool, message: str, car_id: Optional[str])
        """
        st = store or _store()
        if car_id:
            row = st.get("cars", car_id)
            if not row or row.get("owner_id") != user_id:
                return False, "Listing not found", None

        try:
            values = HostService.validate_listing(form)
            uploaded = HostService._upload_images(user_id, files)
        except ValidationError as exc:
            return False, " ".join(exc.errors.values()), None
        except StorageError as exc:
            return False, exc.message, None

        images = [u for u in kept_images if u] + uploaded
        values["images"] = images
        values["image_url"] = images[0] if images else None

        if car_id:
            st.update("cars", car_id, values)
            LOG.info("listing updated id=%s owner=%s", car_id, user_id)
            return True, "Your listing has been updated.", car_id

        values["owner_id"] = user_id
        cid = st.insert("cars", values)
        LOG.info("listing created id=%s owner=%s", cid, user_id)
        return True, "Your car is now listed!", cid

    @staticmethod
    def delete_listing(car_id: str, user_id: str, today: Optional[date] = None, store=None):
        st = store or _store()
        row = st.get("cars", car_id)
        if not row or row.get("owner_id") != user_id:
            return False, "Listing not found"
        st.delete_car(car_id, today=today or _today())
        LOG.info("listing deleted id=%s owner=%s", car_id, user_id)
        return True, "Listing deleted."
