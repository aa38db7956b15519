from flask import Blueprint, render_template, request, redirect, url_for, flash, session, abort

from ..exceptions import RentEaseError
from ..services.auth_service import AuthService
from ..services.booking_service import BookingService
from ..services.catalog_service import CatalogService
from ..services.profile_service import ProfileService
from ..utils.constants import PAYMENT_METHODS
from ..utils.decorators import login_required

bp = Blueprint("booking", __name__, url_prefix="/booking")

DRIVER_KEY = "booking_driver"


def _listing_or_404(car_id):
    listing = CatalogService.find_listing(car_id)
    if listing is None:
        abort(404)
    return listing


@bp.get("/book")
@login_required
def driver_form():
    """Step 1: driver details, prefilled from the profile."""
    car_id = request.args.get("id", "")
    listing = _listing_or_404(car_id)
    driver = session.get(DRIVER_KEY, {}).get(car_id)
    if not driver:
        profile = ProfileService.get_profile(AuthService.current_user_id())
        driver = {
            "full_name": profile.full_name or "",
            "email": profile.email,
            "phone": profile.phone or "",
            "license_number": profile.license_number or "",
        }
    return render_template("booking/driver.html", car=listing, driver=driver)


@bp.post("/book")
@login_required
def driver_submit():
    car_id = request.form.get("id", "")
    listing = _listing_or_404(car_id)
    ok, msg = BookingService.validate_driver(request.form)
    driver = {k: (request.form.get(k) or "").strip()
              for k in ("full_name", "email", "phone", "license_number")}
    if not ok:
        flash(msg, "danger")
        return render_template("booking/driver.html", car=listing, driver=driver), 400

    drivers = dict(session.get(DRIVER_KEY, {}))
    drivers[car_id] = driver
    session[DRIVER_KEY] = drivers
    return redirect(url_for("booking.dates_form", id=car_id))


@bp.get("")
@login_required
def dates_form():
    """Step 2: pick dates; blocked days come from existing bookings."""
    car_id = request.args.get("id", "")
    listing = _listing_or_404(car_id)
    pickup = request.args.get("pickup", "")
    return_date = request.args.get("return", "")
    return render_template(
        "booking/dates.html",
        car=listing,
        pickup=pickup,
        return_date=return_date,
        blocked=[d.isoformat() for d in BookingService.blocked_dates(listing)],
        quote=BookingService.quote(listing.price, pickup, return_date),
        is_owner=listing.is_owned_by(AuthService.current_user_id()),
    )


@bp.post("")
@login_required
def dates_submit():
    car_id = request.form.get("id", "")
    listing = _listing_or_404(car_id)
    pickup = request.form.get("pickup", "")
    return_date = request.form.get("return", "")
    try:
        BookingService.check_dates(listing, pickup, return_date, AuthService.current_user_id())
    except RentEaseError as exc:
        flash(exc.message, "danger")
        return redirect(url_for("booking.dates_form", id=car_id, pickup=pickup or None,
                                **{"return": return_date or None}))
    return redirect(url_for("booking.payment_form", id=car_id, pickup=pickup, **{"return": return_date}))


@bp.get("/payment_options")
@login_required
def payment_form():
    """Step 3: payment method; the total shown is recomputed from the car's rate."""
    car_id = request.args.get("id", "")
    listing = _listing_or_404(car_id)
    pickup = request.args.get("pickup", "")
    return_date = request.args.get("return", "")
    return render_template(
        "booking/payment.html",
        car=listing,
        pickup=pickup,
        return_date=return_date,
        quote=BookingService.quote(listing.price, pickup, return_date),
        methods=PAYMENT_METHODS,
        selected=request.args.get("method", "card"),
    )


@bp.post("/payment_options")
@login_required
def payment_submit():
    car_id = request.form.get("id", "")
    if not session.get(DRIVER_KEY, {}).get(car_id):
        flash("Please enter the driver details first.", "danger")
        return redirect(url_for("booking.driver_form", id=car_id))
    pickup = request.form.get("pickup", "")
    return_date = request.form.get("return", "")
    method = request.form.get("method", "")

    ok, msg, _bid = BookingService.create_booking(
        renter_id=AuthService.current_user_id(),
        car_id=car_id,
        pickup=pickup,
        return_date=return_date,
        method=method,
        payment_form=request.form,
    )
    if not ok:
        flash(msg, "danger")
        return redirect(url_for("booking.payment_form", id=car_id, pickup=pickup,
                                method=method or None, **{"return": return_date}))

    drivers = dict(session.get(DRIVER_KEY, {}))
    drivers.pop(car_id, None)
    session[DRIVER_KEY] = drivers
    flash(msg, "success")
    return redirect(url_for("rentals.my_rentals"))
