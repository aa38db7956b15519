from flask import Blueprint, render_template, request, abort

from ..exceptions import CarNotFoundError
from ..services.auth_service import AuthService
from ..services.booking_service import BookingService
from ..services.catalog_service import CatalogService
from ..utils.constants import DEFAULT_MAX_PRICE, DEFAULT_MIN_PRICE, SEAT_OPTIONS

bp = Blueprint("cars", __name__, url_prefix="/browse_cars")


@bp.get("")
def browse():
    """Merged catalog with filters; empty params mean "no filter"."""
    args = {k: (v or "").strip() for k, v in request.args.items()}
    filters = {
        "location": args.get("location", ""),
        "query": args.get("q", ""),
        "min_price": args.get("min") or DEFAULT_MIN_PRICE,
        "max_price": args.get("max") or DEFAULT_MAX_PRICE,
        "transmission": args.get("transmission") or "any",
        "seats": args.get("seats") or "any",
    }
    result = CatalogService.browse(
        viewer_id=AuthService.current_user_id(),
        page=args.get("page") or 1,
        **filters,
    )
    return render_template(
        "cars/browse.html",
        result=result,
        filters=filters,
        seat_options=SEAT_OPTIONS,
        args={k: v for k, v in args.items() if v and k != "page"},
    )


@bp.get("/<car_id>")
def detail(car_id):
    try:
        car = CatalogService.get_car(car_id)
    except CarNotFoundError:
        abort(404)
    uid = AuthService.current_user_id()
    return render_template(
        "cars/detail.html",
        car=car,
        is_owner=bool(uid and car["owner_id"] == uid),
        blocked=[d.isoformat() for d in BookingService.blocked_dates((car["id"], car["slug"]))],
    )
