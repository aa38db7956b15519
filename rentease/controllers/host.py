from flask import Blueprint, render_template, request, redirect, url_for, flash, abort

from ..exceptions import CarNotFoundError
from ..services.auth_service import AuthService
from ..services.host_service import HostService
from ..utils.constants import FUEL_TYPES, SEAT_OPTIONS, TRANSMISSIONS
from ..utils.decorators import login_required

bp = Blueprint("host", __name__, url_prefix="/host")


def _render_form(car, status=200):
    return render_template(
        "host/manage_listing.html",
        car=car,
        fuels=FUEL_TYPES,
        transmissions=TRANSMISSIONS,
        seat_options=SEAT_OPTIONS,
    ), status


@bp.get("")
@login_required
def dashboard():
    data = HostService.dashboard(AuthService.current_user_id())
    return render_template("host/dashboard.html", cars=data["cars"], stats=data["stats"])


@bp.get("/manage_listing")
@login_required
def manage_form():
    car_id = request.args.get("id")
    car = {}
    if car_id:
        try:
            car = HostService.listing_for_edit(car_id, AuthService.current_user_id())
        except CarNotFoundError:
            abort(404)
    return _render_form(car)


@bp.post("/manage_listing")
@login_required
def manage_submit():
    car_id = request.form.get("id") or None
    ok, msg, cid = HostService.save_listing(
        AuthService.current_user_id(),
        request.form,
        files=request.files.getlist("images"),
        kept_images=request.form.getlist("existing_images"),
        car_id=car_id,
    )
    if not ok:
        flash(msg, "danger")
        car = dict(request.form.items())
        car["id"] = car_id
        car["images"] = request.form.getlist("existing_images")
        return _render_form(car, 400)
    flash(msg, "success")
    return redirect(url_for("host.dashboard"))


@bp.post("/<car_id>/delete")
@login_required
def delete(car_id):
    ok, msg = HostService.delete_listing(car_id, AuthService.current_user_id())
    flash(msg, "success" if ok else "danger")
    return redirect(url_for("host.dashboard"))
