from flask import Blueprint, render_template, request, redirect, url_for, flash, session, abort

from ..exceptions import BookingNotFoundError
from ..services.auth_service import AuthService
from ..services.rental_service import RentalService
from ..services.review_service import ReviewService
from ..utils.decorators import login_required

bp = Blueprint("rentals", __name__, url_prefix="/my_rentals")

DISMISSED_KEY = "dismissed_review_prompts"


@bp.get("")
@login_required
def my_rentals():
    uid = AuthService.current_user_id()
    return render_template(
        "rentals/my_rentals.html",
        rentals=RentalService.my_rentals(uid),
        prompt=RentalService.review_prompt(uid, dismissed=session.get(DISMISSED_KEY, [])),
    )


@bp.get("/history")
@login_required
def history():
    return render_template("rentals/history.html",
                           rentals=RentalService.history(AuthService.current_user_id()))


@bp.get("/<booking_id>")
@login_required
def detail(booking_id):
    try:
        rental = RentalService.detail(booking_id, AuthService.current_user_id())
    except BookingNotFoundError:
        abort(404)
    return render_template("rentals/detail.html", rental=rental)


@bp.post("/<booking_id>/delete")
@login_required
def delete(booking_id):
    ok, msg = RentalService.delete_booking(booking_id, AuthService.current_user_id())
    flash(msg, "success" if ok else "danger")
    return redirect(url_for("rentals.my_rentals"))


@bp.post("/<booking_id>/review")
@login_required
def review_submit(booking_id):
    """Review submitted from the post-rental prompt."""
    ok, msg, _rid = ReviewService.submit(
        AuthService.current_user_id(),
        booking_id,
        request.form.get("rating"),
        request.form.get("comment", ""),
    )
    flash(msg, "success" if ok else "danger")
    return redirect(url_for("rentals.my_rentals"))


@bp.post("/<booking_id>/dismiss")
@login_required
def dismiss_prompt(booking_id):
    dismissed = list(session.get(DISMISSED_KEY, []))
    if booking_id not in dismissed:
        dismissed.append(booking_id)
    session[DISMISSED_KEY] = dismissed
    return redirect(url_for("rentals.my_rentals"))
