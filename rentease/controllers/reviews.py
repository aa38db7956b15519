from flask import Blueprint, render_template, request, redirect, url_for, flash

from ..services.auth_service import AuthService
from ..services.review_service import ReviewService
from ..utils.decorators import login_required

bp = Blueprint("reviews", __name__, url_prefix="/reviews")


@bp.get("")
def index():
    return render_template("reviews/list.html", summary=ReviewService.summary())


@bp.get("/review")
@login_required
def write_form():
    uid = AuthService.current_user_id()
    return render_template(
        "reviews/write.html",
        rentals=ReviewService.reviewable_rentals(uid),
        recent=ReviewService.recent_by_user(uid),
        selected=request.args.get("booking", ""),
    )


@bp.post("/review")
@login_required
def write_submit():
    ok, msg, _rid = ReviewService.submit(
        AuthService.current_user_id(),
        request.form.get("booking_id", ""),
        request.form.get("rating"),
        request.form.get("comment", ""),
    )
    if not ok:
        flash(msg, "danger")
        return redirect(url_for("reviews.write_form", booking=request.form.get("booking_id") or None))
    flash(msg, "success")
    return redirect(url_for("reviews.index"))
