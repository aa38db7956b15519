from dataclasses import asdict

from flask import Blueprint, render_template, request, redirect, url_for, flash

from ..exceptions import StorageError, ValidationError
from ..services.auth_service import AuthService
from ..services.common import _today
from ..services.profile_service import ProfileService
from ..utils.constants import LICENSE_COUNTRIES
from ..utils.decorators import login_required

bp = Blueprint("profile", __name__, url_prefix="/profile")


@bp.get("")
@login_required
def view():
    profile = ProfileService.get_profile(AuthService.current_user_id())
    return render_template("profile/view.html", profile=profile,
                           license_current=profile.license_is_current(_today()))


@bp.get("/edit")
@login_required
def edit_form():
    profile = ProfileService.get_profile(AuthService.current_user_id())
    return render_template("profile/edit.html", form=asdict(profile), errors={})


@bp.post("/edit")
@login_required
def edit_submit():
    try:
        ProfileService.update_profile(AuthService.current_user_id(), request.form)
    except ValidationError as exc:
        flash(exc.message, "danger")
        return render_template("profile/edit.html", form=request.form, errors=exc.errors), 400
    flash("Profile updated successfully!", "success")
    return redirect(url_for("profile.view"))


@bp.post("/avatar")
@login_required
def avatar_upload():
    try:
        ProfileService.upload_avatar(AuthService.current_user_id(), request.files.get("avatar"))
    except StorageError as exc:
        flash(exc.message, "danger")
    else:
        flash("Profile picture updated!", "success")
    return redirect(url_for("profile.view"))


@bp.get("/verify_license")
@login_required
def verify_form():
    return render_template("profile/verify_license.html", form={}, errors={}, countries=LICENSE_COUNTRIES)


@bp.post("/verify_license")
@login_required
def verify_submit():
    try:
        ProfileService.verify_license(AuthService.current_user_id(), request.form, request.files.get("file"))
    except ValidationError as exc:
        return render_template("profile/verify_license.html", form=request.form, errors=exc.errors,
                               countries=LICENSE_COUNTRIES), 400
    except StorageError as exc:
        flash(exc.message, "danger")
        return redirect(url_for("profile.verify_form"))
    flash("License verification submitted successfully!", "success")
    return redirect(url_for("profile.view"))
