from flask import Blueprint, render_template, request, redirect, url_for, flash, session

from ..services.auth_service import AuthService
from ..services.catalog_service import CatalogService
from ..services.common import _store
from ..utils.constants import SUPPORT_TOPICS, Source
from ..utils.logging import get_logger
from ..utils.validators import validate_contact

bp = Blueprint("views", __name__)

LOG = get_logger("rentease.views")

POPULAR_LIMIT = 3


@bp.app_context_processor
def inject_current_user():
    uid = AuthService.current_user_id()
    profile = _store().get("profiles", uid) if uid else None
    return {
        "current_uid": uid,
        "current_email": session.get("email") if uid else None,
        "current_avatar": (profile or {}).get("avatar_url"),
    }


@bp.get("/")
def home():
    fleet = [c for c in CatalogService.all_cars() if c["source"] == Source.FLEET]
    return render_template("home.html", popular=fleet[:POPULAR_LIMIT])


@bp.get("/support")
def support():
    return render_template("support/index.html")


@bp.get("/support/insurance")
def insurance():
    return render_template("support/insurance.html")


@bp.get("/support/contact")
def contact_form():
    return render_template("support/contact.html", topics=SUPPORT_TOPICS, form={}, errors={})


@bp.post("/support/contact")
def contact_submit():
    form = {k: (request.form.get(k) or "").strip() for k in ("topic", "name", "email", "message")}
    errors = validate_contact(form["topic"], form["name"], form["email"], form["message"])
    if errors:
        flash("Please fill in all required fields.", "danger")
        return render_template("support/contact.html", topics=SUPPORT_TOPICS, form=form, errors=errors), 400

    LOG.info("contact request topic=%s email=%s", form["topic"], form["email"])
    flash("Thank you! Our support team will get back to you within 24 hours.", "success")
    return redirect(url_for("views.contact_form"))


@bp.app_errorhandler(404)
def not_found(_err):
    return render_template("not_found.html"), 404
