from urllib.parse import parse_qs, urlsplit

from flask import Blueprint, render_template, request, redirect, url_for, flash

from ..exceptions import AuthError
from ..services.auth_service import AuthService
from ..utils.decorators import anonymous_required
from ..utils.logging import get_logger
from ..utils.security import safe_next

bp = Blueprint("auth", __name__, url_prefix="/")

LOG = get_logger("rentease.auth")

DEFAULT_AFTER_LOGIN = "/profile"


def _return_url(source) -> str:
    """Relative destination from ``returnUrl`` or ``redirect``, else ''."""
    raw = source.get("returnUrl") or source.get("redirect") or ""
    return safe_next(raw, default="")


@bp.get("login")
@anonymous_required
def login_form():
    return render_template(
        "auth/login.html",
        return_url=_return_url(request.args),
        email=request.args.get("email", ""),
        signup_complete=request.args.get("signup_complete") == "1",
        oauth_error=request.args.get("oauth_error") == "1",
        oauth_msg=request.args.get("msg", ""),
    )


@bp.post("login")
def login_submit():
    email = request.form.get("email", "")
    password = request.form.get("password", "")
    return_url = _return_url(request.form)

    ok, msg, _user = AuthService.sign_in(email, password)
    if not ok:
        flash(msg, "danger")
        return redirect(url_for("auth.login_form", returnUrl=return_url or None, email=email or None))
    return redirect(return_url or DEFAULT_AFTER_LOGIN)


@bp.get("signup")
@anonymous_required
def signup_form():
    return render_template("auth/signup.html", return_url=_return_url(request.args))


@bp.post("signup")
def signup_submit():
    AuthService.sign_out()
    return_url = _return_url(request.form)

    ok, msg, uid = AuthService.sign_up(
        request.form.get("email", ""),
        request.form.get("password", ""),
        request.form.get("full_name", ""),
    )
    if not ok:
        flash(msg, "danger")
        return redirect(url_for("auth.signup_form", returnUrl=return_url or None))

    next_url = url_for("auth.login_form", returnUrl=return_url or None)
    return redirect(url_for("auth.callback", code=AuthService.issue_auth_code(uid), next=next_url))


@bp.get("auth/callback")
def callback():
    """Redeem an auth code, make sure the profile exists, then continue to ``next``."""
    code = request.args.get("code")
    next_url = safe_next(request.args.get("next"), default=DEFAULT_AFTER_LOGIN)
    if not code:
        return redirect(url_for("auth.login_form", oauth_error=1))

    try:
        user = AuthService.exchange_code_for_session(code)
    except AuthError as exc:
        LOG.warning("auth code exchange failed: %s", exc.message)
        return redirect(url_for("auth.login_form", oauth_error=1, msg=exc.message))

    AuthService.ensure_profile(user)

    if next_url.startswith("/login"):
        AuthService.sign_out()
        return_url = parse_qs(urlsplit(next_url).query).get("returnUrl", [None])[0]
        return redirect(url_for(
            "auth.login_form",
            signup_complete=1,
            email=user["email"],
            returnUrl=safe_next(return_url, default="") or None,
        ))
    return redirect(next_url)


@bp.get("logout")
def logout():
    AuthService.sign_out()
    flash("You have been signed out.", "info")
    return redirect(url_for("views.home"))
