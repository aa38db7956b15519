from functools import wraps

from flask import redirect, request, url_for

from ..services.auth_service import AuthService


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not AuthService.current_user_id():
            return redirect(url_for("auth.login_form", redirect=request.full_path.rstrip("?")))
        return fn(*args, **kwargs)

    return wrapper


def anonymous_required(fn):
    """Send signed-in users away from the login and signup pages."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if AuthService.current_user_id():
            return redirect(url_for("views.home"))
        return fn(*args, **kwargs)

    return wrapper
