"""Account sign up / sign in, session handling and one-time auth codes."""
from __future__ import annotations

import secrets
import threading
import time
from typing import Optional, Tuple

from flask import current_app, session
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from rentease.exceptions import AuthError
from rentease.services.common import _store
from rentease.utils.logging import get_logger
from rentease.utils.security import check_hash, generate_hash
from rentease.utils.validators import EMAIL_PATTERN

LOG = get_logger("rentease.auth")

MIN_PASSWORD_LENGTH = 6
AUTH_CODE_TTL = 600  # seconds
_AUTH_CODE_SALT = "rentease-auth-code"

# nonce -> time it was redeemed; entries older than AUTH_CODE_TTL are dropped
_USED_NONCES: dict[str, float] = {}
_NONCE_LOCK = threading.Lock()


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=_AUTH_CODE_SALT)


class AuthService:
    """Stands in for the hosted auth SDK: users table + Flask session."""

    @staticmethod
    def sign_up(email: str, password: str, full_name: str) -> Tuple[bool, str, Optional[str]]:
        email = (email or "").strip().lower()
        full_name = (full_name or "").strip()
        password = password or ""

        if not email or not password or not full_name:
            return False, "Full name, email and password are required.", None
        if not EMAIL_PATTERN.match(email):
            return False, "Unable to validate email address: invalid format", None
        if len(password) < MIN_PASSWORD_LENGTH:
            return False, f"Password should be at least {MIN_PASSWORD_LENGTH} characters.", None

        store = _store()
        if store.user_exists(email):
            return False, "User already registered", None

        uid = store.create_user(email, generate_hash(password), full_name)
        LOG.info("user signed up id=%s", uid)
        return True, "Registration successful! You can now log in.", uid

    @staticmethod
    def sign_in(email: str, password: str) -> Tuple[bool, str, Optional[dict]]:
        email = (email or "").strip().lower()
        if not email or not password:
            return False, "Email and password are required.", None
        user = _store().find_user(email)
        if not user or not check_hash(password, user["password_hash"]):
            LOG.info("failed sign in for %s", email)
            return False, "Invalid login credentials", None
        AuthService.start_session(user)
        AuthService.ensure_profile(user)
        return True, "Signed in", user

    @staticmethod
    def start_session(user: dict) -> None:
        session.clear()
        session["uid"] = user["id"]
        session["email"] = user["email"]
        session["full_name"] = (user.get("user_metadata") or {}).get("full_name") or ""

    @staticmethod
    def sign_out() -> None:
        session.clear()

    @staticmethod
    def current_user_id() -> Optional[str]:
        uid = session.get("uid")
        if uid and _store().get("users", uid):
            return uid
        return None

    # ---------- Auth codes ----------
    @staticmethod
    def issue_auth_code(user_id: str) -> str:
        """Signed single-use code redeemable at the auth callback."""
        return _serializer().dumps({"uid": user_id, "nonce": secrets.token_urlsafe(8)})

    @staticmethod
    def exchange_code_for_session(code: str) -> dict:
        """Redeem a code, start a session for its user and return the user row."""
        try:
            payload = _serializer().loads(code, max_age=AUTH_CODE_TTL)
        except SignatureExpired as exc:
            raise AuthError("Auth code has expired") from exc
        except BadSignature as exc:
            raise AuthError("Invalid auth code") from exc

        nonce = payload.get("nonce") if isinstance(payload, dict) else None
        if not nonce:
            raise AuthError("Invalid auth code")
        now = time.time()
        with _NONCE_LOCK:
            for old in [n for n, used_at in _USED_NONCES.items() if now - used_at > AUTH_CODE_TTL]:
                del _USED_NONCES[old]
            if nonce in _USED_NONCES:
                raise AuthError("Auth code already used")
            _USED_NONCES[nonce] = now

        user = _store().get("users", payload.get("uid"))
        if not user:
            raise AuthError("User not found")
        AuthService.start_session(user)
        return user

    @staticmethod
    def ensure_profile(user: dict) -> dict:
        """Make sure a profile row exists for ``user`` (id = user id)."""
        full_name = (user.get("user_metadata") or {}).get("full_name")
        values = {"full_name": full_name} if full_name else {}
        existing = _store().get("profiles", user["id"])
        if existing and existing.get("full_name"):
            values = {}
        return _store().upsert_profile(user["id"], values)
