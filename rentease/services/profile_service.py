"""Profile view/edit, avatar upload and driving licence verification."""

import secrets
from datetime import date
from typing import Optional

from werkzeug.datastructures import FileStorage

from rentease.exceptions import ProfileNotFoundError, StorageError, ValidationError
from rentease.models.profile import Profile
from rentease.services.common import _now, _store, _today, profile_from_dict
from rentease.services.storage_service import _storage, file_extension, is_image_upload
from rentease.utils.constants import Bucket
from rentease.utils.logging import get_logger
from rentease.utils.validators import validate_license, validate_profile

LOG = get_logger("rentease.profile")


class ProfileService:

    @staticmethod
    def get_profile(user_id: str, store=None) -> Profile:
        st = store or _store()
        user = st.get("users", user_id)
        if not user:
            raise ProfileNotFoundError()
        row = st.get("profiles", user_id)
        if row is None:
            full_name = (user.get("user_metadata") or {}).get("full_name")
            row = st.upsert_profile(user_id, {"full_name": full_name} if full_name else {})
        return profile_from_dict(row, email=user["email"])

    @staticmethod
    def update_profile(user_id: str, form, store=None) -> Profile:
        """Validate and save the editable fields; raise ValidationError on bad input."""
        st = store or _store()
        values = {
            "full_name": (form.get("full_name") or "").strip(),
            "phone": (form.get("phone") or "").strip(),
            "location": (form.get("location") or "").strip(),
            "date_of_birth": (form.get("date_of_birth") or "").strip() or None,
        }
        errors = validate_profile(values["full_name"], values["phone"], values["location"])
        if values["date_of_birth"]:
            try:
                date.fromisoformat(values["date_of_birth"])
            except ValueError:
                errors["date_of_birth"] = "Date of birth is invalid."
        if errors:
            raise ValidationError(errors)

        ProfileService.get_profile(user_id, store=st)
        st.upsert_profile(user_id, values)
        LOG.info("profile updated id=%s", user_id)
        return ProfileService.get_profile(user_id, store=st)

    @staticmethod
    def upload_avatar(user_id: str, file: Optional[FileStorage], store=None) -> str:
        """Replace the user's avatar; return its public URL."""
        if not is_image_upload(file):
            raise StorageError("Please choose an image file.")
        st = store or _store()
        storage = _storage()

        old = [f"{user_id}/{name}" for name in storage.list(Bucket.AVATARS, user_id)]
        if old:
            storage.remove(Bucket.AVATARS, old)

        stamp = int(_now().timestamp() * 1000)
        path = storage.upload(Bucket.AVATARS, f"{user_id}/avatar-{stamp}.{file_extension(file.filename)}", file)
        url = storage.public_url(Bucket.AVATARS, path)
        st.upsert_profile(user_id, {"avatar_url": url})
        LOG.info("avatar updated id=%s", user_id)
        return url

    @staticmethod
    def verify_license(user_id: str, form, file: Optional[FileStorage],
                       today: Optional[date] = None, store=None) -> Profile:
        st = store or _store()
        number = (form.get("license_number") or "").strip()
        expiry = (form.get("license_expiry") or "").strip()
        country = form.get("license_country") or ""
        has_file = bool(file and file.filename)

        errors = validate_license(number, expiry, country, has_file, today or _today())
        if has_file and "file" not in errors and not is_image_upload(file):
            errors["file"] = "Please upload an image file."
        if errors:
            raise ValidationError(errors)

        storage = _storage()
        name = f"{user_id}-license-{secrets.token_hex(8)}.{file_extension(file.filename)}"
        path = storage.upload(Bucket.LICENSES, name, file)
        st.upsert_profile(user_id, {
            "license_number": number,
            "license_expiry": expiry,
            "license_country": country,
            "license_image_url": storage.public_url(Bucket.LICENSES, path),
            "is_verified": True,
        })
        LOG.info("licence verified id=%s country=%s", user_id, country)
        return ProfileService.get_profile(user_id, store=st)
