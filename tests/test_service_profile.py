import io
from datetime import date

import pytest
from werkzeug.datastructures import FileStorage

from rentease.exceptions import ProfileNotFoundError, StorageError, ValidationError
from rentease.services.profile_service import ProfileService
from rentease.utils.validators import validate_contact, validate_license, validate_profile

TODAY = date(2026, 5, 10)


def _file(name="photo.jpg"):
    return FileStorage(stream=io.BytesIO(b"data"), filename=name)


@pytest.mark.parametrize("name,error", [
    ("Ana", "at least 4"),
    ("Ana2 Horvat", "numbers"),
    ("AnaHorvat", "First and Last"),
])
def test_validate_profile_name(name, error):
    assert error in validate_profile(name)["full_name"]


@pytest.mark.parametrize("phone,error", [
    ("091/123 456", "only contain"),
    ("12-34", "too short"),
    ("+385 91 123 4567 8901 23", "too long"),
])
def test_validate_profile_phone(phone, error):
    assert error in validate_profile("Ana Horvat", phone)["phone"]


def test_validate_profile_accepts_good_values():
    assert validate_profile("Ana Horvat", "+385 91-123-4567", "Zagreb") == {}
    assert validate_profile("Ana Horvat", "", "") == {}
    assert "location" in validate_profile("Ana Horvat", "", "ZG")


def test_validate_license():
    assert validate_license("AB12345", "2030-01-01", "Croatia", True, TODAY) == {}
    errors = validate_license("AB1", "2020-01-01", "Narnia", False, TODAY)
    assert set(errors) == {"license_number", "license_expiry", "license_country", "file"}
    assert "expired" in errors["license_expiry"]
    assert "required" in validate_license("AB12345", "", "Croatia", True, TODAY)["license_expiry"]
    assert validate_license("AB12345", TODAY.isoformat(), "Croatia", True, TODAY) == {}


def test_validate_contact():
    assert validate_contact("booking", "Ana", "ana@example.com", "Hi") == {}
    assert set(validate_contact("other", "", "nope", " ")) == {"topic", "name", "email", "message"}


def test_get_profile_creates_missing_row(store, make_user):
    uid = make_user("ana@example.com", full_name="Ana Horvat")
    profile = ProfileService.get_profile(uid)
    assert profile.full_name == "Ana Horvat"
    assert profile.email == "ana@example.com"
    assert store.get("profiles", uid)


def test_get_profile_unknown_user():
    with pytest.raises(ProfileNotFoundError):
        ProfileService.get_profile("nobody")


def test_update_profile(store, make_user):
    uid = make_user()
    profile = ProfileService.update_profile(uid, {
        "full_name": "Ana Horvat", "phone": "091 123 4567", "location": "Zagreb",
        "date_of_birth": "1990-04-02",
    })
    assert profile.phone == "091 123 4567"
    assert store.get("profiles", uid)["date_of_birth"] == "1990-04-02"


def test_update_profile_rejects_invalid(store, make_user):
    uid = make_user(full_name="Ana Horvat")
    with pytest.raises(ValidationError) as exc:
        ProfileService.update_profile(uid, {"full_name": "Ana", "phone": "abc", "date_of_birth": "soon"})
    assert set(exc.value.errors) == {"full_name", "phone", "date_of_birth"}
    assert store.get("profiles", uid) is None


def test_upload_avatar_replaces_previous(store, storage, make_user):
    uid = make_user()
    first = ProfileService.upload_avatar(uid, _file("a.png"))
    storage.upload("avatars", f"{uid}/stale.jpg", b"old")
    second = ProfileService.upload_avatar(uid, _file("b.jpg"))

    names = storage.list("avatars", uid)
    assert len(names) == 1 and names[0].startswith("avatar-") and names[0].endswith(".jpg")
    assert second.startswith(f"/media/avatars/{uid}/avatar-")
    assert first != second
    assert store.get("profiles", uid)["avatar_url"] == second


def test_upload_avatar_requires_image(make_user):
    uid = make_user()
    with pytest.raises(StorageError):
        ProfileService.upload_avatar(uid, _file("cv.pdf"))
    with pytest.raises(StorageError):
        ProfileService.upload_avatar(uid, None)


def test_verify_license_sets_verified(store, storage, make_user):
    uid = make_user()
    profile = ProfileService.verify_license(uid, {
        "license_number": "HR-12345", "license_expiry": "2030-12-31", "license_country": "Croatia",
    }, _file("licence.jpg"), today=TODAY)
    assert profile.is_verified
    assert profile.license_is_current(TODAY)
    assert profile.license_image_url.startswith("/media/licenses/")
    assert len(storage.list("licenses")) == 1


def test_verify_license_rejects_invalid(store, make_user):
    uid = make_user()
    with pytest.raises(ValidationError) as exc:
        ProfileService.verify_license(uid, {"license_number": "HR-12345", "license_expiry": "2030-12-31",
                                            "license_country": "Croatia"}, None, today=TODAY)
    assert set(exc.value.errors) == {"file"}
    assert not (store.get("profiles", uid) or {}).get("is_verified")
