import os

os.environ["APP_ENV"] = "test"

import pytest

from rentease import create_app
from rentease.models.store import Store
from rentease.services.auth_service import AuthService
from rentease.services.content_service import ContentClient
from rentease.services.storage_service import StorageService


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload


class FakeContentSession:
    """
    Stands in for requests.Session against the content delivery API.
    Understands the query params ContentClient sends: content_type,
    sys.id, fields.<name> and limit.
    """

    def __init__(self, entries, assets=None, status_code=200):
        self.entries = entries
        self.assets = assets or []
        self.status_code = status_code
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        params = dict(params or {})
        self.calls.append((url, params))
        items = list(self.entries)
        if "content_type" in params:
            items = [e for e in items if e["sys"]["contentType"]["sys"]["id"] == params["content_type"]]
        if "sys.id" in params:
            items = [e for e in items if e["sys"]["id"] == params["sys.id"]]
        for key, value in params.items():
            if key.startswith("fields."):
                items = [e for e in items if e["fields"].get(key[len("fields."):]) == value]
        if params.get("limit"):
            items = items[: params["limit"]]
        return FakeResponse({"items": items, "includes": {"Asset": self.assets}}, self.status_code)


def fleet_entry(entry_id, model, price, slug=None, created="2026-01-01T10:00:00Z", **fields):
    data = {"modelName": model, "pricePerDay": price, "slug": slug or entry_id}
    data.update(fields)
    return {
        "sys": {"id": entry_id, "createdAt": created, "contentType": {"sys": {"id": "car"}}},
        "fields": data,
    }


def asset(asset_id, url):
    return {"sys": {"id": asset_id}, "fields": {"file": {"url": url}}}


def asset_link(asset_id):
    return {"sys": {"type": "Link", "linkType": "Asset", "id": asset_id}}


@pytest.fixture(autouse=True)
def store(tmp_path):
    """Fresh store, storage root and an unconfigured content client per test."""
    st = Store(tmp_path / "data.pkl")
    Store.reset_instance(st)
    StorageService.reset_instance(StorageService(tmp_path / "media"))
    ContentClient.reset_instance(ContentClient())
    yield st
    Store.reset_instance(None)
    StorageService.reset_instance(None)
    ContentClient.reset_instance(None)


@pytest.fixture
def storage():
    return StorageService.instance()


@pytest.fixture
def fleet():
    """Install a configured content client backed by a fake session."""
    def install(entries, assets=None, status_code=200):
        session = FakeContentSession(entries, assets, status_code)
        ContentClient.reset_instance(ContentClient(space_id="space", access_token="token", session=session))
        return session
    return install


@pytest.fixture
def app():
    app = create_app({"TESTING": True, "SECRET_KEY": "test-secret"})
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_user():
    def make(email="renter@example.com", password="secret1", full_name="Test Renter"):
        ok, msg, uid = AuthService.sign_up(email, password, full_name)
        assert ok, msg
        return uid
    return make


@pytest.fixture
def login(client):
    def do_login(email="renter@example.com", password="secret1", follow=False, **form):
        data = {"email": email, "password": password}
        data.update(form)
        return client.post("/login", data=data, follow_redirects=follow)
    return do_login


@pytest.fixture
def hosted_car(store):
    """Insert a hosted car row and return its id."""
    def make(owner_id, make="Volkswagen", model="Golf", price=50, location="Zagreb", **extra):
        row = {
            "owner_id": owner_id, "make": make, "model": model, "price_per_day": price,
            "location": location, "transmission": "manual", "seats": 5, "fuel": "Diesel",
            "images": [], "image_url": None,
        }
        row.update(extra)
        return store.insert("cars", row)
    return make
