"""
Catalog merge of fleet (content API) and hosted (store) cars, browse filters,
pagination and car detail lookup.
"""
import pytest

from conftest import asset, asset_link, fleet_entry
from rentease.exceptions import CarNotFoundError
from rentease.services.catalog_service import CatalogService
from rentease.services.common import normalize_transmission
from rentease.utils.constants import PLACEHOLDER, Source


@pytest.fixture
def two_fleet_cars(fleet):
    entries = [
        fleet_entry("e-bmw", "BMW X5", 120, slug="bmw-x5", created="2026-02-01T00:00:00Z",
                    location="Zagreb", transmission="Automatic 8-speed", seats=5, type="SUV",
                    images=[asset_link("a1"), asset_link("missing")]),
        fleet_entry("e-fiat", "Fiat 500", 35, slug="fiat-500", created="2026-01-01T00:00:00Z"),
    ]
    return fleet(entries, assets=[asset("a1", "//images.example/bmw.jpg")])


@pytest.mark.parametrize("raw,expected", [
    (None, "Manual"), ("", "Manual"), ("AUTOMATIC", "Automatic"),
    ("semi-auto", "Automatic"), ("manual 6", "Manual"), ("cvt", "Manual"),
])
def test_normalize_transmission(raw, expected):
    assert normalize_transmission(raw) == expected


def test_all_cars_merges_fleet_then_hosted(two_fleet_cars, hosted_car):
    hosted_car("host-1", make="Tesla", model="Model 3", price=110)
    cars = CatalogService.all_cars()

    assert [c["model"] for c in cars] == ["BMW X5", "Fiat 500", "Tesla Model 3"]
    bmw, fiat, tesla = cars
    assert bmw["source"] == Source.FLEET and bmw["source_label"] == "RentEase Fleet"
    assert bmw["image"] == "https://images.example/bmw.jpg"
    assert bmw["images"] == ["https://images.example/bmw.jpg"]
    assert bmw["transmission"] == "Automatic"
    assert bmw["type"] == "SUV" and bmw["owner_id"] is None

    assert fiat["type"] == "Sedan"
    assert fiat["location"] == "Unknown"
    assert fiat["seats"] == 5
    assert fiat["image"] == PLACEHOLDER

    assert tesla["source"] == Source.HOSTED and tesla["source_label"] == "Private Host"
    assert tesla["type"] == "Car" and tesla["owner_id"] == "host-1"
    assert tesla["image"] == PLACEHOLDER


def test_content_api_failure_degrades_to_hosted_only(fleet, hosted_car):
    fleet([fleet_entry("e1", "BMW X5", 120)], status_code=500)
    hosted_car("host-1")
    cars = CatalogService.all_cars()
    assert [c["source"] for c in cars] == [Source.HOSTED]


def test_review_stats_match_id_or_model(store, hosted_car):
    cid = hosted_car("host-1", make="Tesla", model="Model 3")
    store.insert("reviews", {"car_id": cid, "rating": 5})
    store.insert("reviews", {"car_id": "other", "car_model": "Tesla Model 3", "rating": 4})
    store.insert("reviews", {"car_id": "other", "car_model": "Fiat 500", "rating": 1})

    car = CatalogService.all_cars()[0]
    assert car["reviews"] == 2
    assert car["rating"] == 4.5


def test_review_stats_without_reviews():
    assert CatalogService.review_stats([], "x", "y") == {"rating": 0, "reviews": 0}


def _cars():
    return [
        {"id": "1", "model": "BMW X5", "type": "SUV", "location": "Zagreb", "price": 120,
         "transmission": "Automatic", "seats": 5, "owner_id": None},
        {"id": "2", "model": "Fiat 500", "type": "Sedan", "location": "Split", "price": 35,
         "transmission": "Manual", "seats": 4, "owner_id": None},
        {"id": "3", "model": "Renault Trafic", "type": "Car", "location": "Novi Zagreb", "price": 85,
         "transmission": "Manual", "seats": 8, "owner_id": "me"},
    ]


def test_filter_hides_viewer_own_cars():
    ids = [c["id"] for c in CatalogService.filter_cars(_cars(), viewer_id="me")]
    assert ids == ["1", "2"]


def test_filter_location_is_case_insensitive_substring():
    ids = [c["id"] for c in CatalogService.filter_cars(_cars(), location="zagreb")]
    assert ids == ["1", "3"]


def test_filter_query_matches_model_or_type():
    assert [c["id"] for c in CatalogService.filter_cars(_cars(), query="suv")] == ["1"]
    assert [c["id"] for c in CatalogService.filter_cars(_cars(), query="fiat")] == ["2"]


def test_filter_price_range_inclusive_with_defaults_for_garbage():
    ids = [c["id"] for c in CatalogService.filter_cars(_cars(), min_price="35", max_price="85")]
    assert ids == ["2", "3"]
    ids = [c["id"] for c in CatalogService.filter_cars(_cars(), min_price="abc", max_price="")]
    assert ids == ["1", "2", "3"]


def test_filter_transmission_and_seats():
    assert [c["id"] for c in CatalogService.filter_cars(_cars(), transmission="manual")] == ["2", "3"]
    assert [c["id"] for c in CatalogService.filter_cars(_cars(), seats="8")] == ["3"]
    assert len(CatalogService.filter_cars(_cars(), transmission="any", seats="any")) == 3


def test_paginate_six_per_page_and_clamps():
    items = [{"id": str(i)} for i in range(14)]
    page = CatalogService.paginate(items, 2)
    assert [i["id"] for i in page["items"]] == [str(i) for i in range(6, 12)]
    assert page["total_pages"] == 3 and page["total"] == 14

    assert CatalogService.paginate(items, 99)["page"] == 3
    assert CatalogService.paginate(items, -4)["page"] == 1
    assert CatalogService.paginate(items, "x")["page"] == 1

    empty = CatalogService.paginate([], 5)
    assert empty["page"] == 1 and empty["total_pages"] == 0 and empty["items"] == []


def test_browse_end_to_end(two_fleet_cars, hosted_car):
    hosted_car("me", make="Tesla", model="Model 3", location="Zagreb")
    result = CatalogService.browse(location="zag", viewer_id="me")
    assert [c["model"] for c in result["items"]] == ["BMW X5"]


def test_get_car_hosted_first(store, hosted_car):
    cid = hosted_car("host-1", make="Tesla", model="Model 3", description="Fast")
    store.insert("profiles", {"id": "r1", "full_name": "Ivo Ivic"})
    store.insert("reviews", {"car_id": cid, "renter_id": "r1", "rating": 4, "comment": "Nice",
                             "created_at": "2026-03-01T10:00:00+00:00"})
    store.insert("reviews", {"car_id": cid, "renter_id": "ghost", "user_name": "", "rating": 2,
                             "created_at": "2026-03-02T10:00:00+00:00"})

    car = CatalogService.get_car(cid)
    assert car["model"] == "Tesla Model 3"
    assert car["description"] == "Fast"
    assert car["reviews"] == 2 and car["rating"] == 3
    assert [r["author"] for r in car["reviews_list"]] == ["Verified User", "Ivo Ivic"]


def test_get_car_fleet_by_id_or_slug(two_fleet_cars, store):
    store.insert("reviews", {"car_id": "bmw-x5", "rating": 5})
    by_slug = CatalogService.get_car("bmw-x5")
    by_id = CatalogService.get_car("e-bmw")
    assert by_slug["id"] == by_id["id"] == "e-bmw"
    assert by_slug["reviews"] == 1


def test_get_car_unknown_raises(two_fleet_cars):
    with pytest.raises(CarNotFoundError):
        CatalogService.get_car("nope")


def test_car_summary_unknown_car():
    summary = CatalogService.car_summary("missing")
    assert summary["name"] == "Unknown Car" and summary["found"] is False
