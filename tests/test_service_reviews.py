import pytest

from rentease.services.review_service import ReviewService


@pytest.fixture
def past_booking(store, hosted_car, make_user):
    uid = make_user("ivo@example.com", full_name="Ivo Ivic")
    cid = hosted_car("host-1", make="Tesla", model="Model 3")
    bid = store.insert("bookings", {
        "car_id": cid, "renter_id": uid, "start_date": "2026-01-01", "end_date": "2026-01-03",
        "total_price": 100, "status": "confirmed",
    })
    return uid, cid, bid


def test_submit_stores_review_with_name_fallback(store, past_booking):
    uid, cid, bid = past_booking
    ok, _msg, rid = ReviewService.submit(uid, bid, "9", "  Great car  ")
    assert ok
    row = store.get("reviews", rid)
    assert row["rating"] == 5
    assert row["comment"] == "Great car"
    assert row["car_id"] == cid
    assert row["car_model"] == "Tesla Model 3"
    assert row["user_name"] == "ivo"


def test_submit_uses_profile_full_name(store, past_booking):
    uid, _cid, bid = past_booking
    store.upsert_profile(uid, {"full_name": "Ivo Ivic"})
    _ok, _msg, rid = ReviewService.submit(uid, bid, 4)
    assert store.get("reviews", rid)["user_name"] == "Ivo Ivic"


@pytest.mark.parametrize("rating", [0, "0", "", None, "-2", "abc"])
def test_submit_requires_positive_rating(past_booking, rating):
    uid, _cid, bid = past_booking
    ok, msg, rid = ReviewService.submit(uid, bid, rating)
    assert not ok and rid is None and "rating" in msg



def test_submit_accepts_decimal_rating(store, past_booking):
    uid, _cid, bid = past_booking
    ok, msg, rid = ReviewService.submit(uid, bid, "4.5")
    assert ok, msg
    assert store.get("reviews", rid)["rating"] == 4.5

    _ok, _msg, rid = ReviewService.submit(uid, bid, "0.1")
    assert store.get("reviews", rid)["rating"] == 0.1

def test_submit_requires_own_booking(past_booking):
    _uid, _cid, bid = past_booking
    ok, _msg, _ = ReviewService.submit("someone-else", bid, 5)
    assert not ok


def test_summary_breakdown_and_average(store):
    for rating in (5, 5, 4, 1):
        store.insert("reviews", {"car_id": "c", "rating": rating})
    s = ReviewService.summary()
    assert s["total"] == 4
    assert s["average"] == "3.8"
    by_stars = {row["stars"]: (row["count"], row["percent"]) for row in s["breakdown"]}
    assert by_stars == {5: (2, 50), 4: (1, 25), 3: (0, 0), 2: (0, 0), 1: (1, 25)}


def test_summary_percent_half_rounds_up(store):
    for rating in (5, 4, 4, 4, 4, 4, 4, 4):
        store.insert("reviews", {"car_id": "c", "rating": rating})
    s = ReviewService.summary()
    # 1/8 = 12.5% -> 13, 7/8 = 87.5% -> 88
    assert s["breakdown"][0]["percent"] == 13
    assert s["breakdown"][1]["percent"] == 88



def test_summary_buckets_decimal_ratings_by_nearest_star(store):
    for rating in (4.5, 4.4, 1.5, 0.4):
        store.insert("reviews", {"car_id": "c", "rating": rating})
    s = ReviewService.summary()
    by_stars = {row["stars"]: row["count"] for row in s["breakdown"]}
    assert by_stars == {5: 1, 4: 1, 3: 0, 2: 1, 1: 0}
    assert s["average"] == "2.7"

def test_summary_when_empty():
    s = ReviewService.summary()
    assert s["average"] == "0.0"
    assert all(row["count"] == 0 and row["percent"] == 0 for row in s["breakdown"])


def test_all_reviews_newest_first_with_author(store):
    store.insert("profiles", {"id": "u1", "full_name": "Ana Horvat"})
    store.insert("reviews", {"renter_id": "u1", "rating": 5, "created_at": "2026-01-01T00:00:00+00:00"})
    store.insert("reviews", {"renter_id": "u2", "user_name": "marko", "rating": 3,
                             "created_at": "2026-02-01T00:00:00+00:00"})
    assert [r["author"] for r in ReviewService.all_reviews()] == ["marko", "Ana Horvat"]
