import io

import pytest
from werkzeug.datastructures import FileStorage

from rentease.exceptions import StorageError


def test_upload_list_remove(storage):
    path = storage.upload("avatars", "u1/avatar-1.png", b"png-bytes")
    assert path == "u1/avatar-1.png"
    assert storage.list("avatars", "u1") == ["avatar-1.png"]
    assert storage.public_url("avatars", path) == "/media/avatars/u1/avatar-1.png"

    assert storage.remove("avatars", ["u1/avatar-1.png", "u1/missing.png"]) == ["u1/avatar-1.png"]
    assert storage.list("avatars", "u1") == []


def test_upload_existing_object_requires_upsert(storage):
    storage.upload("licenses", "a.jpg", b"1")
    with pytest.raises(StorageError) as exc:
        storage.upload("licenses", "a.jpg", b"2")
    assert exc.value.message == "The resource already exists"
    storage.upload("licenses", "a.jpg", b"3", upsert=True)
    assert storage.object_path("licenses", "a.jpg").read_bytes() == b"3"


def test_upload_file_storage(storage):
    f = FileStorage(stream=io.BytesIO(b"jpeg"), filename="car.jpg")
    path = storage.upload("car-images", "host-1.jpg", f)
    assert storage.object_path("car-images", path).read_bytes() == b"jpeg"


def test_unknown_bucket_and_traversal(storage):
    with pytest.raises(StorageError):
        storage.upload("secrets", "a.txt", b"x")
    # dot segments are dropped, so the object stays inside the bucket
    path = storage.upload("avatars", "../../escape.png", b"x")
    assert path == "escape.png"
    with pytest.raises(StorageError):
        storage.upload("avatars", "../..", b"x")


def test_media_route_serves_objects(client, storage):
    storage.upload("avatars", "u1/a.png", b"png-bytes")
    r = client.get("/media/avatars/u1/a.png")
    assert r.status_code == 200
    assert r.data == b"png-bytes"
    r.close()


@pytest.mark.parametrize("url", [
    "/media/avatars/u1/missing.png",
    "/media/secrets/a.png",
    "/media/avatars/../data.pkl",
])
def test_media_route_404s(client, url):
    assert client.get(url).status_code == 404
