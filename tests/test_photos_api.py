import io
import os

import pytest
from PIL import Image

from app.core.config import settings
from app.services import photo_storage
from app.services.photo_storage import PhotoValidationError


def _png(width=40, height=30) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 40, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


def _upload(client, content=None, content_type="image/png", name="front.png", **form):
    return client.post(
        "/photos",
        files={"file": (name, content if content is not None else _png(), content_type)},
        data=form,
    )


def test_upload_photo(client):
    response = _upload(client, notes="Week 1", captureDate="2026-03-01T08:00:00Z", userId="7")

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["filename"].startswith("photo_")
    assert data["filename"].endswith("_7.png")
    assert data["originalName"] == "front.png"
    assert data["notes"] == "Week 1"
    assert data["mimeType"] == "image/png"
    assert (data["width"], data["height"]) == (40, 30)
    assert os.path.isfile(os.path.join(settings.PHOTO_STORAGE_PATH, "user_7", data["filename"]))


def test_upload_rejects_wrong_type(client):
    response = _upload(client, content=b"GIF89a", content_type="image/gif", name="anim.gif")

    assert response.status_code == 400


def test_upload_rejects_large_file(client):
    too_big = b"\0" * (settings.max_photo_size_bytes + 1)

    response = _upload(client, content=too_big, content_type="image/jpeg", name="big.jpg")

    assert response.status_code == 400


def test_upload_rejects_bad_capture_date(client):
    assert _upload(client, captureDate="yesterday").status_code == 400


def test_unreadable_image_still_stored(client):
    response = _upload(client, content=b"not really a jpeg", content_type="image/jpeg", name="x.jpg")

    assert response.status_code == 201
    assert response.json()["data"]["width"] is None


def test_list_photos_newest_first(client):
    _upload(client, captureDate="2026-01-01T08:00:00", userId="a")
    _upload(client, captureDate="2026-02-01T08:00:00", userId="b")

    photos = client.get("/photos").json()["data"]

    assert [p["userId"] for p in photos] == ["b", "a"]


def test_get_metadata_and_file(client):
    content = _png()
    photo = _upload(client, content=content).json()["data"]

    metadata = client.get(f"/photos/{photo['id']}")
    assert metadata.status_code == 200
    assert metadata.json()["data"]["fileSize"] == len(content)

    served = client.get(f"/photos/{photo['filename']}")
    assert served.status_code == 200
    assert served.content == content
    assert served.headers["content-type"] == "image/png"
    assert "max-age" in served.headers["cache-control"]


def test_get_missing_photo(client):
    assert client.get("/photos/unknown-id").status_code == 404
    assert client.get("/photos/photo_1.jpg").status_code == 404


def test_update_notes(client):
    photo = _upload(client).json()["data"]

    response = client.put(f"/photos/{photo['id']}", json={"notes": "Leaner"})

    assert response.status_code == 200
    assert response.json()["data"]["notes"] == "Leaner"


def test_delete_photo_removes_file(client):
    photo = _upload(client, userId="9").json()["data"]
    path = os.path.join(settings.PHOTO_STORAGE_PATH, "user_9", photo["filename"])
    assert os.path.isfile(path)

    assert client.delete(f"/photos/{photo['id']}").status_code == 200

    assert not os.path.exists(path)
    assert client.get(f"/photos/{photo['id']}").status_code == 404


def test_photo_path_rejects_traversal():
    with pytest.raises(PhotoValidationError):
        photo_storage.get_photo_path("../secrets.txt")


def test_generate_photo_filename():
    name = photo_storage.generate_photo_filename("Side.JPG", "3")

    assert name.startswith("photo_")
    assert name.endswith("_3.jpg")


def test_upload_rejects_path_like_user_id(client):
    response = _upload(client, userId="../../../escape")

    assert response.status_code == 400
    assert "userId" in response.json()["detail"]
    escaped = os.path.normpath(os.path.join(settings.PHOTO_STORAGE_PATH, "user_../../../escape"))
    assert not os.path.exists(escaped)
    assert client.get("/photos").json()["data"] == []


@pytest.mark.parametrize("user_id", ["a/b", "..", "x\\y", "", "u" * 65])
def test_validate_user_id_rejects(user_id):
    with pytest.raises(PhotoValidationError):
        photo_storage.validate_user_id(user_id)


def test_validate_user_id_accepts_plain_ids():
    photo_storage.validate_user_id(None)
    photo_storage.validate_user_id("user-42_b")
