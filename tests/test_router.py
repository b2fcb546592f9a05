import uuid

import pytest
from fastapi.testclient import TestClient

from profolia.core.config import settings
from profolia.main import app
from profolia.modules.media.router import get_current_profile, get_media_service
from tests.conftest import make_zip

PREFIX = settings.API_PREFIX + "/media"


@pytest.fixture
def client(service, profile):
    app.dependency_overrides[get_media_service] = lambda: service
    app.dependency_overrides[get_current_profile] = lambda: profile
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get(settings.API_PREFIX + "/health").json() == {"status": "ok"}


def test_upload_zip_reports_partial_success(client, records):
    data = make_zip({"a.jpg": b"image", "b.mp4": b"video", "c.exe": b"MZ"})

    res = client.post(f"{PREFIX}/upload-zip", files={"zipFile": ("bundle.zip", data, "application/zip")})

    assert res.status_code == 201
    body = res.json()
    assert body["uploadedCount"] == 2
    assert [(f["fileName"], f["error"]) for f in body["failedEntries"]] == [("c.exe", "UnsupportedType")]
    assert [a["fileType"] for a in body["assets"]] == ["image", "video"]
    assert body["summary"] == {"total": 3, "successful": 2, "failed": 1}
    assert len(records.rows) == 2


def test_upload_zip_rejects_non_archive(client, records):
    res = client.post(f"{PREFIX}/upload-zip", files={"zipFile": ("bundle.zip", b"not a zip", "application/zip")})

    assert res.status_code == 400
    assert res.json()["code"] == "InvalidArchive"
    assert records.rows == []


@pytest.mark.parametrize("content_type", ["image/png", "text/plain"])
def test_upload_zip_rejects_non_zip_content_type(client, records, storage, content_type):
    data = make_zip({"a.jpg": b"image"})

    res = client.post(f"{PREFIX}/upload-zip", files={"zipFile": ("bundle.zip", data, content_type)})

    assert res.status_code == 415
    assert records.rows == []
    assert storage.objects == {}


def test_upload_zip_accepts_windows_zip_content_type(client):
    data = make_zip({"a.jpg": b"image"})
    res = client.post(f"{PREFIX}/upload-zip", files={"zipFile": ("bundle.zip", data, "application/x-zip-compressed")})
    assert res.status_code == 201


def test_upload_single_file(client):
    res = client.post(
        f"{PREFIX}/upload",
        files={"file": ("portrait.jpg", b"jpeg", "image/jpeg")},
        data={"description": "Headshot"},
    )

    assert res.status_code == 201
    body = res.json()
    assert body["mediaAsset"]["fileType"] == "image"
    assert body["mediaAsset"]["fileSize"] == 4
    assert body["mediaAsset"]["category"] == "Featured Work"
    assert body["s3Key"].endswith(".jpg")


def test_upload_single_disallowed_mime(client, records):
    res = client.post(f"{PREFIX}/upload", files={"file": ("tool.exe", b"MZ", "application/x-msdownload")})
    assert res.status_code == 415
    assert records.rows == []


def test_upload_single_unresolvable_type(client):
    # allow-listed at the request layer, but not an ingestible kind
    res = client.post(f"{PREFIX}/upload", files={"file": ("bundle.zip", b"PK", "application/zip")})
    assert res.status_code == 415


def test_upload_single_too_large(client, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_MAX_BYTES", 8)
    res = client.post(f"{PREFIX}/upload", files={"file": ("big.png", b"0123456789", "image/png")})
    assert res.status_code == 413


def test_list_and_delete(client):
    client.post(f"{PREFIX}/upload-zip", files={"zipFile": ("b.zip", make_zip({"a.jpg": b"1", "b.jpg": b"2"}), "application/zip")})

    listed = client.get(PREFIX).json()
    assert listed["total"] == 2
    assert [a["fileName"] for a in listed["mediaAssets"]] == ["a.jpg", "b.jpg"]

    media_id = listed["mediaAssets"][0]["id"]
    assert client.delete(f"{PREFIX}/{media_id}").status_code == 204
    assert client.get(PREFIX).json()["total"] == 1
    assert client.delete(f"{PREFIX}/{uuid.uuid4()}").status_code == 404


def test_presign(client, profile):
    res = client.post(f"{PREFIX}/presign", json={"fileName": "reel.mp4"})
    assert res.status_code == 200
    assert res.json()["key"].startswith(f"media/{profile.id}/")
    assert client.post(f"{PREFIX}/presign", json={"fileName": "setup.exe"}).status_code == 415
