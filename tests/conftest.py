import io
import struct
import uuid
import zipfile

import pytest
from sqlalchemy.exc import SQLAlchemyError

from profolia.core.errors import ClassificationError, StorageError
from profolia.modules.media.models import MediaAsset
from profolia.modules.media.service import MediaService
from profolia.modules.profiles.models import Profile
from profolia.platform.ports.content_classifier import Classification


def make_zip(files: dict[str, bytes], dirs: tuple[str, ...] = (), compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as zf:
        for d in dirs:
            zf.writestr(zipfile.ZipInfo(d.rstrip("/") + "/"), b"")
        for name, data in files.items():
            zf.writestr(name, data)
    return buf.getvalue()


def corrupt_member(data: bytes, name: str) -> bytes:
    """Flip the first data byte of a stored member so its CRC check fails on read."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo(name)
    assert info.compress_type == zipfile.ZIP_STORED and info.file_size > 0
    # local header: 30 fixed bytes, then file name and extra field
    name_len, extra_len = struct.unpack_from("<HH", data, info.header_offset + 26)
    offset = info.header_offset + 30 + name_len + extra_len
    damaged = bytearray(data)
    damaged[offset] ^= 0xFF
    return bytes(damaged)


class FakeStorage:
    def __init__(self, reject: set[bytes] | None = None):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []
        self.reject = reject or set()
        self.fail_delete = False
        self.fail_delete_keys: set[str] = set()

    def public_url(self, key: str) -> str:
        return f"https://bucket.example/{key}"

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        if data in self.reject:
            raise StorageError(f"Upload failed for {key}: AccessDenied")
        self.objects[key] = (data, content_type)
        return self.public_url(key)

    def delete(self, key: str) -> None:
        if self.fail_delete or key in self.fail_delete_keys:
            raise StorageError(f"Delete failed for {key}")
        self.objects.pop(key, None)
        self.deleted.append(key)

    def list_keys(self, prefix: str) -> list[str]:
        return sorted(k for k in self.objects if k.startswith(prefix))

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 900) -> dict:
        return {"strategy": "fake", "key": key, "content_type": content_type, "expires": expires_seconds}


class FakeClassifier:
    def __init__(self, results=None, error: Exception | None = None):
        self.results = results
        self.error = error
        self.calls: list[tuple[list, str]] = []

    async def classify(self, items, domain_hint):
        self.calls.append((list(items), domain_hint))
        if self.error is not None:
            raise self.error
        if self.results is not None:
            return list(self.results)
        return [
            Classification(category="Featured Work", tags=[item.kind], description=f"{item.file_name} preview",
                           raw={"fileName": item.file_name})
            for item in items
        ]


class FakeRecords:
    def __init__(self):
        self.rows: list[MediaAsset] = []
        self.pending: list[MediaAsset] = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_create = False

    async def create(self, profile_id, **data) -> MediaAsset:
        if self.fail_on_create:
            raise SQLAlchemyError("connection reset")
        obj = MediaAsset(id=uuid.uuid4(), profile_id=profile_id, **data)
        self.pending.append(obj)
        return obj

    async def get(self, profile_id, media_id):
        return next((r for r in self.rows if r.id == media_id and r.profile_id == profile_id), None)

    async def list_by_owner(self, profile_id):
        owned = [r for r in self.rows if r.profile_id == profile_id]
        return sorted(owned, key=lambda r: (r.display_order is None, r.display_order or 0))

    async def keys_for_owner(self, profile_id):
        return {r.key for r in self.rows if r.profile_id == profile_id}

    async def next_display_order(self, profile_id):
        orders = [r.display_order for r in self.rows if r.profile_id == profile_id and r.display_order is not None]
        return max(orders) + 1 if orders else 0

    async def delete(self, obj):
        self.rows.remove(obj)

    async def commit(self):
        self.rows.extend(self.pending)
        self.pending = []
        self.commits += 1

    async def rollback(self):
        self.pending = []
        self.rollbacks += 1


@pytest.fixture
def profile() -> Profile:
    return Profile(id=uuid.uuid4(), user_id=uuid.uuid4(), name="Ada Lovelace", profession_type="Photographer")


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def records() -> FakeRecords:
    return FakeRecords()


@pytest.fixture
def service(records, storage, classifier) -> MediaService:
    return MediaService(records, storage, classifier, key_prefix="media", concurrency=2, presign_expires_seconds=600)


@pytest.fixture
def failing_classifier() -> FakeClassifier:
    return FakeClassifier(error=ClassificationError("Classifier request failed: connection refused"))
