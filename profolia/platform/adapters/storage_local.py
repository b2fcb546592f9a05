import os
from urllib.parse import quote
from profolia.platform.ports.object_storage import ObjectStoragePort
from profolia.core.config import settings
from profolia.core.errors import StorageError

class LocalFilesystemStorage(ObjectStoragePort):
    def __init__(self, root: str | None = None, public_base_url: str | None = None):
        self.root = os.path.abspath(root or settings.LOCAL_STORAGE_ROOT)
        self.public_base_url = public_base_url or settings.LOCAL_PUBLIC_BASE_URL
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        safe = key.strip("/").replace("..", "")
        return os.path.join(self.root, safe)

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quote(key.strip('/'))}"
        # For local dev, expose a static-like path; in real setups, serve via nginx or an API proxy.
        return f"file://{quote(self._path(key))}"

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 900) -> dict:
        # No presigning locally; the client uploads through the API instead.
        return {"strategy": "direct-api", "key": key, "content_type": content_type}

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Upload failed for {key}: {e}")
        return self.public_url(key)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise StorageError(f"Delete failed for {key}: {e}")

    def list_keys(self, prefix: str) -> list[str]:
        base = self._path(prefix)
        if not os.path.isdir(base):
            return []
        keys = []
        for dirpath, _dirs, files in os.walk(base):
            for name in files:
                rel = os.path.relpath(os.path.join(dirpath, name), self.root)
                keys.append(rel.replace(os.sep, "/"))
        return sorted(keys)
