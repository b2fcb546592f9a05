from typing import Protocol, runtime_checkable

@runtime_checkable
class ObjectStoragePort(Protocol):
    """Blocking object store; callers on the event loop offload with asyncio.to_thread.

    All methods raise StorageError on failure.
    """

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str: ...

    def delete(self, key: str) -> None: ...

    def list_keys(self, prefix: str) -> list[str]: ...

    def public_url(self, key: str) -> str: ...

    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 900) -> dict: ...
