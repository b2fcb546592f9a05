import secrets
import time
import uuid

from profolia.modules.media.types import file_extension


def owner_prefix(owner_id: uuid.UUID | str, prefix: str = "media") -> str:
    return f"{prefix.strip('/')}/{owner_id}/"


def generate_media_key(owner_id: uuid.UUID | str, file_name: str, prefix: str = "media") -> str:
    # {prefix}/{owner}/{epoch millis}-{64 random bits}.{ext}
    token = f"{time.time_ns() // 1_000_000}-{secrets.token_hex(8)}"
    ext = file_extension(file_name)
    return f"{owner_prefix(owner_id, prefix)}{token}{ext}"
