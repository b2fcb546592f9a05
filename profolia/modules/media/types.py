"""Mapping from file names and declared content types to canonical media kinds."""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from profolia.core.errors import UnsupportedType


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


# Declared content types trusted as-is.
ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset({
    "image/jpeg", "image/png", "image/gif", "image/webp",
    "video/mp4", "video/webm", "video/quicktime",
    "audio/mpeg", "audio/wav", "audio/ogg",
    "application/pdf",
})

EXTENSION_CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".pdf": "application/pdf",
}


@dataclass(frozen=True)
class ResolvedType:
    kind: MediaKind
    content_type: str


def kind_for_content_type(content_type: str) -> MediaKind:
    major = content_type.split("/", 1)[0]
    if major == "image":
        return MediaKind.IMAGE
    if major == "video":
        return MediaKind.VIDEO
    if major == "audio":
        return MediaKind.AUDIO
    return MediaKind.DOCUMENT


def file_extension(file_name: str) -> str:
    """Lower-cased extension including the dot, or "" when there is none."""
    return PurePosixPath(file_name.replace("\\", "/")).suffix.lower()


def resolve_type(file_name: str, declared_content_type: str | None = None) -> ResolvedType:
    """Resolve ``file_name`` to a media kind and concrete content type.

    A declared content type wins when it is allow-listed (parameters such as
    ``; charset=...`` are ignored). Otherwise the extension decides.

    Raises:
        UnsupportedType: neither the declared type nor the extension is known.
    """
    if declared_content_type:
        declared = declared_content_type.split(";", 1)[0].strip().lower()
        if declared in ALLOWED_CONTENT_TYPES:
            return ResolvedType(kind_for_content_type(declared), declared)

    ext = file_extension(file_name)
    content_type = EXTENSION_CONTENT_TYPES.get(ext)
    if content_type is None:
        shown = ext or "no extension"
        raise UnsupportedType(f"Unsupported file type for {file_name!r} ({shown})")
    return ResolvedType(kind_for_content_type(content_type), content_type)
