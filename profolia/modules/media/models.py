import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, BigInteger, ForeignKey, JSON
from profolia.core.base import Base, TimestampedMixin

class MediaAsset(Base, TimestampedMixin):
    profile_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("profile.id", ondelete="CASCADE"), index=True)
    file_name: Mapped[str] = mapped_column(String(512))
    kind: Mapped[str] = mapped_column(String(16))  # image | video | audio | document
    content_type: Mapped[str] = mapped_column(String(128))
    # The "key" is the storage object key relative to provider (e.g., s3 key or local path key).
    key: Mapped[str] = mapped_column(String(512), unique=True)
    url: Mapped[str] = mapped_column(String(2048))
    size_bytes: Mapped[int] = mapped_column(BigInteger)
    category: Mapped[str | None] = mapped_column(String(120), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
