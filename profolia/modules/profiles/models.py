import uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String
from profolia.core.base import Base, TimestampedMixin

class Profile(Base, TimestampedMixin):
    # Owned by the account/profile service; media ingestion only reads it.
    user_id: Mapped[uuid.UUID] = mapped_column(index=True)
    name: Mapped[str] = mapped_column(String(200))
    profession_type: Mapped[str] = mapped_column(String(120))
