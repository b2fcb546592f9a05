import uuid
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from profolia.modules.media.models import MediaAsset

class MediaRepository:
    """Record store for media assets; the service decides when to commit."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, profile_id: uuid.UUID, *, file_name: str, kind: str, content_type: str, key: str, url: str,
        size_bytes: int, category: str | None, tags: list[str] | None, meta: dict | None, display_order: int | None,
    ) -> MediaAsset:
        obj = MediaAsset(
            profile_id=profile_id, file_name=file_name, kind=kind, content_type=content_type, key=key, url=url,
            size_bytes=size_bytes, category=category, tags=tags, meta=meta, display_order=display_order,
        )
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, profile_id: uuid.UUID, media_id: uuid.UUID) -> MediaAsset | None:
        q = select(MediaAsset).where(
            MediaAsset.id == media_id,
            MediaAsset.profile_id == profile_id,
        )
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_by_owner(self, profile_id: uuid.UUID) -> Sequence[MediaAsset]:
        q = (
            select(MediaAsset)
            .where(MediaAsset.profile_id == profile_id)
            .order_by(MediaAsset.display_order.asc().nulls_last(), MediaAsset.created_at.desc())
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def keys_for_owner(self, profile_id: uuid.UUID) -> set[str]:
        res = await self.session.execute(select(MediaAsset.key).where(MediaAsset.profile_id == profile_id))
        return set(res.scalars().all())

    async def next_display_order(self, profile_id: uuid.UUID) -> int:
        res = await self.session.execute(
            select(func.max(MediaAsset.display_order)).where(MediaAsset.profile_id == profile_id)
        )
        current = res.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def delete(self, obj: MediaAsset) -> None:
        await self.session.delete(obj)
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
