import uuid
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from profolia.modules.profiles.models import Profile

class ProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user(self, user_id: uuid.UUID) -> Profile | None:
        q = select(Profile).where(Profile.user_id == user_id).order_by(Profile.created_at.asc()).limit(1)
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list_ids(self) -> list[uuid.UUID]:
        res = await self.session.execute(select(Profile.id))
        return list(res.scalars().all())
