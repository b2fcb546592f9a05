from fastapi import APIRouter
from profolia.modules.media.router import router as media_router

api_router = APIRouter()
api_router.include_router(media_router, prefix="/media", tags=["media"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
