import uuid
from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from profolia.core.config import settings
from profolia.core.db import get_session
from profolia.core.security import get_principal, Principal
from profolia.modules.media.outcomes import Failed
from profolia.modules.media.repository import MediaRepository
from profolia.modules.media.schemas import (
    ArchiveUploadOut, FailedEntryOut, MediaAssetOut, MediaListOut, MediaUploadOut, PresignIn, PresignOut,
    UploadSummaryOut,
)
from profolia.modules.media.service import MediaService
from profolia.modules.profiles.models import Profile
from profolia.modules.profiles.repository import ProfileRepository
from profolia.platform.provider_registry import registry

router = APIRouter()

FAILURE_STATUS = {
    "UnsupportedType": status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "StorageError": status.HTTP_502_BAD_GATEWAY,
}

def get_media_service(session: AsyncSession = Depends(get_session)) -> MediaService:
    return MediaService(
        MediaRepository(session),
        registry.object_storage(),
        registry.content_classifier(),
    )

async def get_current_profile(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
) -> Profile:
    profile = await ProfileRepository(session).get_by_user(principal.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found. Please create a profile first.")
    return profile

async def _read_limited(file: UploadFile) -> bytes:
    too_large = HTTPException(status_code=413, detail=f"File too large (>{settings.UPLOAD_MAX_BYTES // (1024 * 1024)}MB)")
    if file.size is not None and file.size > settings.UPLOAD_MAX_BYTES:
        raise too_large
    data = await file.read()
    if len(data) > settings.UPLOAD_MAX_BYTES:
        raise too_large
    return data

@router.post("/upload", response_model=MediaUploadOut, status_code=201)
async def upload_media(
    file: UploadFile = File(...),
    description: str | None = Form(None),
    profile: Profile = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service),
):
    if (file.content_type or "") not in settings.UPLOAD_ALLOWED_MIME_TYPES:
        raise HTTPException(status_code=415, detail="Invalid file type")
    data = await _read_limited(file)
    outcome = await service.ingest_file(
        profile,
        file.filename or "upload",
        data,
        declared_content_type=file.content_type,
        description=description,
    )
    if isinstance(outcome, Failed):
        raise HTTPException(status_code=FAILURE_STATUS.get(outcome.reason, 500), detail=outcome.detail or outcome.reason)
    return MediaUploadOut(
        message="File uploaded successfully",
        media_asset=MediaAssetOut.model_validate(outcome.asset),
        s3_key=outcome.asset.key,
    )

@router.post("/upload-zip", response_model=ArchiveUploadOut, status_code=201)
async def upload_zip(
    zip_file: UploadFile = File(..., alias="zipFile"),
    profile: Profile = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service),
):
    if (zip_file.content_type or "") not in settings.ARCHIVE_ALLOWED_MIME_TYPES:
        raise HTTPException(status_code=415, detail="Invalid file type, expected a ZIP archive")
    data = await _read_limited(zip_file)
    batch = await service.ingest_archive(profile, data)
    return ArchiveUploadOut(
        message=f"Uploaded {batch.succeeded} files from ZIP",
        uploaded_count=batch.succeeded,
        failed_entries=[FailedEntryOut(file_name=f.file_name, error=f.reason, detail=f.detail) for f in batch.failures],
        assets=[MediaAssetOut.model_validate(a) for a in batch.assets],
        summary=UploadSummaryOut(total=batch.total, successful=batch.succeeded, failed=batch.failed),
    )

@router.get("", response_model=MediaListOut)
async def list_media(
    profile: Profile = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service),
):
    assets = await service.list_assets(profile.id)
    return MediaListOut(total=len(assets), media_assets=[MediaAssetOut.model_validate(a) for a in assets])

@router.delete("/{media_id}", status_code=204)
async def delete_media(
    media_id: uuid.UUID,
    profile: Profile = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service),
):
    await service.delete_asset(profile.id, media_id)

@router.post("/presign", response_model=PresignOut)
async def presign_upload(
    payload: PresignIn,
    profile: Profile = Depends(get_current_profile),
    service: MediaService = Depends(get_media_service),
):
    return await service.presign_upload(profile.id, payload.file_name, payload.content_type)
