import uuid
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

class _CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

class MediaAssetOut(_CamelModel):
    id: uuid.UUID
    profile_id: uuid.UUID
    file_name: str
    file_type: str = Field(validation_alias="kind")
    content_type: str
    file_url: str = Field(validation_alias="url")
    file_size: int = Field(validation_alias="size_bytes")
    category: str | None = None
    tags: list[str] = []
    metadata: dict | None = Field(default=None, validation_alias="meta")
    display_order: int | None = None
    created_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, v):
        return v or []

class MediaUploadOut(_CamelModel):
    message: str
    media_asset: MediaAssetOut
    s3_key: str

class FailedEntryOut(_CamelModel):
    file_name: str
    error: str
    detail: str = ""

class UploadSummaryOut(_CamelModel):
    total: int
    successful: int
    failed: int

class ArchiveUploadOut(_CamelModel):
    message: str
    uploaded_count: int
    failed_entries: list[FailedEntryOut]
    assets: list[MediaAssetOut]
    summary: UploadSummaryOut

class MediaListOut(_CamelModel):
    total: int
    media_assets: list[MediaAssetOut]

class PresignIn(_CamelModel):
    file_name: str = Field(..., min_length=1, max_length=512)
    content_type: str | None = None

class PresignOut(_CamelModel):
    key: str
    kind: str
    upload: dict
