"""Media ingestion: upload, classify and record single files and ZIP batches.

Per-item problems (unknown type, storage rejection, a damaged archive member)
become ``Failed`` outcomes and never stop the rest of a batch. Classifier
problems only cost metadata. An unreadable archive and a failed database
write are the only request-level failures.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from profolia.core.config import settings
from profolia.core.errors import (
    ClassificationError, EntryTooLarge, InvalidArchive, NotFound, PersistenceError, StorageError, UnsupportedType,
)
from profolia.modules.media.archive import ArchiveEntry, ArchiveReader
from profolia.modules.media.keys import generate_media_key, owner_prefix
from profolia.modules.media.models import MediaAsset
from profolia.modules.media.outcomes import BatchResult, Failed, IngestionOutcome, Succeeded, aggregate
from profolia.modules.media.repository import MediaRepository
from profolia.modules.media.types import ResolvedType, resolve_type
from profolia.modules.profiles.models import Profile
from profolia.platform.ports.content_classifier import Classification, ClassifierItem, ContentClassifierPort
from profolia.platform.ports.object_storage import ObjectStoragePort

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Uncategorized"


@dataclass
class _Upload:
    file_name: str
    resolved: ResolvedType
    key: str
    url: str
    size_bytes: int
    description: str | None = None


class MediaService:
    def __init__(
        self,
        records: MediaRepository,
        storage: ObjectStoragePort,
        classifier: ContentClassifierPort,
        *,
        key_prefix: str | None = None,
        concurrency: int | None = None,
        presign_expires_seconds: int | None = None,
        max_entry_bytes: int | None = None,
    ):
        self.records = records
        self.storage = storage
        self.classifier = classifier
        self.key_prefix = key_prefix or settings.MEDIA_KEY_PREFIX
        self.concurrency = concurrency or settings.UPLOAD_CONCURRENCY
        self.presign_expires_seconds = presign_expires_seconds or settings.PRESIGN_EXPIRES_SECONDS
        self.max_entry_bytes = max_entry_bytes or settings.ARCHIVE_ENTRY_MAX_BYTES

    # ---------- Ingestion ----------
    async def ingest_file(
        self,
        profile: Profile,
        file_name: str,
        data: bytes,
        *,
        declared_content_type: str | None = None,
        description: str | None = None,
    ) -> IngestionOutcome:
        try:
            resolved = resolve_type(file_name, declared_content_type)
        except UnsupportedType as e:
            logger.warning(f"Rejected {file_name!r} for profile {profile.id}: {e.message}")
            return Failed(file_name, e.code, e.message)

        try:
            upload = await self._upload(profile.id, file_name, data, resolved, description=description)
        except StorageError as e:
            return Failed(file_name, e.code, e.message)

        classifications = await self._classify([upload], profile.profession_type)
        assets = await self._persist(profile.id, [upload], classifications)
        logger.info(f"Stored {file_name!r} as {upload.key} for profile {profile.id}")
        return Succeeded(assets[0])

    async def ingest_archive(self, profile: Profile, data: bytes) -> BatchResult:
        """Ingest every file in a ZIP archive.

        Raises InvalidArchive when the archive itself cannot be opened, and
        PersistenceError when the records cannot be written. Everything else is
        reported per entry in the returned BatchResult, in archive order.
        """
        with ArchiveReader(data, max_entry_bytes=self.max_entry_bytes) as reader:
            limiter = asyncio.Semaphore(self.concurrency)
            results = await asyncio.gather(*[
                self._ingest_entry(limiter, profile.id, entry) for entry in reader.entries()
            ])

        uploads = [r for r in results if isinstance(r, _Upload)]
        assets: list[MediaAsset] = []
        if uploads:
            classifications = await self._classify(uploads, profile.profession_type)
            assets = await self._persist(profile.id, uploads, classifications)

        stored = iter(assets)
        outcomes: list[IngestionOutcome] = [
            Succeeded(next(stored)) if isinstance(r, _Upload) else r for r in results
        ]
        batch = aggregate(outcomes)
        logger.info(
            f"Archive ingest for profile {profile.id}: total={batch.total} "
            f"succeeded={batch.succeeded} failed={batch.failed}"
        )
        return batch

    async def _ingest_entry(
        self, limiter: asyncio.Semaphore, profile_id: uuid.UUID, entry: ArchiveEntry
    ) -> _Upload | Failed:
        try:
            resolved = resolve_type(entry.name)
        except UnsupportedType as e:
            logger.warning(f"Skipping archive entry {entry.path!r}: {e.message}")
            return Failed(entry.name, e.code, e.message)

        # bytes are only materialized while holding a slot
        async with limiter:
            try:
                data = await asyncio.to_thread(entry.read)
                return await self._upload(profile_id, entry.name, data, resolved)
            except (EntryTooLarge, InvalidArchive, StorageError) as e:
                logger.warning(f"Archive entry {entry.path!r} failed: {e.message}")
                return Failed(entry.name, e.code, e.message)
            except Exception as e:
                logger.exception(f"Unexpected error ingesting archive entry {entry.path!r}")
                return Failed(entry.name, "IngestionError", str(e))

    async def _upload(
        self,
        profile_id: uuid.UUID,
        file_name: str,
        data: bytes,
        resolved: ResolvedType,
        *,
        description: str | None = None,
    ) -> _Upload:
        key = generate_media_key(profile_id, file_name, self.key_prefix)
        url = await asyncio.to_thread(self.storage.put_bytes, key, data, resolved.content_type)
        return _Upload(
            file_name=file_name, resolved=resolved, key=key, url=url, size_bytes=len(data), description=description,
        )

    async def _classify(self, uploads: list[_Upload], domain_hint: str) -> list[Classification | None]:
        items = [ClassifierItem(u.file_name, u.resolved.kind.value, u.description) for u in uploads]
        try:
            results = list(await self.classifier.classify(items, domain_hint))
        except Exception as e:
            # never fatal: uploads are kept and recorded with default metadata
            reason = e.message if isinstance(e, ClassificationError) else f"{type(e).__name__}: {e}"
            logger.warning(f"Classification unavailable for {len(items)} items, using defaults: {reason}", exc_info=True)
            results = []
        if len(results) != len(uploads):
            logger.debug(f"Classifier returned {len(results)} entries for {len(uploads)} items")
        # positional match; missing positions fall back to defaults
        return (results + [None] * len(uploads))[:len(uploads)]

    @staticmethod
    def _metadata(upload: _Upload, classification: Classification | None) -> tuple[str, list[str], dict]:
        if classification is None:
            meta = {"category": DEFAULT_CATEGORY, "tags": [], "description": upload.description or ""}
            return DEFAULT_CATEGORY, [], meta
        description = classification.description or upload.description or ""
        meta = {
            **classification.raw,
            "category": classification.category,
            "tags": list(classification.tags),
            "description": description,
        }
        return classification.category, list(classification.tags), meta

    async def _persist(
        self, profile_id: uuid.UUID, uploads: list[_Upload], classifications: list[Classification | None]
    ) -> list[MediaAsset]:
        try:
            position = await self.records.next_display_order(profile_id)
            assets = []
            for offset, (upload, classification) in enumerate(zip(uploads, classifications)):
                category, tags, meta = self._metadata(upload, classification)
                assets.append(await self.records.create(
                    profile_id,
                    file_name=upload.file_name,
                    kind=upload.resolved.kind.value,
                    content_type=upload.resolved.content_type,
                    key=upload.key,
                    url=upload.url,
                    size_bytes=upload.size_bytes,
                    category=category,
                    tags=tags,
                    meta=meta,
                    display_order=position + offset,
                ))
            await self.records.commit()
        except SQLAlchemyError as e:
            logger.error(f"Persisting {len(uploads)} media records failed for profile {profile_id}", exc_info=True)
            await self.records.rollback()
            await self._discard([u.key for u in uploads])
            raise PersistenceError("Media records could not be saved") from e
        return assets

    async def _discard(self, keys: list[str]) -> None:
        # compensation for uploads whose records were never written
        for key in keys:
            try:
                await asyncio.to_thread(self.storage.delete, key)
            except StorageError as e:
                logger.error(f"Could not remove orphaned object {key}; reconcile later: {e.message}")

    # ---------- Queries and maintenance ----------
    async def list_assets(self, profile_id: uuid.UUID) -> list[MediaAsset]:
        return list(await self.records.list_by_owner(profile_id))

    async def delete_asset(self, profile_id: uuid.UUID, media_id: uuid.UUID) -> None:
        asset = await self.records.get(profile_id, media_id)
        if asset is None:
            raise NotFound("Media not found")
        # object first: a failed storage delete leaves the record, so the caller can retry
        await asyncio.to_thread(self.storage.delete, asset.key)
        await self.records.delete(asset)
        await self.records.commit()
        logger.info(f"Deleted media {media_id} ({asset.key}) for profile {profile_id}")

    async def presign_upload(self, profile_id: uuid.UUID, file_name: str, content_type: str | None = None) -> dict:
        resolved = resolve_type(file_name, content_type)
        key = generate_media_key(profile_id, file_name, self.key_prefix)
        upload = await asyncio.to_thread(
            self.storage.presign_upload, key, resolved.content_type, self.presign_expires_seconds
        )
        return {"key": key, "kind": resolved.kind.value, "upload": upload}

    async def list_storage_keys(self, profile_id: uuid.UUID) -> list[str]:
        return await asyncio.to_thread(self.storage.list_keys, owner_prefix(profile_id, self.key_prefix))

    async def find_orphaned_keys(self, profile_id: uuid.UUID) -> list[str]:
        stored = await self.list_storage_keys(profile_id)
        known = await self.records.keys_for_owner(profile_id)
        return [k for k in stored if k not in known]

    async def reconcile_orphans(self, profile_id: uuid.UUID, *, delete: bool = False) -> list[str]:
        """Return storage keys with no media record.

        With ``delete`` set, remove them and return only the keys actually
        removed; a key that fails to delete is logged and left for the next sweep.
        """
        orphans = await self.find_orphaned_keys(profile_id)
        if not delete:
            return orphans
        removed = []
        for key in orphans:
            try:
                await asyncio.to_thread(self.storage.delete, key)
            except StorageError as e:
                logger.error(f"Could not remove orphaned object {key}: {e.message}")
                continue
            removed.append(key)
        if orphans:
            logger.info(f"Removed {len(removed)}/{len(orphans)} orphaned objects for profile {profile_id}")
        return removed
