import argparse
import asyncio
import logging
import os
import sys
import uuid

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from profolia.core.db import SessionLocal
from profolia.core.logging import setup_logging
from profolia.modules.media.repository import MediaRepository
from profolia.modules.media.service import MediaService
from profolia.modules.profiles.repository import ProfileRepository
from profolia.platform.provider_registry import registry

log = logging.getLogger("scripts.reconcile_orphans")

async def main(profile_ids: list[uuid.UUID], delete: bool) -> int:
    """
    Finds stored media objects that have no media record (left behind by
    interrupted uploads) and optionally removes them.
    """
    total = 0
    async with SessionLocal() as db:
        if not profile_ids:
            profile_ids = await ProfileRepository(db).list_ids()
        service = MediaService(MediaRepository(db), registry.object_storage(), registry.content_classifier())
        for profile_id in profile_ids:
            orphans = await service.reconcile_orphans(profile_id, delete=delete)
            for key in orphans:
                print(f"{'deleted' if delete else 'orphan'}\t{profile_id}\t{key}")
            total += len(orphans)
    log.info(f"{total} orphaned objects across {len(profile_ids)} profiles (delete={delete})")
    return total

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Report or remove media objects with no database record.")
    parser.add_argument("--profile", action="append", type=uuid.UUID, default=[], help="profile id (repeatable); default all")
    parser.add_argument("--delete", action="store_true", help="delete the orphaned objects")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(main(args.profile, args.delete))
