"""Lazy, one-shot reading of ZIP archives uploaded in bulk."""

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterator

from profolia.core.errors import EntryTooLarge, InvalidArchive

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    path: str
    name: str
    is_dir: bool
    size: int
    _reader: Callable[[], bytes]
    max_bytes: int | None = None

    def read(self) -> bytes:
        """Materialize the entry's bytes.

        Raises EntryTooLarge when the declared uncompressed size is over the
        limit, and InvalidArchive if the member is damaged.
        """
        if self.max_bytes is not None and self.size > self.max_bytes:
            raise EntryTooLarge(f"{self.path!r} expands to {self.size} bytes (limit {self.max_bytes})")
        try:
            return self._reader()
        # RuntimeError: encrypted member; NotImplementedError: unsupported compression
        except (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError) as e:
            raise InvalidArchive(f"Could not extract {self.path!r}: {e}")


class ArchiveReader:
    def __init__(self, data: bytes, *, max_entry_bytes: int | None = None):
        self.max_entry_bytes = max_entry_bytes
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            raise InvalidArchive(f"Archive could not be read: {e}")
        self._consumed = False

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def entries(self) -> Iterator[ArchiveEntry]:
        """Yield the non-directory entries in archive order. Can be iterated once."""
        if self._consumed:
            raise RuntimeError("archive entries have already been consumed")
        self._consumed = True
        return self._iter_entries()

    def _iter_entries(self) -> Iterator[ArchiveEntry]:
        for info in self._zip.infolist():
            if info.is_dir():
                log.debug(f"Skipping directory entry {info.filename}")
                continue
            yield ArchiveEntry(
                path=info.filename,
                name=PurePosixPath(info.filename).name,
                is_dir=False,
                size=info.file_size,
                _reader=lambda info=info: self._zip.read(info),
                max_bytes=self.max_entry_bytes,
            )
