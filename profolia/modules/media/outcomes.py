from dataclasses import dataclass, field
from typing import Sequence, Union

from profolia.modules.media.models import MediaAsset


@dataclass(frozen=True)
class Succeeded:
    asset: MediaAsset

    @property
    def file_name(self) -> str:
        return self.asset.file_name


@dataclass(frozen=True)
class Failed:
    file_name: str
    reason: str  # error code, e.g. "UnsupportedType" or "StorageError"
    detail: str = ""


IngestionOutcome = Union[Succeeded, Failed]


@dataclass(frozen=True)
class BatchResult:
    outcomes: tuple[IngestionOutcome, ...] = field(default_factory=tuple)
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @property
    def assets(self) -> list[MediaAsset]:
        return [o.asset for o in self.outcomes if isinstance(o, Succeeded)]

    @property
    def failures(self) -> list[Failed]:
        return [o for o in self.outcomes if isinstance(o, Failed)]


def aggregate(outcomes: Sequence[IngestionOutcome]) -> BatchResult:
    """Count outcomes without reordering or dropping any."""
    ordered = tuple(outcomes)
    succeeded = 0
    failed = 0
    for outcome in ordered:
        if isinstance(outcome, Succeeded):
            succeeded += 1
        elif isinstance(outcome, Failed):
            failed += 1
        else:
            raise TypeError(f"not an ingestion outcome: {outcome!r}")
    return BatchResult(outcomes=ordered, total=len(ordered), succeeded=succeeded, failed=failed)
