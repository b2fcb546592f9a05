from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

@dataclass(frozen=True)
class ClassifierItem:
    file_name: str
    kind: str
    description: str | None = None

@dataclass(frozen=True)
class Classification:
    category: str
    tags: list[str] = field(default_factory=list)
    description: str = ""
    raw: dict = field(default_factory=dict)

@runtime_checkable
class ContentClassifierPort(Protocol):
    async def classify(self, items: list[ClassifierItem], domain_hint: str) -> list[Classification | None]:
        """Best-effort classification, positionally aligned with ``items``.

        May return fewer entries than requested; ``None`` marks a position the
        service returned something unusable for. Raises ClassificationError
        when the call itself fails.
        """
        ...
