import logging
from profolia.platform.ports.content_classifier import ContentClassifierPort, ClassifierItem, Classification

log = logging.getLogger("classifier.noop")

class NoopClassifier(ContentClassifierPort):
    async def classify(self, items: list[ClassifierItem], domain_hint: str) -> list[Classification | None]:
        log.info(f"[NOOP CLASSIFIER] skipping {len(items)} items domain={domain_hint!r}")
        return []
