import logging
from profolia.core.config import settings
from profolia.platform.ports.object_storage import ObjectStoragePort
from profolia.platform.adapters.storage_local import LocalFilesystemStorage
from profolia.platform.adapters.storage_s3 import S3Storage
from profolia.platform.ports.content_classifier import ContentClassifierPort
from profolia.platform.adapters.classifier_anthropic import AnthropicClassifier
from profolia.platform.adapters.classifier_noop import NoopClassifier

log = logging.getLogger(__name__)

class ProviderRegistry:
    _object_storage: ObjectStoragePort | None = None
    _classifier: ContentClassifierPort | None = None

    @classmethod
    def object_storage(cls) -> ObjectStoragePort:
        if cls._object_storage is None:
            if settings.OBJECT_STORAGE_PROVIDER == "s3":
                cls._object_storage = S3Storage()
            else:
                cls._object_storage = LocalFilesystemStorage(settings.LOCAL_STORAGE_ROOT)
        return cls._object_storage

    @classmethod
    def content_classifier(cls) -> ContentClassifierPort:
        if cls._classifier is None:
            if settings.CLASSIFIER_PROVIDER == "anthropic" and settings.ANTHROPIC_API_KEY:
                cls._classifier = AnthropicClassifier(settings.ANTHROPIC_API_KEY)
            else:
                if settings.CLASSIFIER_PROVIDER == "anthropic":
                    log.warning("ANTHROPIC_API_KEY not set; media will be stored without classification")
                cls._classifier = NoopClassifier()
        return cls._classifier

registry = ProviderRegistry()
