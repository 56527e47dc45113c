from catalog_infer.inference.document_inferrer import DocumentInferrer
from catalog_infer.inference.file_inferrer import FileSchemaInferrer
from catalog_infer.inference.key_pattern_inferrer import KeyPatternInferrer


class SourceKind:
    DOCUMENT = "document"
    FILE = "file"
    KEY_PATTERN = "key_pattern"

    @classmethod
    def is_valid(cls, kind: str) -> bool:
        return kind in {cls.DOCUMENT, cls.FILE, cls.KEY_PATTERN}


class InferrerRegistry:
    """
    Maps a sample source kind to its inference engine.
    """

    _REGISTRY = {
        SourceKind.DOCUMENT: DocumentInferrer,
        SourceKind.FILE: FileSchemaInferrer,
        SourceKind.KEY_PATTERN: KeyPatternInferrer,
    }

    @classmethod
    def get_inferrer(cls, kind: str):
        if not kind:
            raise ValueError("Source kind must not be empty")

        key = kind.lower()

        if key not in cls._REGISTRY:
            raise ValueError(
                f"No inferrer registered for source kind: {kind}. "
                f"Allowed: {sorted(cls._REGISTRY)}"
            )

        return cls._REGISTRY[key]

    @classmethod
    def kinds(cls):
        return sorted(cls._REGISTRY)
