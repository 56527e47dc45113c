import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Set

from catalog_infer.canonical.column import Column
from catalog_infer.canonical.result import InferenceResult
from catalog_infer.inference.base_inferrer import SchemaInferrer
from catalog_infer.inference.cancellation import CancellationToken, check_token
from catalog_infer.inference.config import InferConfig, DEFAULT_SAMPLE_SIZE
from catalog_infer.inference.type_inference import (
    FieldTypeInfo,
    classify_value,
    map_to_sql_type,
)
from catalog_infer.utils.exceptions import InvalidSampleShapeError

logger = logging.getLogger(__name__)


def _validate_documents(samples: Sequence[Any]) -> List[Mapping]:
    documents = []
    for idx, sample in enumerate(samples):
        if not isinstance(sample, Mapping):
            raise InvalidSampleShapeError(
                f"Sample {idx} is not a key-value record, got {type(sample).__name__}"
            )
        for key in sample:
            if not isinstance(key, str):
                raise InvalidSampleShapeError(
                    f"Sample {idx} has a non-string field name, got {type(key).__name__}"
                )
        documents.append(sample)
    return documents


def _lookup(document: Mapping, field_name: str):
    """
    Resolve a dotted path inside a document.
    Returns (found, value); traversal stops at any non-record segment.
    """
    current: Any = document
    for part in field_name.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return False, None
        current = current[part]
    return True, current


class DocumentInferrer(SchemaInferrer):
    """
    Infers a field schema from nested key/value records
    (document database samples, search index samples, JSON bodies).

    Responsibilities:
    - Walk records depth-first, naming nested fields with dotted paths
    - Record one type observation per field per sample
    - Track presence-based nullability
    - Merge observed types (union / most common) and map to canonical types

    DOES NOT:
    - Fetch samples
    - Recurse into arrays
    """

    default_sample_size = DEFAULT_SAMPLE_SIZE

    def infer(
        self,
        token: Optional[CancellationToken],
        samples: Sequence[Any],
        config: Optional[InferConfig] = None,
    ) -> List[Column]:
        cfg = self._snapshot(config)
        if not cfg.enabled or not samples:
            return []

        documents = self._capped(_validate_documents(samples), cfg)
        field_types = self._collect(token, documents, cfg)

        columns = self._fields_to_columns(field_types, len(documents), cfg)
        logger.debug(
            f"Inferred {len(columns)} columns from {len(documents)} documents"
        )
        return columns

    def infer_with_result(
        self,
        token: Optional[CancellationToken],
        samples: Sequence[Any],
        config: Optional[InferConfig] = None,
    ) -> InferenceResult:
        """
        Infer columns and attach per-field coverage (%) and type histograms.
        """
        cfg = self._snapshot(config)
        columns = self.infer(token, samples, config=cfg)
        if not cfg.enabled or not samples:
            return InferenceResult(columns=[], sample_count=0)

        documents = self._capped(_validate_documents(samples), cfg)
        total = len(documents)

        field_coverage: Dict[str, float] = {}
        type_distribution: Dict[str, Dict[str, int]] = {}

        for column in columns:
            present = 0
            type_counts: Dict[str, int] = {}
            for document in documents:
                found, value = _lookup(document, column.name)
                if not found:
                    continue
                present += 1
                type_name = classify_value(value)
                type_counts[type_name] = type_counts.get(type_name, 0) + 1

            field_coverage[column.name] = present / total * 100
            type_distribution[column.name] = type_counts

        return InferenceResult(
            columns=columns,
            sample_count=total,
            field_coverage=field_coverage,
            type_distribution=type_distribution,
        )

    # --------------------------------------------------
    # Collection
    # --------------------------------------------------
    def _capped(self, documents: List[Mapping], cfg: InferConfig) -> List[Mapping]:
        limit = cfg.effective_sample_size(self.default_sample_size)
        return documents[:limit]

    def _collect(
        self,
        token: Optional[CancellationToken],
        documents: List[Mapping],
        cfg: InferConfig,
    ) -> Dict[str, FieldTypeInfo]:
        field_types: Dict[str, FieldTypeInfo] = {}
        max_depth = cfg.effective_max_depth()

        for processed, document in enumerate(documents, start=1):
            check_token(token)

            seen: Set[str] = set()
            self._collect_fields("", document, field_types, seen, 0, max_depth)

            for info in field_types.values():
                if info.total_count() < processed:
                    info.nullable = True

        return field_types

    def _collect_fields(
        self,
        prefix: str,
        document: Mapping,
        field_types: Dict[str, FieldTypeInfo],
        seen: Set[str],
        depth: int,
        max_depth: int,
    ) -> None:
        if depth >= max_depth:
            return

        for key, value in document.items():
            if not isinstance(key, str):
                raise InvalidSampleShapeError(
                    f"Field names must be strings, got {type(key).__name__} under '{prefix or '<root>'}'"
                )

            field_name = f"{prefix}.{key}" if prefix else key
            type_name = classify_value(value)

            # one observation per field per sample
            if field_name not in seen:
                seen.add(field_name)
                info = field_types.get(field_name)
                if info is None:
                    info = field_types[field_name] = FieldTypeInfo(field_name, depth)
                info.add_type(type_name)

            if isinstance(value, Mapping):
                self._collect_fields(
                    field_name, value, field_types, seen, depth + 1, max_depth
                )

    # --------------------------------------------------
    # Output
    # --------------------------------------------------
    def _fields_to_columns(
        self,
        field_types: Dict[str, FieldTypeInfo],
        total_samples: int,
        cfg: InferConfig,
    ) -> List[Column]:
        columns: List[Column] = []

        for position, field_name in enumerate(sorted(field_types), start=1):
            info = field_types[field_name]
            source_type = info.merged_type(cfg.type_merge)
            count = info.total_count()

            columns.append(
                Column(
                    ordinal_position=position,
                    name=field_name,
                    data_type=map_to_sql_type(source_type),
                    source_type=source_type,
                    nullable=info.nullable,
                    comment=(
                        f"Inferred from {count} samples, "
                        f"coverage: {count / total_samples * 100:.1f}%"
                    ),
                )
            )

        return columns
