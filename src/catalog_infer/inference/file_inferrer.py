import io
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, List, Optional, Sequence

from catalog_infer.adapters.csv_adapter import CSVAdapter, CSVOptions, MalformedRow
from catalog_infer.canonical.column import Column
from catalog_infer.canonical.result import FileInferenceResult
from catalog_infer.governance.adapter_registry import AdapterRegistry
from catalog_infer.inference.base_inferrer import SchemaInferrer
from catalog_infer.inference.cancellation import CancellationToken, check_token
from catalog_infer.inference.config import InferConfig, DEFAULT_SAMPLE_SIZE
from catalog_infer.inference.document_inferrer import DocumentInferrer
from catalog_infer.inference.type_inference import (
    FieldTypeInfo,
    NULL,
    UNKNOWN,
    classify_csv_value,
    map_to_sql_type,
)
from catalog_infer.input.format_detector import FileFormat
from catalog_infer.utils.exceptions import InvalidSampleShapeError, ParseError

logger = logging.getLogger(__name__)


@dataclass
class FileInferenceRequest:
    """
    A byte stream plus its format tag (csv | json | jsonl | parquet).
    csv_options only applies to CSV; defaults are used when omitted.
    """
    stream: BinaryIO
    format: str
    csv_options: Optional[CSVOptions] = None

    @classmethod
    def from_bytes(cls, data: bytes, format: str, csv_options: Optional[CSVOptions] = None):
        return cls(stream=io.BytesIO(data), format=format, csv_options=csv_options)

    @classmethod
    def from_text(cls, text: str, format: str, csv_options: Optional[CSVOptions] = None):
        return cls.from_bytes(text.encode("utf-8"), format, csv_options)


class FileSchemaInferrer(SchemaInferrer):
    """
    Infers a schema from a delimited-text or JSON byte stream.

    Responsibilities:
    - Dispatch on the format tag (unknown / reserved tags fail typed)
    - CSV: header or positional names, per-cell typing over sampled rows
    - JSON / JSONL: decode records and delegate to DocumentInferrer

    DOES NOT:
    - Re-order CSV columns
    - Abort on a malformed CSV row after the first data row
    """

    default_sample_size = DEFAULT_SAMPLE_SIZE

    def infer(
        self,
        token: Optional[CancellationToken],
        samples: Sequence[Any],
        config: Optional[InferConfig] = None,
    ) -> List[Column]:
        """
        Generic entry point: the first sample must be a FileInferenceRequest.
        """
        cfg = self._snapshot(config)
        if not cfg.enabled or not samples:
            return []

        request = samples[0]
        if not isinstance(request, FileInferenceRequest):
            raise InvalidSampleShapeError(
                f"Sample is not a FileInferenceRequest, got {type(request).__name__}"
            )
        return self.infer_from_file(token, request, config=cfg)

    def infer_from_file(
        self,
        token: Optional[CancellationToken],
        request: FileInferenceRequest,
        config: Optional[InferConfig] = None,
    ) -> List[Column]:
        return self.infer_from_file_with_result(token, request, config=config).columns

    def infer_from_file_with_result(
        self,
        token: Optional[CancellationToken],
        request: FileInferenceRequest,
        config: Optional[InferConfig] = None,
    ) -> FileInferenceResult:
        cfg = self._snapshot(config)
        if not cfg.enabled:
            return FileInferenceResult(
                columns=[], sample_count=0, format=str(request.format).lower()
            )

        fmt = FileFormat.normalize(request.format)
        adapter_cls = AdapterRegistry.get_adapter(fmt)
        check_token(token)

        if adapter_cls is CSVAdapter:
            options = request.csv_options or CSVOptions()
            columns, rows = self._infer_csv(token, request.stream, options, cfg)
            return FileInferenceResult(
                columns=columns,
                sample_count=rows,
                format=fmt,
                has_header=options.has_header,
            )

        documents = adapter_cls(request.stream).read_documents()
        document_inferrer = DocumentInferrer(cfg)
        columns = document_inferrer.infer(token, documents)
        limit = cfg.effective_sample_size(document_inferrer.default_sample_size)

        return FileInferenceResult(
            columns=columns,
            sample_count=min(len(documents), limit),
            format=fmt,
        )

    # --------------------------------------------------
    # CSV
    # --------------------------------------------------
    def _infer_csv(
        self,
        token: Optional[CancellationToken],
        stream: BinaryIO,
        options: CSVOptions,
        cfg: InferConfig,
    ):
        with CSVAdapter(stream, options) as reader:
            if not reader.skip_leading_rows():
                return [], 0

            if options.has_header:
                headers = self._read_required_row(reader, "header row")
                if headers is None:
                    return [], 0

                first_row = self._read_required_row(reader, "first data row")
                if first_row is None:
                    return self._columns_from_headers(headers), 0
            else:
                first_row = self._read_required_row(reader, "first data row")
                if first_row is None:
                    return [], 0
                headers = [f"column_{i}" for i in range(1, len(first_row) + 1)]

            field_types = [FieldTypeInfo(name) for name in headers]
            self._analyze_row(first_row, field_types, options)

            row_count = 1
            max_rows = cfg.effective_sample_size(self.default_sample_size)

            while row_count < max_rows:
                check_token(token)

                try:
                    row = reader.read_row()
                except MalformedRow as e:
                    logger.debug(f"Skipping malformed CSV row: {e}")
                    continue

                if row is None:
                    break

                self._analyze_row(row, field_types, options)
                row_count += 1

        return self._fields_to_columns(field_types, row_count, cfg), row_count

    def _read_required_row(self, reader: CSVAdapter, what: str) -> Optional[List[str]]:
        try:
            return reader.read_row()
        except MalformedRow as e:
            raise ParseError(f"error reading {what}: {e}") from e

    def _analyze_row(
        self,
        row: List[str],
        field_types: List[FieldTypeInfo],
        options: CSVOptions,
    ) -> None:
        for info, value in zip(field_types, row):
            info.add_type(classify_csv_value(value, options.zero_one_as_boolean))

    def _columns_from_headers(self, headers: List[str]) -> List[Column]:
        return [
            Column(
                ordinal_position=position,
                name=name,
                data_type="TEXT",
                source_type=UNKNOWN,
                nullable=True,
                comment="No data available for type inference",
            )
            for position, name in enumerate(headers, start=1)
        ]

    def _fields_to_columns(
        self,
        field_types: List[FieldTypeInfo],
        row_count: int,
        cfg: InferConfig,
    ) -> List[Column]:
        columns = []

        for position, info in enumerate(field_types, start=1):
            source_type = info.merged_type(cfg.type_merge)
            count = info.total_count()

            columns.append(
                Column(
                    ordinal_position=position,
                    name=info.name,
                    data_type=map_to_sql_type(source_type),
                    source_type=source_type,
                    nullable=info.types.get(NULL, 0) > 0 or count < row_count,
                    comment=f"Inferred from {count} samples",
                )
            )

        return columns
