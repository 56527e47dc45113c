from typing import Any, Dict, List, Optional

# ---------------- Input dispatch ----------------
from catalog_infer.input.format_detector import FormatDetector, FileFormat
from catalog_infer.governance.inferrer_registry import InferrerRegistry, SourceKind
from catalog_infer.adapters.csv_adapter import CSVOptions
from catalog_infer.adapters.json_adapter import JSONAdapter, JSONLinesAdapter

# ---------------- Inference ----------------
from catalog_infer.inference.cancellation import CancellationToken
from catalog_infer.inference.config import InferConfig
from catalog_infer.inference.file_inferrer import FileInferenceRequest
from catalog_infer.canonical.schema import compute_schema_hash

# ---------------- Outputs ----------------
from catalog_infer.outputs.json_schema_exporter import JSONSchemaExporter
from catalog_infer.outputs.yaml_schema_exporter import YAMLSchemaExporter

# ---------------- Observability ----------------
from catalog_infer.observability.logger import (
    INFERENCE_STARTED,
    INFERENCE_COMPLETED,
    INFERENCE_FAILED,
    log_event,
    generate_request_id,
    RequestTimer,
)
from catalog_infer.utils.exceptions import InferenceError


OUTPUT_TYPES = {"JSON", "YAML", "ALL_FORMATS"}


# Sample loading
def _load_documents(samples_path: str) -> List[Any]:
    adapter_cls = JSONLinesAdapter if FormatDetector(samples_path).detect() == FileFormat.JSONL else JSONAdapter
    with open(samples_path, "rb") as f:
        return adapter_cls(f).read_documents()


def _load_keys(samples_path: str) -> List[str]:
    with open(samples_path, "r", encoding="utf-8") as f:
        return [line.rstrip("\r\n") for line in f if line.strip()]


def _resolve_samples(payload: Dict, source: str) -> List[Any]:
    if payload.get("samples") is not None:
        samples = payload["samples"]
        if not isinstance(samples, list):
            raise ValueError("'samples' must be a list")
        return samples

    samples_path = payload.get("samples_path")
    if not samples_path:
        raise ValueError(f"Source '{source}' requires 'samples' or 'samples_path'")

    if source == SourceKind.DOCUMENT:
        return _load_documents(samples_path)
    return _load_keys(samples_path)


def _run_file_inference(inferrer, token, payload: Dict, cfg: InferConfig):
    file_path = payload.get("file_path")
    fmt = payload.get("format")
    options_data = dict(payload.get("csv_options") or {})

    if file_path:
        detector = FormatDetector(file_path)
        fmt = fmt or detector.detect()
        options_data.setdefault("delimiter", detector.default_delimiter())

        with open(file_path, "rb") as f:
            request = FileInferenceRequest(f, fmt, CSVOptions.from_dict(options_data))
            return inferrer.infer_from_file_with_result(token, request, config=cfg)

    content = payload.get("content")
    if content is None:
        raise ValueError("Source 'file' requires 'file_path' or 'content'")
    if not fmt:
        raise ValueError("Source 'file' with inline 'content' requires 'format'")

    request = FileInferenceRequest.from_text(content, fmt, CSVOptions.from_dict(options_data))
    return inferrer.infer_from_file_with_result(token, request, config=cfg)


def _build_token(payload: Dict, token: Optional[CancellationToken]) -> Optional[CancellationToken]:
    if token is not None:
        return token
    timeout = payload.get("timeout_seconds")
    if timeout is None:
        return None
    timeout = float(timeout)
    if timeout <= 0:
        raise ValueError("timeout_seconds must be positive")
    return CancellationToken.with_timeout(timeout)


# ==========================================================
# ROUTER
# ==========================================================
def route(payload: Dict, token: Optional[CancellationToken] = None) -> Dict:
    """
    Inference entry point shared by the HTTP API, CLI and config runs.

    Flow:
    Payload → Config + Token → Engine dispatch → Columns → Outputs
    """

    request_id = generate_request_id()
    timer = RequestTimer()
    source = str(payload.get("source") or "").lower()

    log_event(INFERENCE_STARTED, {
        "request_id": request_id,
        "source": source,
        "file_path": payload.get("file_path"),
        "format": payload.get("format"),
    })

    try:
        # --------------------------------------------------
        # Inputs
        # --------------------------------------------------
        if not SourceKind.is_valid(source):
            raise ValueError(
                f"Invalid source '{payload.get('source')}'. "
                f"Allowed: {SourceKind.DOCUMENT}, {SourceKind.FILE}, {SourceKind.KEY_PATTERN}"
            )

        output_type = str(payload.get("output") or "JSON").upper()
        if output_type not in OUTPUT_TYPES:
            raise ValueError(f"Invalid output: {output_type}. Allowed: {sorted(OUTPUT_TYPES)}")

        cfg = InferConfig.from_dict(payload.get("config"))
        token = _build_token(payload, token)
        inferrer = InferrerRegistry.get_inferrer(source)(cfg)

        # --------------------------------------------------
        # Inference
        # --------------------------------------------------
        if source == SourceKind.FILE:
            result = _run_file_inference(inferrer, token, payload, cfg)
        else:
            samples = _resolve_samples(payload, source)
            result = inferrer.infer_with_result(token, samples, config=cfg)

        columns = result.columns
        schema_hash = compute_schema_hash(columns)

        # --------------------------------------------------
        # Outputs
        # --------------------------------------------------
        response = {
            "status": "SUCCESS",
            "request_id": request_id,
            "source": source,
            "sample_count": result.sample_count,
            "column_count": len(columns),
            "schema_hash": schema_hash,
            "config": cfg.to_dict(),
            "columns": JSONSchemaExporter(columns).export(),
        }

        if payload.get("detailed"):
            details = result.to_dict()
            details.pop("columns", None)
            response["details"] = details

        if output_type in {"YAML", "ALL_FORMATS"}:
            response["schema_yaml"] = YAMLSchemaExporter(columns).export_to_string()

        log_event(INFERENCE_COMPLETED, {
            "request_id": request_id,
            "source": source,
            "sample_count": result.sample_count,
            "column_count": len(columns),
            "schema_hash": schema_hash,
            "duration_seconds": timer.duration(),
        })

        return response

    except InferenceError as e:
        log_event(INFERENCE_FAILED, {
            "request_id": request_id,
            "source": source,
            "error_code": e.code,
            "retryable": e.retryable,
            "message": str(e),
            "duration_seconds": timer.duration(),
        })
        raise

    except (ValueError, OSError) as e:
        log_event(INFERENCE_FAILED, {
            "request_id": request_id,
            "source": source,
            "error_code": "INVALID_REQUEST",
            "message": str(e),
            "duration_seconds": timer.duration(),
        })
        raise
