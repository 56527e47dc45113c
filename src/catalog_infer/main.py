from fastapi import FastAPI, HTTPException

from catalog_infer.governance.adapter_registry import AdapterRegistry
from catalog_infer.governance.inferrer_registry import InferrerRegistry
from catalog_infer.router import route
from catalog_infer.utils.exceptions import (
    InferenceError,
    InvalidSampleShapeError,
    ParseError,
    UnsupportedFormatError,
    CancelledError,
    DeadlineExceededError,
)

app = FastAPI(
    title="Catalog Schema Inference",
    version="1.0.0"
)

# Most specific first
_STATUS_CODES = (
    (DeadlineExceededError, 504),
    (CancelledError, 499),
    (UnsupportedFormatError, 415),
    (InvalidSampleShapeError, 422),
    (ParseError, 422),
)


def _status_for(error: InferenceError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


@app.post("/infer")
def infer_schema(payload: dict):
    try:
        return route(payload)
    except InferenceError as e:
        raise HTTPException(
            status_code=_status_for(e),
            detail={
                "status": "ERROR",
                "code": e.code,
                "retryable": e.retryable,
                "message": str(e),
            }
        )
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={"status": "ERROR", "code": "NOT_FOUND", "message": str(e)}
        )
    except (ValueError, KeyError) as e:
        # bad config / payload
        raise HTTPException(
            status_code=400,
            detail={"status": "ERROR", "code": "INVALID_REQUEST", "message": str(e)}
        )


@app.get("/formats")
def list_formats():
    return {
        "formats": AdapterRegistry.formats(),
        "sources": InferrerRegistry.kinds(),
    }
