import logging
import json
import sys
import time
import uuid
import os

# Inference lifecycle events
INFERENCE_STARTED = "INFERENCE_STARTED"
INFERENCE_COMPLETED = "INFERENCE_COMPLETED"
INFERENCE_FAILED = "INFERENCE_FAILED"

ROOT_LOGGER_NAME = "catalog_infer"


class _C:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


def _use_color() -> bool:
    # Color only if explicitly enabled and terminal supports it.
    return os.getenv("LOG_COLOR", "0") == "1" and sys.stdout.isatty()


def _event_color(event_type: str, payload: dict) -> str:
    if event_type == INFERENCE_FAILED:
        # retryable (cancelled / deadline) in yellow
        return _C.YELLOW if payload.get("retryable") else _C.RED
    if event_type == INFERENCE_COMPLETED:
        return _C.GREEN
    return _C.CYAN


def get_logger():
    """
    Configure the package root logger once.

    Module loggers (logging.getLogger(__name__)) under catalog_infer.*
    propagate here, so engine debug lines and lifecycle events share one
    stdout handler. LOG_LEVEL controls verbosity.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


logger = get_logger()


def generate_request_id() -> str:
    return str(uuid.uuid4())


def log_event(event_type: str, payload: dict):
    """
    Emit one JSON line per lifecycle event.
    Values that are not JSON-native (paths, enums) are stringified.
    """
    record = {"event_type": event_type, **payload}
    text = json.dumps(record, default=str)

    if _use_color():
        logger.info(f"{_event_color(event_type, payload)}{text}{_C.RESET}")
    else:
        logger.info(text)


class RequestTimer:
    """
    Monotonic wall-clock timer for one inference request.
    """
    def __init__(self):
        self.start_time = time.monotonic()

    def duration(self) -> float:
        return round(time.monotonic() - self.start_time, 4)
