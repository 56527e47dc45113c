class InferenceError(Exception):
    """
    Base exception for all schema inference errors.
    """
    code = "INFERENCE_ERROR"
    retryable = False


class InvalidSampleShapeError(InferenceError):
    """
    Raised when a sample does not have the shape an engine expects
    (e.g. a non-mapping passed to the document inferrer).
    """
    code = "INVALID_SAMPLE_SHAPE"


class UnsupportedFormatError(InferenceError):
    """
    Raised for unrecognized or intentionally unimplemented file formats.
    """
    code = "UNSUPPORTED_FORMAT"

    def __init__(self, format_name: str, message: str = None):
        self.format_name = format_name
        super().__init__(message or f"Unsupported file format: {format_name}")


class ParseError(InferenceError):
    """
    Raised when CSV or JSON input cannot be parsed.
    """
    code = "PARSE_ERROR"


class InferenceCancelledError(InferenceError):
    """
    Raised when the caller's cancellation token is signalled.
    The caller may retry later or with a smaller sample.
    """
    code = "CANCELLED"
    retryable = True


class CancelledError(InferenceCancelledError):
    code = "CANCELLED"

    def __init__(self, message: str = "inference cancelled"):
        super().__init__(message)


class DeadlineExceededError(InferenceCancelledError):
    code = "DEADLINE_EXCEEDED"

    def __init__(self, message: str = "inference deadline exceeded"):
        super().__init__(message)
