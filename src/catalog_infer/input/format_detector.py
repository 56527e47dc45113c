import os

from catalog_infer.utils.exceptions import UnsupportedFormatError


class FileFormat:
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"

    ALL = (CSV, JSON, JSONL, PARQUET)

    @classmethod
    def normalize(cls, format_name) -> str:
        """
        Canonical lower-case tag; raises UnsupportedFormatError for
        anything outside ALL.
        """
        if not format_name:
            raise UnsupportedFormatError("", "File format must not be empty")

        key = str(format_name).strip().lower()
        if key not in cls.ALL:
            raise UnsupportedFormatError(str(format_name))
        return key


class FormatDetector:
    """
    Detects the input file format based on extension.
    """

    SUPPORTED_EXTENSIONS = {
        "csv": FileFormat.CSV,
        "tsv": FileFormat.CSV,
        "json": FileFormat.JSON,
        "jsonl": FileFormat.JSONL,
        "ndjson": FileFormat.JSONL,
        "parquet": FileFormat.PARQUET,
    }

    def __init__(self, file_path: str):
        self.file_path = file_path

    @property
    def extension(self) -> str:
        _, ext = os.path.splitext(self.file_path or "")
        return ext.lower().lstrip(".")

    def default_delimiter(self) -> str:
        return "\t" if self.extension == "tsv" else ","

    def detect(self) -> str:
        """
        Detect input file format.

        Returns:
            str: FileFormat tag (e.g. 'csv')

        Raises:
            UnsupportedFormatError: If format is unsupported
        """
        if not self.file_path:
            raise UnsupportedFormatError("", "Input file path is empty")

        if not os.path.exists(self.file_path):
            raise FileNotFoundError(f"Input file does not exist: {self.file_path}")

        ext = self.extension
        if not ext:
            raise UnsupportedFormatError(
                "", "File has no extension. Unable to detect format."
            )

        if ext not in self.SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(
                ext,
                f"Unsupported input format: {ext}. "
                f"Supported formats: {list(self.SUPPORTED_EXTENSIONS.keys())}",
            )

        return self.SUPPORTED_EXTENSIONS[ext]
