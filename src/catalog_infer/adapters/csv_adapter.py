import csv
import io
import logging
from dataclasses import dataclass, asdict
from typing import BinaryIO, Dict, List, Optional, Any

from catalog_infer.utils.exceptions import ParseError

logger = logging.getLogger(__name__)


@dataclass
class CSVOptions:
    """
    CSV reading options.

    zero_one_as_boolean: classify bare 1/0 cells as boolean (the default
    precedence). Disable it for files where 1/0 are numeric ids or flags
    that should stay integers.
    """
    delimiter: str = ","
    has_header: bool = True
    skip_rows: int = 0
    zero_one_as_boolean: bool = True

    def __post_init__(self):
        if not isinstance(self.delimiter, str) or len(self.delimiter) != 1:
            raise ValueError(
                f"csv delimiter must be a single character, got {self.delimiter!r}"
            )
        if self.skip_rows < 0:
            raise ValueError("csv skip_rows cannot be negative")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CSVOptions":
        data = data or {}
        delimiter = data.get("delimiter", ",")
        if delimiter in ("\\t", "tab", "TAB"):
            delimiter = "\t"
        return cls(
            delimiter=delimiter,
            has_header=bool(data.get("has_header", True)),
            skip_rows=int(data.get("skip_rows", 0)),
            zero_one_as_boolean=bool(data.get("zero_one_as_boolean", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class MalformedRow(Exception):
    """A single unreadable CSV record; recoverable during row sampling."""


class CSVAdapter:
    """
    Row reader over a CSV byte stream.

    Responsibilities:
    - Decode the stream (UTF-8, BOM tolerated)
    - Skip leading rows
    - Produce the header / first row
    - Report malformed records (csv errors, width mismatches)

    DOES NOT:
    - Classify values
    - Decide which malformed rows are fatal
    """

    def __init__(self, stream: BinaryIO, options: Optional[CSVOptions] = None):
        self.options = options or CSVOptions()
        self._text = io.TextIOWrapper(stream, encoding="utf-8-sig", newline="")
        self._reader = csv.reader(
            self._text,
            delimiter=self.options.delimiter,
            strict=True,
        )
        self.expected_width: Optional[int] = None

    def close(self) -> None:
        # leave the caller's stream open
        self._text.detach()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def read_row(self) -> Optional[List[str]]:
        """
        Next record, or None at end of input.
        Raises MalformedRow for an unreadable record and ParseError for
        undecodable bytes.
        """
        row = []
        # blank lines are not records
        while not row:
            try:
                row = next(self._reader)
            except StopIteration:
                return None
            except csv.Error as e:
                raise MalformedRow(f"line {self._reader.line_num}: {e}") from e
            except UnicodeDecodeError as e:
                raise ParseError(f"CSV input is not valid UTF-8: {e}") from e

        if self.expected_width is None:
            self.expected_width = len(row)
        elif len(row) != self.expected_width:
            raise MalformedRow(
                f"line {self._reader.line_num}: expected {self.expected_width} "
                f"fields, got {len(row)}"
            )
        return row

    def skip_leading_rows(self) -> bool:
        """
        Skip options.skip_rows records. Returns False if input ended first.
        Skipped rows do not fix the expected record width.
        """
        for idx in range(self.options.skip_rows):
            try:
                row = next(self._reader)
            except StopIteration:
                return False
            except csv.Error as e:
                raise ParseError(f"error skipping row {idx}: {e}") from e
            except UnicodeDecodeError as e:
                raise ParseError(f"CSV input is not valid UTF-8: {e}") from e
            logger.debug(f"Skipped leading CSV row {idx}: {len(row)} fields")
        return True
