import json
from typing import Any, BinaryIO, List

from catalog_infer.utils.exceptions import ParseError


def _reject_nonstandard_constant(value: str):
    raise ValueError(f"Invalid JSON constant: {value}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_nonstandard_constant)


class JSONAdapter:
    """
    JSON body decoder.

    Supports:
    - JSON array of records  -> every element is a sample
    - Single JSON object     -> one sample

    Anything else (scalars, malformed text, NaN/Infinity) is a ParseError.
    Element shapes are checked by the document inferrer.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def _read_text(self) -> str:
        data = self.stream.read()
        if isinstance(data, str):
            return data
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"JSON input is not valid UTF-8: {e}") from e

    def read_documents(self) -> List[Any]:
        raw = self._read_text()

        try:
            parsed = _loads(raw)
        except ValueError as e:
            raise ParseError(f"invalid JSON format: expected array or object ({e})") from e

        if isinstance(parsed, list):
            return parsed

        if isinstance(parsed, dict):
            return [parsed]

        raise ParseError(
            f"invalid JSON format: expected array or object, got {type(parsed).__name__}"
        )


class JSONLinesAdapter(JSONAdapter):
    """
    Newline-delimited JSON: one object per non-blank line.
    """

    def read_documents(self) -> List[Any]:
        records = []

        for line_no, line in enumerate(self._read_text().splitlines(), start=1):
            line = line.strip()
            if not line:
                continue

            try:
                obj = _loads(line)
            except ValueError as e:
                raise ParseError(f"invalid JSON on line {line_no}: {e}") from e

            if not isinstance(obj, dict):
                raise ParseError(
                    f"line {line_no}: expected a JSON object, got {type(obj).__name__}"
                )
            records.append(obj)

        return records
