from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict
import re

from catalog_infer.inference.config import TypeMerge
from catalog_infer.utils.exceptions import InvalidSampleShapeError


# Semantic type names (source types)
NULL = "null"
BOOLEAN = "boolean"
INTEGER = "integer"
NUMBER = "number"
DECIMAL = "decimal"
STRING = "string"
TIMESTAMP = "timestamp"
BINARY = "binary"
ARRAY = "array"
OBJECT = "object"

UNKNOWN = "unknown"
UNION_SEPARATOR = "|"

# Canonical SQL-like vocabulary
CANONICAL_TYPES = (
    "BOOLEAN", "BIGINT", "DOUBLE", "DECIMAL",
    "TEXT", "JSON", "TIMESTAMP", "BINARY",
)

_SQL_TYPE_MAP = {
    BOOLEAN: "BOOLEAN",
    INTEGER: "BIGINT",
    NUMBER: "DOUBLE",
    DECIMAL: "DECIMAL",
    STRING: "TEXT",
    TIMESTAMP: "TIMESTAMP",
    BINARY: "BINARY",
    ARRAY: "JSON",
    OBJECT: "JSON",
    NULL: "TEXT",
}

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

NULL_TOKENS = {"", "null", "na"}
BOOLEAN_WORD_TOKENS = {"true", "false", "yes", "no"}
BOOLEAN_DIGIT_TOKENS = {"1", "0"}


# ------------------------------------------------------------------
# Document values
# ------------------------------------------------------------------
def classify_value(value: Any) -> str:
    """
    Classify a decoded sample value into a semantic type name.

    The accepted value kinds form a closed set; anything outside it is
    rejected rather than named after its runtime class.
    """
    if value is None:
        return NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER
    if isinstance(value, float):
        return NUMBER
    if isinstance(value, Decimal):
        return DECIMAL
    if isinstance(value, str):
        return STRING
    if isinstance(value, (datetime, date)):
        return TIMESTAMP
    if isinstance(value, (bytes, bytearray)):
        return BINARY
    if isinstance(value, (list, tuple)):
        return ARRAY
    if isinstance(value, Mapping):
        return OBJECT

    raise InvalidSampleShapeError(
        f"Unsupported sample value of type {type(value).__name__}"
    )


# ------------------------------------------------------------------
# CSV values
# ------------------------------------------------------------------
def _is_null(value: str) -> bool:
    return value.lower() in NULL_TOKENS


def _is_boolean(value: str, zero_one_as_boolean: bool = True) -> bool:
    """
    Check if value represents a boolean.
    """
    lowered = value.lower()
    if lowered in BOOLEAN_WORD_TOKENS:
        return True
    return zero_one_as_boolean and lowered in BOOLEAN_DIGIT_TOKENS


def _is_integer(value: str) -> bool:
    """
    Check if value is a base-10 integer within the signed 64-bit range.
    """
    if not INTEGER_PATTERN.fullmatch(value):
        return False
    return _INT64_MIN <= int(value) <= _INT64_MAX


def _is_float(value: str) -> bool:
    if "_" in value:
        return False
    try:
        float(value)
        return True
    except ValueError:
        return False


def classify_csv_value(value: str, zero_one_as_boolean: bool = True) -> str:
    """
    Classify a single CSV cell.

    Precedence: null -> boolean -> integer -> number -> string.
    With zero_one_as_boolean disabled, bare 1/0 are integers.
    """
    value = value.strip()

    if _is_null(value):
        return NULL

    if _is_boolean(value, zero_one_as_boolean):
        return BOOLEAN

    if _is_integer(value):
        return INTEGER

    if _is_float(value):
        return NUMBER

    return STRING


# ------------------------------------------------------------------
# Merge + canonical mapping
# ------------------------------------------------------------------
class FieldTypeInfo:
    """
    Per-field accumulator of type observations.

    types keeps insertion order, so the first observed type is known
    and wins MostCommon ties.
    """

    def __init__(self, name: str, depth: int = 0):
        self.name = name
        self.depth = depth
        self.types: Dict[str, int] = {}
        self.nullable = False

    def add_type(self, type_name: str) -> None:
        self.types[type_name] = self.types.get(type_name, 0) + 1

    def total_count(self) -> int:
        return sum(self.types.values())

    def most_common_type(self) -> str:
        if not self.types:
            return UNKNOWN
        best_type, best_count = None, 0
        for type_name, count in self.types.items():
            if count > best_count:
                best_type, best_count = type_name, count
        return best_type

    def union_type(self) -> str:
        if not self.types:
            return UNKNOWN
        return UNION_SEPARATOR.join(sorted(self.types))

    def merged_type(self, strategy: str) -> str:
        if strategy == TypeMerge.UNION:
            return self.union_type()
        return self.most_common_type()

    def __repr__(self):
        return f"FieldTypeInfo(name={self.name!r}, depth={self.depth}, types={self.types!r}, nullable={self.nullable})"


def map_to_sql_type(source_type: str) -> str:
    """
    Map a semantic (or merged union) type to the canonical vocabulary.
    Unions and unknown names fall back to TEXT.
    """
    if UNION_SEPARATOR in source_type:
        return "TEXT"
    return _SQL_TYPE_MAP.get(source_type, "TEXT")
