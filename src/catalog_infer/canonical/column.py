from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Column:
    """
    Canonical representation of an inferred column.
    Source-agnostic: produced by every inference engine.
    """
    ordinal_position: int       # 1-based, stable within one inference run
    name: str                   # dotted path for nested fields (profile.bio)
    data_type: str              # BOOLEAN, BIGINT, DOUBLE, DECIMAL, TEXT, JSON, TIMESTAMP, BINARY
    source_type: str            # raw/merged observation (integer, integer|string, key_pattern)
    nullable: bool

    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
