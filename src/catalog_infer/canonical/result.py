from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any

from catalog_infer.canonical.column import Column


MAX_PATTERN_SAMPLE_KEYS = 5


@dataclass
class InferenceResult:
    """
    Document inference output plus per-field statistics.

    field_coverage:    field name -> % of samples containing the field
    type_distribution: field name -> {semantic type -> count}
    """
    columns: List[Column]
    sample_count: int
    field_coverage: Dict[str, float] = field(default_factory=dict)
    type_distribution: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "sample_count": self.sample_count,
            "field_coverage": dict(self.field_coverage),
            "type_distribution": {k: dict(v) for k, v in self.type_distribution.items()},
        }


@dataclass
class FileInferenceResult:
    columns: List[Column]
    sample_count: int
    format: str
    has_header: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "sample_count": self.sample_count,
            "format": self.format,
            "has_header": self.has_header,
        }


@dataclass
class KeyPattern:
    """
    A wildcard template discovered in a flat key namespace (e.g. user:*).
    """
    pattern: str
    count: int = 0
    sample_keys: List[str] = field(default_factory=list)
    segments: List[str] = field(default_factory=list)

    def add_match(self, key: str) -> None:
        self.count += 1
        if len(self.sample_keys) < MAX_PATTERN_SAMPLE_KEYS:
            self.sample_keys.append(key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern,
            "count": self.count,
            "sample_keys": list(self.sample_keys),
            "segments": list(self.segments),
        }


@dataclass
class KeyPatternResult:
    columns: List[Column]
    sample_count: int
    patterns: List[KeyPattern] = field(default_factory=list)

    def get_pattern(self, pattern: str) -> Optional[KeyPattern]:
        for p in self.patterns:
            if p.pattern == pattern:
                return p
        return None

    def top_patterns(self, n: int) -> List[KeyPattern]:
        """
        Top n patterns by count. n <= 0 (or larger than the number of
        patterns) returns all of them.
        """
        if n <= 0 or n >= len(self.patterns):
            return list(self.patterns)
        return self.patterns[:n]

    def pattern_coverage(self, n: int) -> float:
        """
        Fraction (0..1) of sampled keys matched by the top n patterns.
        """
        if self.sample_count == 0:
            return 0.0
        covered = sum(p.count for p in self.top_patterns(n))
        return covered / self.sample_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "sample_count": self.sample_count,
            "patterns": [p.to_dict() for p in self.patterns],
        }
