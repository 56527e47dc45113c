import os
from dataclasses import dataclass, asdict, replace as dc_replace
from typing import Any, Dict, Mapping, Optional

import yaml


DEFAULT_SAMPLE_SIZE = 100
DEFAULT_MAX_DEPTH = 10

# Recursion ceiling applied even when max_depth is "unlimited"
HARD_MAX_DEPTH = 64


class TypeMerge:
    UNION = "union"
    MOST_COMMON = "most_common"

    @classmethod
    def is_valid(cls, strategy: str) -> bool:
        return strategy in {cls.UNION, cls.MOST_COMMON}


@dataclass(frozen=True)
class InferConfig:
    """
    Schema inference configuration shared by all engines.

    - sample_size <= 0 -> the engine's default sample size
    - max_depth <= 0   -> unlimited (still bounded by HARD_MAX_DEPTH)
    """
    enabled: bool = True
    sample_size: int = DEFAULT_SAMPLE_SIZE
    max_depth: int = DEFAULT_MAX_DEPTH
    type_merge: str = TypeMerge.MOST_COMMON

    def __post_init__(self):
        if not self.type_merge:
            object.__setattr__(self, "type_merge", TypeMerge.MOST_COMMON)
        if not TypeMerge.is_valid(self.type_merge):
            raise ValueError(
                f"Invalid type_merge '{self.type_merge}'. "
                f"Allowed values: {TypeMerge.UNION}, {TypeMerge.MOST_COMMON}"
            )

    def effective_sample_size(self, default: int = DEFAULT_SAMPLE_SIZE) -> int:
        if self.sample_size <= 0:
            return default
        return self.sample_size

    def effective_max_depth(self) -> int:
        if self.max_depth <= 0:
            return HARD_MAX_DEPTH
        return min(self.max_depth, HARD_MAX_DEPTH)

    def replace(self, **changes) -> "InferConfig":
        return dc_replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ------------------------------------------
    # Loading
    # ------------------------------------------
    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "InferConfig":
        data = data or {}
        unknown = set(data) - {"enabled", "sample_size", "max_depth", "type_merge"}
        if unknown:
            raise ValueError(f"Unknown inference config keys: {sorted(unknown)}")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError(f"Invalid enabled '{enabled}'. Expected true or false")

        return cls(
            enabled=enabled,
            sample_size=int(data.get("sample_size", DEFAULT_SAMPLE_SIZE)),
            max_depth=int(data.get("max_depth", DEFAULT_MAX_DEPTH)),
            type_merge=str(data.get("type_merge") or TypeMerge.MOST_COMMON).lower(),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "InferConfig":
        """
        Load from a YAML file. Reads the top-level `inference:` section
        when present, otherwise the whole document.
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

        return cls.from_dict(data.get("inference", data))
