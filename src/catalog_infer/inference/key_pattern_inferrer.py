import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from catalog_infer.canonical.column import Column
from catalog_infer.canonical.result import (
    KeyPattern,
    KeyPatternResult,
    MAX_PATTERN_SAMPLE_KEYS,
)
from catalog_infer.inference.base_inferrer import SchemaInferrer
from catalog_infer.inference.cancellation import CancellationToken, check_token
from catalog_infer.inference.config import InferConfig, DEFAULT_SAMPLE_SIZE
from catalog_infer.utils.exceptions import InvalidSampleShapeError

logger = logging.getLogger(__name__)


# Tried in priority order; the first one present in a key wins
KEY_SEPARATORS = (":", "-", "_", ".", "/")

WILDCARD = "*"
KEY_PATTERN_SOURCE_TYPE = "key_pattern"

NUMERIC_PATTERN = re.compile(r"[0-9]+")
UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
UNIX_TIMESTAMP_PATTERN = re.compile(r"[0-9]{10,13}")
HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")
UPPER_PATTERN = re.compile(r"[A-Z]")
LOWER_PATTERN = re.compile(r"[a-z]")
DIGIT_PATTERN = re.compile(r"[0-9]")


def is_variable_segment(part: str) -> bool:
    """
    True when a key segment looks generated (id, uuid, timestamp, hash)
    rather than a literal namespace word.
    """
    if not part:
        return False

    if NUMERIC_PATTERN.fullmatch(part):
        return True

    if UUID_PATTERN.fullmatch(part):
        return True

    if UNIX_TIMESTAMP_PATTERN.fullmatch(part):
        return True

    # hash-like
    if len(part) > 16 and HEX_PATTERN.fullmatch(part):
        return True

    # mixed case + digits, e.g. generated tokens
    if (
        len(part) > 8
        and UPPER_PATTERN.search(part)
        and LOWER_PATTERN.search(part)
        and DIGIT_PATTERN.search(part)
    ):
        return True

    return False


def split_key(key: str):
    """
    Split a key on the first separator it contains.
    Returns (separator, segments); separator is None for unseparated keys.
    """
    for sep in KEY_SEPARATORS:
        if sep in key:
            return sep, key.split(sep)
    return None, [key]


def extract_pattern(key: str) -> str:
    sep, segments = split_key(key)
    if sep is None:
        return WILDCARD if is_variable_segment(key) else key

    return sep.join(
        WILDCARD if is_variable_segment(part) else part
        for part in segments
    )


class KeyPatternInferrer(SchemaInferrer):
    """
    Infers structural "columns" from opaque key names of a key-value store.

    Each distinct pattern (variable segments replaced by *) becomes one
    synthetic TEXT column, ranked by how many sampled keys it matches.
    """

    default_sample_size = DEFAULT_SAMPLE_SIZE

    def infer(
        self,
        token: Optional[CancellationToken],
        samples: Sequence[Any],
        config: Optional[InferConfig] = None,
    ) -> List[Column]:
        cfg = self._snapshot(config)
        if not cfg.enabled or not samples:
            return []

        keys = self._capped_keys(samples, cfg)
        patterns = self.discover_patterns(token, keys)
        return self._patterns_to_columns(patterns)

    def infer_with_result(
        self,
        token: Optional[CancellationToken],
        samples: Sequence[Any],
        config: Optional[InferConfig] = None,
    ) -> KeyPatternResult:
        cfg = self._snapshot(config)
        if not cfg.enabled or not samples:
            return KeyPatternResult(columns=[], sample_count=0)

        keys = self._capped_keys(samples, cfg)
        patterns = self.discover_patterns(token, keys)

        return KeyPatternResult(
            columns=self._patterns_to_columns(patterns),
            sample_count=len(keys),
            patterns=patterns,
        )

    def discover_patterns(
        self,
        token: Optional[CancellationToken],
        keys: Sequence[str],
    ) -> List[KeyPattern]:
        """
        Group keys by pattern; ordered by count descending, ties in
        discovery order.
        """
        groups: Dict[str, KeyPattern] = {}
        shapes: Dict[str, Tuple[Optional[str], List[str]]] = {}
        arrivals: List[Tuple[str, str]] = []

        for key in keys:
            check_token(token)

            pattern = extract_pattern(key)
            group = groups.get(pattern)
            if group is None:
                sep, segments = split_key(key)
                group = groups[pattern] = KeyPattern(pattern=pattern, segments=segments)
                shapes[pattern] = (sep, pattern.split(sep) if sep else [pattern])
            group.add_match(key)
            arrivals.append((pattern, key))

        merged, absorbed = self._merge_interior_siblings(list(groups.values()), shapes)
        if absorbed:
            self._refill_sample_keys(merged, absorbed, arrivals)

        # sorted() is stable: equal counts keep discovery order
        ranked = sorted(merged, key=lambda p: p.count, reverse=True)
        logger.debug(f"Discovered {len(ranked)} key patterns from {len(keys)} keys")
        return ranked

    def _merge_interior_siblings(
        self,
        groups: List[KeyPattern],
        shapes: Dict[str, Tuple[Optional[str], List[str]]],
    ):
        """
        Wildcard an interior segment (never the first or last one) when two
        or more all-literal patterns agree on every other segment, e.g.
        session:abc:data + session:def:data -> session:*:data.
        Patterns that already hold a wildcard never merge, so cache:user:*
        and cache:order:* stay apart.

        Returns (groups, absorbed) where absorbed maps each merged member
        pattern to the pattern that replaced it.
        """
        absorbed: Dict[str, str] = {}
        max_arity = max((len(parts) for _, parts in shapes.values()), default=0)

        for position in range(1, max_arity - 1):
            buckets: Dict[str, List[KeyPattern]] = {}
            signatures: Dict[str, Tuple[str, List[str]]] = {}

            for group in groups:
                sep, parts = shapes[group.pattern]
                if sep is None or position >= len(parts) - 1 or WILDCARD in parts:
                    continue
                sig_parts = parts[:position] + [WILDCARD] + parts[position + 1:]
                signature = sep.join(sig_parts)
                buckets.setdefault(signature, []).append(group)
                signatures[group.pattern] = (signature, sig_parts)

            next_groups: List[KeyPattern] = []
            emitted = set()
            for group in groups:
                signature, sig_parts = signatures.get(group.pattern, (None, None))
                members = buckets.get(signature, [])
                if len(members) < 2:
                    next_groups.append(group)
                    continue
                if signature in emitted:
                    continue
                emitted.add(signature)

                combined = KeyPattern(pattern=signature, segments=members[0].segments)
                for member in members:
                    combined.count += member.count
                    absorbed[member.pattern] = signature

                shapes[signature] = (shapes[group.pattern][0], sig_parts)
                next_groups.append(combined)

            groups = next_groups

        return groups, absorbed

    def _refill_sample_keys(
        self,
        groups: List[KeyPattern],
        absorbed: Dict[str, str],
        arrivals: List[Tuple[str, str]],
    ) -> None:
        targets = set(absorbed.values())
        merged = {g.pattern: g for g in groups if g.pattern in targets}
        for group in merged.values():
            group.sample_keys = []

        for pattern, key in arrivals:
            group = merged.get(absorbed.get(pattern))
            if group is not None and len(group.sample_keys) < MAX_PATTERN_SAMPLE_KEYS:
                group.sample_keys.append(key)

    def _capped_keys(self, samples: Sequence[Any], cfg: InferConfig) -> List[str]:
        keys = []
        for idx, sample in enumerate(samples):
            if not isinstance(sample, str):
                raise InvalidSampleShapeError(
                    f"Sample {idx} is not a string key, got {type(sample).__name__}"
                )
            keys.append(sample)
        return keys[: cfg.effective_sample_size(self.default_sample_size)]

    def _patterns_to_columns(self, patterns: List[KeyPattern]) -> List[Column]:
        return [
            Column(
                ordinal_position=rank,
                name=f"pattern_{rank}",
                data_type="TEXT",
                source_type=KEY_PATTERN_SOURCE_TYPE,
                nullable=False,
                comment=f"Key pattern: {p.pattern} (matches {p.count} keys)",
            )
            for rank, p in enumerate(patterns, start=1)
        ]
