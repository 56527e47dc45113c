import hashlib
import json
from typing import List

from catalog_infer.canonical.column import Column


def compute_schema_hash(columns: List[Column]) -> str:
    """
    Compute a deterministic hash of an inferred column list.
    Two runs over the same samples and config produce the same hash.
    """
    payload = [
        {
            "position": c.ordinal_position,
            "name": c.name,
            "type": c.data_type,
            "source_type": c.source_type,
            "nullable": c.nullable,
        }
        for c in columns
    ]

    serialized = json.dumps(payload, sort_keys=True)
    return hashlib.sha256(serialized.encode()).hexdigest()
