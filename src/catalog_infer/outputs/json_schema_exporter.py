import json
from typing import List, Dict

from catalog_infer.canonical.column import Column


class JSONSchemaExporter:
    """
    Exports inferred columns to JSON format.
    """

    def __init__(self, columns: List[Column]):
        self.columns = columns

    def export(self) -> List[Dict]:
        """
        Return columns as JSON-serializable objects.
        """
        return [c.to_dict() for c in self.columns]

    def export_to_string(self, indent: int = 2) -> str:
        return json.dumps(self.export(), indent=indent)

    def export_to_file(self, file_path: str, indent: int = 2):
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.export(), f, indent=indent)
