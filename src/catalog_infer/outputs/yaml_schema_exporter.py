import yaml
from typing import List

from catalog_infer.canonical.column import Column


class YAMLSchemaExporter:
    """
    Exports inferred columns into YAML format, keeping column order.
    """

    def __init__(self, columns: List[Column]):
        self.columns = columns

    def export_to_string(self) -> str:
        return yaml.safe_dump(
            {"columns": [c.to_dict() for c in self.columns]},
            sort_keys=False,
            default_flow_style=False
        )

    def export_to_file(self, file_path: str):
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(self.export_to_string())
