from catalog_infer.adapters.csv_adapter import CSVAdapter
from catalog_infer.adapters.json_adapter import JSONAdapter, JSONLinesAdapter
from catalog_infer.adapters.parquet_adapter import ParquetAdapter
from catalog_infer.input.format_detector import FileFormat


class AdapterRegistry:
    """
    Maps file format tags to adapter implementations.
    Every FileFormat tag has an entry, including reserved ones.
    """

    _REGISTRY = {
        FileFormat.CSV: CSVAdapter,
        FileFormat.JSON: JSONAdapter,
        FileFormat.JSONL: JSONLinesAdapter,
        FileFormat.PARQUET: ParquetAdapter,
    }

    IMPLEMENTED = (FileFormat.CSV, FileFormat.JSON, FileFormat.JSONL)

    @classmethod
    def get_adapter(cls, format_name: str):
        return cls._REGISTRY[FileFormat.normalize(format_name)]

    @classmethod
    def formats(cls):
        return {
            name: ("implemented" if name in cls.IMPLEMENTED else "not_implemented")
            for name in cls._REGISTRY
        }
