from typing import Any, BinaryIO, List

from catalog_infer.utils.exceptions import UnsupportedFormatError


class ParquetAdapter:
    """
    Reserved Parquet format tag.

    Parquet files carry their own schema; reading it needs a Parquet reader
    integration that is not part of this package. Every read raises
    UnsupportedFormatError.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def read_documents(self) -> List[Any]:
        raise UnsupportedFormatError(
            "parquet",
            "Parquet format inference not implemented - requires a Parquet reader integration",
        )
