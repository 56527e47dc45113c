import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from catalog_infer.canonical.column import Column
from catalog_infer.inference.cancellation import CancellationToken
from catalog_infer.inference.config import InferConfig


class SchemaInferrer(ABC):
    """
    Contract shared by the document, file and key pattern engines.

    The config is swapped copy-on-write under a lock; every infer() call
    takes one snapshot at entry and uses it for the whole run, so a
    concurrent set_config() never changes an in-flight inference.
    """

    def __init__(self, config: Optional[InferConfig] = None):
        self.name = self.__class__.__name__
        self._config = config or InferConfig()
        self._config_lock = threading.Lock()

    def set_config(self, config: InferConfig) -> None:
        if not isinstance(config, InferConfig):
            raise ValueError(f"Expected InferConfig, got {type(config).__name__}")
        with self._config_lock:
            self._config = config

    def get_config(self) -> InferConfig:
        with self._config_lock:
            return self._config

    def _snapshot(self, override: Optional[InferConfig] = None) -> InferConfig:
        return override if override is not None else self.get_config()

    @abstractmethod
    def infer(
        self,
        token: Optional[CancellationToken],
        samples: Sequence[Any],
        config: Optional[InferConfig] = None,
    ) -> List[Column]:
        """Analyze samples and return the inferred columns in output order."""
        pass
