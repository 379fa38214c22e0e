from __future__ import annotations

from typing import Dict, List, Optional

from kvbootstrap.core.base_sink import BaseSink
from kvbootstrap.sinks.registry import register_sink
from kvbootstrap.sinks.types import MemorySinkRuntimeConfig


@register_sink(system_type="memory")
class MemorySink(BaseSink):
    """
    In-process key-value sink.

    Backs ``--dry-run`` imports and tests. Writes overwrite earlier values for
    the same key, matching the store semantics, and every call is kept in
    ``history`` in the order it was made.
    """

    def __init__(self, config: Optional[MemorySinkRuntimeConfig] = None):
        config = config or MemorySinkRuntimeConfig()
        super().__init__(config)
        self.data: Dict[str, bytes] = {}
        self.history: List[str] = []

    def put(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)
        self.history.append(key)

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)
