from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

RecordSource = Literal["scalar", "files"]


@dataclass(frozen=True)
class WriteRecord:
    """One key/value write handed to a sink."""

    key: str
    value: bytes
    source: RecordSource = "scalar"

    @property
    def display_key(self) -> str:
        return self.key.lstrip("/")

    def __repr__(self) -> str:
        """Truncate large values to keep log output readable."""
        if len(self.value) <= 50:
            preview = repr(self.value)
        else:
            preview = f"{self.value[:50]!r}... ({len(self.value)} bytes)"
        return f"WriteRecord(key={self.key!r}, value={preview}, source={self.source!r})"


@dataclass
class ExecutionContext:
    """Importer-provided context for one run."""

    run_id: str                                 # Unique run identifier
    source_file: Optional[str] = None           # Document being imported
    prefix: str = ""                            # Key prefix after trailing slash removal
    dry_run: bool = False


@dataclass
class ImportReport:
    """Outcome of a completed import run."""

    context: ExecutionContext
    records_written: int = 0
    bytes_written: int = 0
    skipped_nodes: int = 0
    keys: List[str] = field(default_factory=list)

    @property
    def run_id(self) -> str:
        return self.context.run_id

    def to_dict(self) -> dict:
        return {
            "run_id": self.context.run_id,
            "source_file": self.context.source_file,
            "prefix": self.context.prefix,
            "dry_run": self.context.dry_run,
            "records_written": self.records_written,
            "bytes_written": self.bytes_written,
            "skipped_nodes": self.skipped_nodes,
            "keys": list(self.keys),
        }
