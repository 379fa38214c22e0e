"""Tree flattener: turns a document node tree into key/value writes.

Mappings only extend the key path, scalars become one write each, and a
sequence becomes one write holding the concatenated bytes of the files it
lists. Writes go to the injected sink one at a time, in traversal order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

from kvbootstrap.core.base_sink import BaseSink
from kvbootstrap.core.contracts import WriteRecord
from kvbootstrap.core.exceptions import FileIncludeError, MalformedDocumentError
from kvbootstrap.core.logger import get_logger
from kvbootstrap.core.nodes import MappingNode, Node, ScalarNode, SequenceNode

logger = get_logger(__name__)

KEY_SEPARATOR = "/"


@dataclass
class FlattenStats:
    records_written: int = 0
    bytes_written: int = 0
    keys: List[str] = field(default_factory=list)

    def add(self, record: WriteRecord) -> None:
        self.records_written += 1
        self.bytes_written += len(record.value)
        self.keys.append(record.key)


def normalize_prefix(prefix: Optional[str]) -> str:
    """Strip trailing separators from the base prefix; nothing else changes."""
    return (prefix or "").rstrip(KEY_SEPARATOR)


class TreeFlattener:
    """
    Depth-first walker emitting one ``WriteRecord`` per leaf.

    Args:
        sink: Store client receiving each record through ``put``.
        include_root: Directory relative include paths resolve against.
            Defaults to the process working directory.
    """

    def __init__(self, sink: BaseSink, *, include_root: Optional[Union[str, Path]] = None):
        self.sink = sink
        self.include_root = Path(include_root) if include_root else None

    def walk(
        self,
        root: Optional[Node],
        prefix: Optional[str] = "",
        *,
        stats: Optional[FlattenStats] = None,
    ) -> FlattenStats:
        """Flatten a whole document under ``prefix``."""
        stats = stats if stats is not None else FlattenStats()
        if root is None:
            logger.warning("Document is empty; nothing to import")
            return stats
        return self.flatten(normalize_prefix(prefix), root, stats=stats)

    def flatten(self, path: str, node: Node, *, stats: Optional[FlattenStats] = None) -> FlattenStats:
        """Write every leaf below ``node``; ``path`` is the node's full key.

        Pass ``stats`` to keep the count of completed writes when a later
        write fails.

        Raises:
            FileIncludeError: A listed file cannot be read. Records emitted
                before it stay written.
            SinkError: The sink rejected a write.
        """
        stats = stats if stats is not None else FlattenStats()
        for record in self.iter_records(path, node):
            self.sink.put(record.key, record.value)
            _log_record(record)
            stats.add(record)
        return stats

    def iter_records(self, path: str, node: Node) -> Iterator[WriteRecord]:
        """Lazily yield the records below ``node`` in traversal order."""
        if isinstance(node, MappingNode):
            for key, child in node.children():
                yield from self.iter_records(f"{path}{KEY_SEPARATOR}{key}", child)
        elif isinstance(node, ScalarNode):
            yield WriteRecord(key=path, value=node.value.encode("utf-8"), source="scalar")
        elif isinstance(node, SequenceNode):
            yield WriteRecord(key=path, value=self._read_includes(path, node), source="files")
        else:
            raise MalformedDocumentError(
                f"Node at {path or KEY_SEPARATOR!r} is not a mapping, sequence or scalar: {type(node).__name__}"
            )

    def _resolve(self, file_name: str) -> Path:
        target = Path(file_name)
        if self.include_root is not None and not target.is_absolute():
            return self.include_root / target
        return target

    def _read_includes(self, path: str, node: SequenceNode) -> bytes:
        buf = bytearray()
        for file_name in node.paths:
            target = self._resolve(file_name)
            try:
                with open(target, "rb") as fh:
                    buf += fh.read()
            except OSError as exc:
                raise FileIncludeError(path, str(target), exc) from exc
            logger.debug(f"Included {target} for key {path!r}")
        return bytes(buf)


def _log_record(record: WriteRecord) -> None:
    if record.source == "files":
        logger.info(f'Key: "{record.display_key}" Data: "File({len(record.value)} Bytes)"')
    else:
        logger.info(f'Key: "{record.display_key}" Data: "{record.value.decode("utf-8")}"')
