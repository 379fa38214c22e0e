"""Document node types.

A parsed document is a tree of exactly three node kinds. Anything else is
rejected when the tree is built, so the flattener can match exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple, Union

from kvbootstrap.core.exceptions import MalformedDocumentError


@dataclass(frozen=True)
class ScalarNode:
    """Leaf text value, kept exactly as written in the document."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise MalformedDocumentError(
                f"Scalar value must be text, got {type(self.value).__name__}"
            )


@dataclass(frozen=True)
class SequenceNode:
    """Ordered list of file paths whose contents form one value."""

    items: Tuple[ScalarNode, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        for idx, item in enumerate(self.items):
            if not isinstance(item, ScalarNode):
                raise MalformedDocumentError(
                    f"Sequence item {idx} must be a file path, got {type(item).__name__}"
                )

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(item.value for item in self.items)


@dataclass(frozen=True)
class MappingNode:
    """One nesting level: unique keys to child nodes."""

    items: Dict[str, "Node"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, child in self.items.items():
            if not isinstance(key, str):
                raise MalformedDocumentError(f"Mapping key must be text, got {key!r}")
            if not isinstance(child, NODE_TYPES):
                raise MalformedDocumentError(
                    f"Value of key {key!r} is not a mapping, sequence or scalar: {type(child).__name__}"
                )

    def children(self) -> Iterator[Tuple[str, "Node"]]:
        return iter(self.items.items())


Node = Union[MappingNode, SequenceNode, ScalarNode]

NODE_TYPES = (MappingNode, SequenceNode, ScalarNode)


def from_python(obj) -> Node:
    """Build a node tree from plain dicts, lists and strings.

    Handy for programmatic imports and tests; every list item must be a
    string path.
    """
    if isinstance(obj, dict):
        return MappingNode({str(k): from_python(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return SequenceNode(tuple(ScalarNode(item) if isinstance(item, str) else item for item in obj))
    if isinstance(obj, str):
        return ScalarNode(obj)
    raise MalformedDocumentError(f"Cannot build a document node from {type(obj).__name__}")
