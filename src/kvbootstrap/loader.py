"""YAML document loader.

Builds the node tree from PyYAML's composed node graph instead of the
constructed Python objects, so scalar text reaches the store exactly as it
was written (``true``, ``0755`` and ``1.10`` are not reinterpreted).
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from kvbootstrap.core.exceptions import (
    DocumentLoadError,
    MalformedDocumentError,
    NullNodeHandler,
    NullNodePolicy,
)
from kvbootstrap.core.logger import get_logger
from kvbootstrap.core.nodes import MappingNode, Node, ScalarNode, SequenceNode

logger = get_logger(__name__)

NULL_TAG = "tag:yaml.org,2002:null"
MERGE_TAG = "tag:yaml.org,2002:merge"


def _location(node: yaml.Node) -> str:
    mark = node.start_mark
    return f"line {mark.line + 1}, column {mark.column + 1}"


def _is_null(node: yaml.Node) -> bool:
    return isinstance(node, yaml.ScalarNode) and node.tag == NULL_TAG


class _TreeBuilder:
    def __init__(self, null_handler: NullNodeHandler):
        self.null_handler = null_handler

    def build(self, node: yaml.Node, where: str) -> Optional[Node]:
        if _is_null(node):
            self.null_handler.handle(where or "/", location=_location(node))
            return None

        if isinstance(node, yaml.MappingNode):
            return self._mapping(node, where)
        if isinstance(node, yaml.SequenceNode):
            return self._sequence(node, where)
        if isinstance(node, yaml.ScalarNode):
            return ScalarNode(node.value)

        raise MalformedDocumentError(
            f"Unsupported YAML node {type(node).__name__} at {where or '/'}",
            location=_location(node),
        )

    def _mapping(self, node: yaml.MappingNode, where: str) -> MappingNode:
        items: Dict[str, Node] = {}
        seen = set()
        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                raise MalformedDocumentError(
                    f"Mapping keys must be plain text under {where or '/'}",
                    location=_location(key_node),
                )
            if key_node.tag == MERGE_TAG:
                raise MalformedDocumentError(
                    f"Merge keys are not supported under {where or '/'}",
                    location=_location(key_node),
                )

            key = key_node.value
            if key in seen:
                raise MalformedDocumentError(
                    f"Duplicate key {key!r} under {where or '/'}",
                    location=_location(key_node),
                )
            seen.add(key)

            child = self.build(value_node, f"{where}/{key}")
            if child is not None:
                items[key] = child
        return MappingNode(items)

    def _sequence(self, node: yaml.SequenceNode, where: str) -> SequenceNode:
        items = []
        for item in node.value:
            if not isinstance(item, yaml.ScalarNode) or _is_null(item):
                raise MalformedDocumentError(
                    f"Items of the list at {where or '/'} must be file paths",
                    location=_location(item),
                )
            items.append(ScalarNode(item.value))
        return SequenceNode(tuple(items))


def parse_document(
    text: Union[str, bytes],
    *,
    null_policy: NullNodePolicy = NullNodePolicy.SKIP,
    null_handler: Optional[NullNodeHandler] = None,
    source: Optional[str] = None,
) -> Optional[Node]:
    """Parse YAML text into a node tree.

    Returns None for an empty document.

    Raises:
        DocumentLoadError: If the text is not valid YAML or holds several documents
        MalformedDocumentError: If the YAML does not fit the node model
    """
    handler = null_handler or NullNodeHandler(policy=null_policy, logger=logger)
    try:
        composed = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        raise DocumentLoadError(source, str(exc)) from exc

    if composed is None:
        return None
    return _TreeBuilder(handler).build(composed, "")


def load_document(
    path: Union[str, Path],
    *,
    null_policy: NullNodePolicy = NullNodePolicy.SKIP,
    null_handler: Optional[NullNodeHandler] = None,
) -> Optional[Node]:
    """Read and parse the YAML file at ``path``."""
    doc_path = Path(path)
    try:
        text = doc_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(str(doc_path), str(exc)) from exc

    logger.debug(f"Read {len(text)} characters from {doc_path}")
    return parse_document(text, null_policy=null_policy, null_handler=null_handler, source=str(doc_path))
