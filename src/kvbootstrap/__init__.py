"""kvbootstrap.

Import a hierarchical YAML document into the etcd key-value store.

Nested mappings become "/"-joined key paths, scalars become values, and lists
name files whose contents are concatenated into a single value.
"""

__version__ = "0.1.0"

from kvbootstrap.importer import KvImporter
from kvbootstrap.cli import main

__all__ = [
    "KvImporter",
    "main",
]
