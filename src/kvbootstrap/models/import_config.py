from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from kvbootstrap.core.exceptions import NullNodePolicy
from kvbootstrap.models.sink_config import EtcdSinkConfig, SinkConfig


class ImportConfig(BaseModel):
    # YAML document to import
    file: str

    # Key prefix; a trailing "/" is dropped before the walk
    prefix: str = ""

    # Directory that relative include paths resolve against (default: cwd)
    include_root: Optional[str] = None

    # What to do with keys whose value is null
    null_policy: Literal["skip", "fail"] = "skip"

    # Route writes to an in-memory sink instead of the configured one
    dry_run: bool = False

    sink: SinkConfig = Field(default_factory=EtcdSinkConfig)

    @field_validator("file")
    @classmethod
    def _file_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("file must not be empty")
        return value

    @property
    def null_node_policy(self) -> NullNodePolicy:
        return NullNodePolicy(self.null_policy)
