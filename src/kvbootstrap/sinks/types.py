from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional


DEFAULT_ENDPOINT = "http://127.0.0.1:2379"


@dataclass(frozen=True)
class EtcdAuth:
    username: str
    password: str


@dataclass
class EtcdSinkRuntimeConfig:
    """Connection settings for the etcd v3 JSON gateway.

    Endpoints are full base URLs (``http://10.0.0.1:2379``); the first one
    answering ``/version`` within the dial timeout is used for all writes.
    """
    system_type: Literal["etcd"] = "etcd"

    endpoints: List[str] = field(default_factory=lambda: [DEFAULT_ENDPOINT])
    dial_timeout_seconds: float = 5.0
    write_timeout_seconds: float = 3.0

    auth: Optional[EtcdAuth] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class MemorySinkRuntimeConfig:
    system_type: Literal["memory"] = "memory"
