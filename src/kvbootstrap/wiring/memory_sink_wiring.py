from __future__ import annotations

from typing import Optional

from kvbootstrap.core.secrets_provider import SecretsProvider
from kvbootstrap.models.sink_config import MemorySinkConfig
from kvbootstrap.sinks.types import MemorySinkRuntimeConfig
from kvbootstrap.wiring.sink_registry import BuiltSinkArgs, register_sink_wiring


@register_sink_wiring(system_type="memory")
def build_memory_sink_args(
    *,
    sink: MemorySinkConfig,
    secrets_provider: Optional[SecretsProvider] = None,
) -> BuiltSinkArgs:
    _ = secrets_provider
    return BuiltSinkArgs(args=(MemorySinkRuntimeConfig(system_type=sink.system_type),), kwargs={})
