from __future__ import annotations

import importlib
import sys
from typing import Iterable


BUILTIN_PLUGIN_MODULES: tuple[str, ...] = (
    # Sink wiring
    "kvbootstrap.wiring.etcd_sink_wiring",
    "kvbootstrap.wiring.memory_sink_wiring",

    # Sinks
    "kvbootstrap.sinks.etcd_sink",
    "kvbootstrap.sinks.memory_sink",
)


_LOADED = False


def load_builtin_plugins(*, reload: bool = False, modules: Iterable[str] = BUILTIN_PLUGIN_MODULES) -> None:
    """Import built-in sink + wiring modules so decorators register them.

    In production, call with reload=False (default) so imports are cheap.
    In tests, call with reload=True after clearing registries to re-run decorators.
    """

    global _LOADED

    if _LOADED and not reload:
        return

    if reload:
        from kvbootstrap.sinks.registry import SinkRegistry
        from kvbootstrap.wiring.sink_registry import SinkWiringRegistry

        SinkRegistry.clear()
        SinkWiringRegistry.clear()

    for module_name in modules:
        if reload:
            sys.modules.pop(module_name, None)
        importlib.import_module(module_name)

    _LOADED = True
