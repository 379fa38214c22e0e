import pytest

from kvbootstrap.bootstrap import load_builtin_plugins
from kvbootstrap.sinks.registry import SinkRegistry, SinkRegistryError, register_sink
from kvbootstrap.wiring.sink_registry import (
    SinkWiringRegistry,
    SinkWiringRegistryError,
    register_sink_wiring,
)


def setup_function() -> None:
    SinkRegistry.clear()
    SinkWiringRegistry.clear()


def teardown_function() -> None:
    # Restore built-ins for other test modules.
    load_builtin_plugins(reload=True)


def test_register_and_get_round_trip():
    class Dummy:
        pass

    SinkRegistry.register(system_type="etcd", sink_class=Dummy)

    assert SinkRegistry.get("etcd") is Dummy
    assert SinkRegistry.try_get("etcd") is Dummy


def test_get_missing_raises_helpful_error():
    with pytest.raises(SinkRegistryError, match="No sink registered"):
        SinkRegistry.get("consul")


def test_duplicate_registration_raises_by_default():
    class Dummy1:
        pass

    class Dummy2:
        pass

    SinkRegistry.register(system_type="etcd", sink_class=Dummy1)

    with pytest.raises(SinkRegistryError, match="already registered"):
        SinkRegistry.register(system_type="etcd", sink_class=Dummy2)

    SinkRegistry.register(system_type="etcd", sink_class=Dummy2, overwrite=True)
    assert SinkRegistry.get("etcd") is Dummy2


def test_register_sink_decorator_registers_class():
    @register_sink(system_type="memory")
    class Dummy:
        pass

    assert SinkRegistry.get("memory") is Dummy


def test_wiring_registry_decorator_and_missing_lookup():
    @register_sink_wiring(system_type="memory")
    def builder(**_kwargs):
        return None

    assert SinkWiringRegistry.get("memory") is builder
    with pytest.raises(SinkWiringRegistryError, match="No sink wiring registered"):
        SinkWiringRegistry.get("etcd")


def test_load_builtin_plugins_registers_etcd_and_memory():
    load_builtin_plugins(reload=True)

    assert SinkRegistry.get("etcd").__name__ == "EtcdSink"
    assert SinkRegistry.get("memory").__name__ == "MemorySink"
    assert SinkWiringRegistry.get("etcd").__name__ == "build_etcd_sink_args"
    assert SinkWiringRegistry.get("memory").__name__ == "build_memory_sink_args"
