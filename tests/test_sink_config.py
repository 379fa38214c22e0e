import pytest
from pydantic import ValidationError

from kvbootstrap.core.exceptions import NullNodePolicy
from kvbootstrap.models.import_config import ImportConfig
from kvbootstrap.models.sink_config import EtcdSinkConfig, MemorySinkConfig
from kvbootstrap.sinks.types import DEFAULT_ENDPOINT


def test_endpoints_accept_comma_separated_string():
    cfg = EtcdSinkConfig(endpoints="192.168.1.1:2379, 192.168.1.2:2379")

    assert cfg.endpoints == ["http://192.168.1.1:2379", "http://192.168.1.2:2379"]


def test_endpoints_keep_scheme_and_strip_trailing_slash():
    cfg = EtcdSinkConfig(endpoints=["https://etcd.example.tld:2379/"])

    assert cfg.endpoints == ["https://etcd.example.tld:2379"]


def test_blank_endpoints_fall_back_to_default():
    assert EtcdSinkConfig(endpoints="").endpoints == [DEFAULT_ENDPOINT]
    assert EtcdSinkConfig().endpoints == [DEFAULT_ENDPOINT]


def test_default_timeouts():
    cfg = EtcdSinkConfig()

    assert cfg.dial_timeout_seconds == 5.0
    assert cfg.write_timeout_seconds == 3.0


def test_timeouts_must_be_positive():
    with pytest.raises(ValidationError):
        EtcdSinkConfig(write_timeout_seconds=0)


def test_password_requires_username():
    with pytest.raises(ValidationError, match="username is required"):
        EtcdSinkConfig(password="pw")


def test_username_requires_a_password_source():
    with pytest.raises(ValidationError, match="either password or password_secret_ref"):
        EtcdSinkConfig(username="root")


def test_password_and_secret_ref_are_exclusive():
    with pytest.raises(ValidationError, match="not both"):
        EtcdSinkConfig(
            username="root",
            password="pw",
            password_secret_ref={"secret_key": "ETCD_PASSWORD"},
        )


def test_import_config_defaults_to_etcd_sink():
    cfg = ImportConfig(file="app.yml")

    assert isinstance(cfg.sink, EtcdSinkConfig)
    assert cfg.prefix == ""
    assert cfg.null_node_policy is NullNodePolicy.SKIP


def test_import_config_discriminates_sink_by_system_type():
    cfg = ImportConfig.model_validate({"file": "app.yml", "sink": {"system_type": "memory"}})

    assert isinstance(cfg.sink, MemorySinkConfig)


def test_import_config_rejects_unknown_sink():
    with pytest.raises(ValidationError):
        ImportConfig.model_validate({"file": "app.yml", "sink": {"system_type": "consul"}})


def test_import_config_rejects_blank_file():
    with pytest.raises(ValidationError, match="file must not be empty"):
        ImportConfig(file="  ")
