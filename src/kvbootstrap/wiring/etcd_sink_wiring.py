from __future__ import annotations

from typing import Optional

from kvbootstrap.core.secrets_provider import SecretsProvider
from kvbootstrap.models.sink_config import EtcdSinkConfig
from kvbootstrap.sinks.types import EtcdAuth, EtcdSinkRuntimeConfig
from kvbootstrap.wiring.sink_registry import BuiltSinkArgs, register_sink_wiring


def _auth_from_sink(
    cfg: EtcdSinkConfig,
    secrets_provider: Optional[SecretsProvider] = None,
) -> Optional[EtcdAuth]:
    if not cfg.username:
        return None

    password = cfg.password
    if password is None and cfg.password_secret_ref is not None:
        ref = cfg.password_secret_ref
        if secrets_provider is None:
            raise ValueError("password_secret_ref provided but no secrets_provider was passed")
        password = secrets_provider.get_secret(ref.vault_ref, ref.secret_key)
        if password is None:
            raise ValueError(
                f"secrets_provider returned None for password_secret_ref={ref.vault_ref!r}/{ref.secret_key!r}"
            )
    return EtcdAuth(username=cfg.username, password=password)


def build_etcd_runtime_config(
    cfg: EtcdSinkConfig,
    *,
    secrets_provider: Optional[SecretsProvider] = None,
) -> EtcdSinkRuntimeConfig:
    # This wiring module is the only layer allowed to read Pydantic config.
    return EtcdSinkRuntimeConfig(
        endpoints=list(cfg.endpoints),
        dial_timeout_seconds=float(cfg.dial_timeout_seconds),
        write_timeout_seconds=float(cfg.write_timeout_seconds),
        auth=_auth_from_sink(cfg, secrets_provider=secrets_provider),
        headers=dict(cfg.headers),
    )


@register_sink_wiring(system_type="etcd")
def build_etcd_sink_args(
    *,
    sink: EtcdSinkConfig,
    secrets_provider: Optional[SecretsProvider] = None,
) -> BuiltSinkArgs:
    runtime_cfg = build_etcd_runtime_config(sink, secrets_provider=secrets_provider)
    # Let the sink construct its own HTTP client from the timeouts.
    return BuiltSinkArgs(args=(runtime_cfg,), kwargs={})
