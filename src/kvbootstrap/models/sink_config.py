from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, PositiveFloat, field_validator, model_validator

from kvbootstrap.sinks.types import DEFAULT_ENDPOINT


class SecretRefConfig(BaseModel):
    """Reference to a secret held outside the config file.

    With the built-in ``EnvSecretsProvider`` this is ``vault_ref="env"`` and the
    environment variable name as ``secret_key``.
    """

    vault_ref: str = "env"
    secret_key: str


def _normalize_endpoint(endpoint: str) -> str:
    endpoint = endpoint.strip().rstrip("/")
    if "://" not in endpoint:
        endpoint = f"http://{endpoint}"
    return endpoint


class EtcdSinkConfig(BaseModel):
    system_type: Literal["etcd"] = "etcd"

    # Accepts a list or the comma-separated form used by --connect.
    endpoints: List[str] = Field(default_factory=lambda: [DEFAULT_ENDPOINT])

    dial_timeout_seconds: PositiveFloat = 5.0
    write_timeout_seconds: PositiveFloat = 3.0

    username: Optional[str] = None
    password: Optional[str] = None
    password_secret_ref: Optional[SecretRefConfig] = None

    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("endpoints", mode="before")
    @classmethod
    def _split_endpoints(cls, value: Any) -> Any:
        if value is None:
            return [DEFAULT_ENDPOINT]
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            cleaned = [_normalize_endpoint(str(v)) for v in value if str(v).strip()]
            return cleaned or [DEFAULT_ENDPOINT]
        return value

    @model_validator(mode="after")
    def _validate_auth(self) -> "EtcdSinkConfig":
        if self.password is not None and self.password_secret_ref is not None:
            raise ValueError("Set either password or password_secret_ref, not both")
        has_secret = self.password is not None or self.password_secret_ref is not None
        if has_secret and not self.username:
            raise ValueError("username is required when a password is configured")
        if self.username and not has_secret:
            raise ValueError("etcd auth requires either password or password_secret_ref")
        return self


class MemorySinkConfig(BaseModel):
    """Keeps writes in process memory; used for dry runs."""

    system_type: Literal["memory"] = "memory"


SinkConfig = Annotated[
    Union[EtcdSinkConfig, MemorySinkConfig],
    Field(discriminator="system_type"),
]
