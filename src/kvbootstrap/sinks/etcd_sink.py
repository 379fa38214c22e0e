from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import httpx

from kvbootstrap.core.base_sink import BaseSink
from kvbootstrap.core.exceptions import SinkConnectionError, SinkError, SinkWriteError
from kvbootstrap.sinks.registry import register_sink
from kvbootstrap.sinks.types import EtcdSinkRuntimeConfig


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@register_sink(system_type="etcd")
class EtcdSink(BaseSink):
    """
    Key-value sink for etcd v3, spoken through the JSON gRPC gateway.

    Each ``put`` is one blocking ``/v3/kv/put`` request bounded by the write
    timeout. There is no batching and no retry; any failure is raised as
    ``SinkWriteError`` and leaves earlier writes in place.
    """

    def __init__(
        self,
        config: EtcdSinkRuntimeConfig,
        *,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(config)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(config.write_timeout_seconds, connect=config.dial_timeout_seconds),
            headers=dict(config.headers),
        )
        self._endpoint: Optional[str] = None
        self._token: Optional[str] = None

    @property
    def endpoint(self) -> Optional[str]:
        return self._endpoint

    def connect(self) -> None:
        """Bind to the first endpoint that answers ``/version``."""
        cfg = self.config
        errors: List[str] = []
        for endpoint in cfg.endpoints:
            try:
                resp = self._client.get(f"{endpoint}/version", timeout=cfg.dial_timeout_seconds)
                resp.raise_for_status()
            except httpx.HTTPError as exc:
                self.log_warn(f"etcd endpoint {endpoint} unavailable: {exc}")
                errors.append(f"{endpoint}: {exc}")
                continue

            self._endpoint = endpoint
            version = _safe_json(resp).get("etcdserver", "unknown")
            self.log_info(f"Connected to etcd at {endpoint} (server {version})")
            break
        else:
            raise SinkConnectionError(
                f"Could not reach any etcd endpoint within {cfg.dial_timeout_seconds}s: {'; '.join(errors)}"
            )

        if cfg.auth is not None:
            self._authenticate()

    def _authenticate(self) -> None:
        auth = self.config.auth
        try:
            resp = self._client.post(
                f"{self._endpoint}/v3/auth/authenticate",
                json={"name": auth.username, "password": auth.password},
                timeout=self.config.dial_timeout_seconds,
            )
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise SinkConnectionError(f"etcd authentication failed for user {auth.username!r}: {exc}") from exc

        token = _safe_json(resp).get("token")
        if not token:
            raise SinkConnectionError(f"etcd authentication for user {auth.username!r} returned no token")
        self._token = token
        self.log_info(f"Authenticated to etcd as {auth.username!r}")

    def _request_headers(self) -> Dict[str, str]:
        if self._token:
            return {"Authorization": self._token}
        return {}

    def put(self, key: str, value: bytes) -> None:
        if self._endpoint is None:
            raise SinkError("EtcdSink.put() called before connect()")

        payload = {"key": _b64(key.encode("utf-8")), "value": _b64(bytes(value))}
        try:
            resp = self._client.post(
                f"{self._endpoint}/v3/kv/put",
                json=payload,
                headers=self._request_headers(),
                timeout=self.config.write_timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise SinkWriteError(key, f"timed out after {self.config.write_timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise SinkWriteError(key, str(exc)) from exc

        if resp.status_code >= 400:
            raise SinkWriteError(key, f"HTTP {resp.status_code}: {resp.text[:200]}")

        body = _safe_json(resp)
        if body.get("error"):
            raise SinkWriteError(key, str(body.get("message") or body["error"]))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
        self._endpoint = None
        self._token = None


def _safe_json(resp: Any) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
