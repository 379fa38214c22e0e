from __future__ import annotations

import os
from typing import Mapping, Optional

from kvbootstrap.core.secrets_provider import SecretsProvider


class EnvSecretsProvider(SecretsProvider):
    """Secrets provider reading environment variables.

    Only ``vault_ref="env"`` is served; ``secret_key`` is the variable name.
    """

    VAULT_REF = "env"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get_secret(self, vault_ref: str, secret_key: str) -> Optional[str]:
        if vault_ref != self.VAULT_REF:
            return None
        return self._environ.get(secret_key)
