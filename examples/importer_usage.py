"""
Example: Using KvImporter from Python instead of the command line.
"""

from kvbootstrap import KvImporter
from kvbootstrap.providers.env_secrets_provider import EnvSecretsProvider
from kvbootstrap.sinks.memory_sink import MemorySink


# =============================================================================
# Example 1: Preview the keys with an in-memory sink
# =============================================================================
sink = MemorySink()
report = KvImporter(run_id="preview").run(
    {"file": "examples/app.yml", "prefix": "/service/demo", "include_root": "examples"},
    sink=sink,
)
for key in sorted(sink.data):
    print(f"{key} -> {len(sink.data[key])} bytes")


# =============================================================================
# Example 2: Import into etcd with credentials from the environment
# =============================================================================
report = KvImporter().run(
    {
        "file": "examples/app.yml",
        "prefix": "/service/demo",
        "include_root": "examples",
        "sink": {
            "system_type": "etcd",
            "endpoints": "127.0.0.1:2379",
            "username": "root",
            "password_secret_ref": {"vault_ref": "env", "secret_key": "ETCD_ROOT_PASSWORD"},
        },
    },
    secrets_provider=EnvSecretsProvider(),
)
print(report.to_dict())
