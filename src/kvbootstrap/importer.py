from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, Union

from kvbootstrap.bootstrap import load_builtin_plugins
from kvbootstrap.core.base_sink import BaseSink
from kvbootstrap.core.contracts import ExecutionContext, ImportReport
from kvbootstrap.core.exceptions import NullNodeHandler
from kvbootstrap.core.logger import get_logger, push_run_id, reset_run_id
from kvbootstrap.core.secrets_provider import SecretsProvider
from kvbootstrap.flattener import FlattenStats, TreeFlattener, normalize_prefix
from kvbootstrap.loader import load_document
from kvbootstrap.models.import_config import ImportConfig
from kvbootstrap.models.sink_config import MemorySinkConfig
from kvbootstrap.sinks.registry import SinkRegistry
from kvbootstrap.wiring.sink_registry import SinkWiringRegistry


class KvImporter:
    """
    High-level entry point for importing a YAML document into a key-value store.

    Example:
        >>> from kvbootstrap import KvImporter
        >>> report = KvImporter().run({"file": "app.yml", "prefix": "/service/demo"})
        >>> report.records_written
        3
    """

    def __init__(self, run_id: Optional[str | int] = None):
        """
        Args:
            run_id: Identifier attached to every log line of the run.
                    If not provided, a UUID will be generated.
        """
        self.run_id = str(run_id) if run_id is not None else str(uuid.uuid4())

    def run(
        self,
        cfg: Union[Dict[str, Any], ImportConfig],
        secrets_provider: Optional[SecretsProvider] = None,
        *,
        sink: Optional[BaseSink] = None,
    ) -> ImportReport:
        """
        Load the document, connect the sink and write every leaf.

        Args:
            cfg: Import configuration as a dict (validated here) or an ImportConfig.
            secrets_provider: Resolves ``password_secret_ref`` for etcd auth.
            sink: Pre-built sink to use instead of the configured one.

        Raises:
            ValidationError: If the config dict is invalid (pydantic raises this).
            KvBootstrapException: On any load, include or store failure.
        """
        if isinstance(cfg, dict):
            cfg = ImportConfig.model_validate(cfg)

        token = push_run_id(self.run_id)
        try:
            return run_import(self.run_id, cfg, secrets_provider=secrets_provider, sink=sink)
        finally:
            reset_run_id(token)


def build_sink(
    cfg: ImportConfig,
    *,
    secrets_provider: Optional[SecretsProvider] = None,
) -> BaseSink:
    """Instantiate the configured sink through the registries."""
    load_builtin_plugins()

    sink_cfg = MemorySinkConfig() if cfg.dry_run else cfg.sink
    sink_cls = SinkRegistry.get(sink_cfg.system_type)
    builder = SinkWiringRegistry.get(sink_cfg.system_type)

    built = builder(sink=sink_cfg, secrets_provider=secrets_provider)
    return sink_cls(*built.args, **built.kwargs)


def run_import(
    run_id: str,
    cfg: ImportConfig,
    *,
    secrets_provider: Optional[SecretsProvider] = None,
    sink: Optional[BaseSink] = None,
) -> ImportReport:
    log = get_logger(__name__)

    # Parse fully before touching the store so input errors cause no writes.
    null_handler = NullNodeHandler(policy=cfg.null_node_policy, logger=log)
    root = load_document(cfg.file, null_handler=null_handler)
    log.info(f"Loaded document {cfg.file}")

    if sink is None:
        sink = build_sink(cfg, secrets_provider=secrets_provider)
    context = ExecutionContext(
        run_id=run_id,
        source_file=cfg.file,
        prefix=normalize_prefix(cfg.prefix),
        dry_run=cfg.dry_run,
    )
    log.info(
        f"Importing into {sink.__class__.__name__} under prefix {context.prefix or '/'!r}"
        + (" (dry run)" if cfg.dry_run else "")
    )

    stats = FlattenStats()
    flattener = TreeFlattener(sink, include_root=cfg.include_root)
    try:
        sink.connect()
        flattener.walk(root, cfg.prefix, stats=stats)
    except Exception:
        if stats.records_written:
            log.error(
                f"Import aborted after {stats.records_written} key(s); "
                "keys already written are left in the store"
            )
        raise
    finally:
        sink.close()

    log.info(f"Imported {stats.records_written} key(s), {stats.bytes_written} bytes")
    return ImportReport(
        context=context,
        records_written=stats.records_written,
        bytes_written=stats.bytes_written,
        skipped_nodes=null_handler.skipped,
        keys=list(stats.keys),
    )
