"""
Command-line interface and entry points for kvbootstrap.

Loads a YAML file into etcd. Nested maps become key prefixes, lists are file
includes whose contents are concatenated into one value. Existing keys are
overwritten.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from kvbootstrap.core.logger import configure_root_logger, get_logger
from kvbootstrap.importer import KvImporter
from kvbootstrap.models.import_config import ImportConfig
from kvbootstrap.providers.env_secrets_provider import EnvSecretsProvider

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

EPILOG = """\
example:
  kv-bootstrap -f test.yml -p /service/demo -c "172.18.0.3:2379"

Nested YAML maps become the key path, for example:
  services:
    redis_dsn: tcp://127.0.0.1:6379
    mail:
      hostname: test.example.tdl
maps to:
  /services/redis_dsn -> tcp://127.0.0.1:6379
  /services/mail/hostname -> test.example.tdl

YAML lists are file includes, concatenated in order:
  services:
    web1:
      ssl_certificate:
        - ./ssl/web1.example.tld.crt
        - ./ssl/ca.crt
maps to:
  /services/web1/ssl_certificate -> (cat ./ssl/web1.example.tld.crt ./ssl/ca.crt)

The default etcd address is http://127.0.0.1:2379.
"""


def build_parser() -> argparse.ArgumentParser:
    from kvbootstrap import __version__

    parser = argparse.ArgumentParser(
        prog="kv-bootstrap",
        description=(
            "Import a YAML file into the etcd key value store; "
            "existing values are updated"
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--file", "-f",
        help="YAML file for populating the key value store",
    )
    parser.add_argument(
        "--prefix", "-p",
        help="Key prefix for the imported document (/test/bootstrap/)",
    )
    parser.add_argument(
        "--connect", "-c",
        help="etcd endpoints (192.168.1.1:2379,192.168.1.2:2379)",
    )
    parser.add_argument(
        "--config",
        help="YAML or JSON file with import settings; flags take precedence",
    )
    parser.add_argument(
        "--include-root",
        help="Directory that relative include paths resolve against (default: cwd)",
    )
    parser.add_argument(
        "--user",
        help="etcd credentials as name:password",
    )
    parser.add_argument(
        "--dial-timeout",
        type=float,
        help="Seconds to wait when connecting to an endpoint (default: 5)",
    )
    parser.add_argument(
        "--write-timeout",
        type=float,
        help="Seconds to wait for each key write (default: 3)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on keys with no (null) value instead of skipping them",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Walk the document and log every key without writing to etcd",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Read import settings from a JSON or YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as f:
        if config_file.suffix == ".json":
            config = json.load(f)
        elif config_file.suffix in (".yaml", ".yml"):
            config = yaml.safe_load(f)
        else:
            raise ValueError(
                f"Unsupported config format: {config_file.suffix}. "
                "Use .json or .yaml"
            )

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    logger.info(f"Loaded config from {config_path}")
    return config


def merge_cli_args(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Overlay command-line flags on settings read from a config file."""
    merged = dict(config)

    if args.file:
        merged["file"] = args.file
    if args.prefix is not None:
        merged["prefix"] = args.prefix
    if args.include_root:
        merged["include_root"] = args.include_root
    if args.strict:
        merged["null_policy"] = "fail"
    if args.dry_run:
        merged["dry_run"] = True

    sink_overrides: Dict[str, Any] = {}
    if args.connect:
        sink_overrides["endpoints"] = args.connect
    if args.dial_timeout is not None:
        sink_overrides["dial_timeout_seconds"] = args.dial_timeout
    if args.write_timeout is not None:
        sink_overrides["write_timeout_seconds"] = args.write_timeout
    if args.user:
        username, sep, password = args.user.partition(":")
        if not sep or not username:
            raise ValueError("--user must be given as name:password")
        sink_overrides["username"] = username
        sink_overrides["password"] = password

    if sink_overrides:
        sink = dict(merged.get("sink") or {"system_type": "etcd"})
        if sink.get("system_type", "etcd") != "etcd":
            raise ValueError(
                f"--connect/--user/timeouts only apply to etcd, config selects {sink['system_type']!r}"
            )
        sink.update(sink_overrides)
        merged["sink"] = sink

    return merged


def _is_readable(path: str) -> bool:
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one import and return the process exit code.

    Exit codes:
        0: every key was written
        1: missing or unreadable input file, invalid settings, or any
           parse, connection, include or write failure
    """
    args = build_parser().parse_args(argv)

    configure_root_logger("DEBUG" if args.verbose else "INFO")

    try:
        config = load_config_file(args.config) if args.config else {}
        settings = merge_cli_args(config, args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    file_name = settings.get("file")
    if not file_name:
        print("Missing required parameter --file (--file app.yaml).")
        return EXIT_FAILURE
    if not _is_readable(file_name):
        print(f"Could not open file {file_name}.")
        return EXIT_FAILURE

    try:
        cfg = ImportConfig.model_validate(settings)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    try:
        report = KvImporter().run(cfg, secrets_provider=EnvSecretsProvider())
    except Exception as e:
        logger.error(f"Import failed: {e}")
        return EXIT_FAILURE

    logger.debug(f"Import report: {report.to_dict()}")
    return EXIT_OK


def cli() -> None:
    """
    Console entry point.

    Usage:
        kv-bootstrap -f app.yml -p /service/demo -c 10.0.0.1:2379
    """
    sys.exit(main())


if __name__ == "__main__":
    cli()
