import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from kvbootstrap.bootstrap import load_builtin_plugins
from kvbootstrap.cli import build_parser, main, merge_cli_args


def setup_function() -> None:
    load_builtin_plugins(reload=True)


@pytest.fixture
def document(tmp_path: Path) -> Path:
    doc = tmp_path / "app.yml"
    doc.write_text("services:\n  redis_dsn: tcp://127.0.0.1:6379\n", encoding="utf-8")
    return doc


def _etcd_client() -> MagicMock:
    client = MagicMock(spec=httpx.Client)
    version = MagicMock(status_code=200)
    version.json.return_value = {"etcdserver": "3.5.9"}
    put = MagicMock(status_code=200)
    put.json.return_value = {}
    client.get.return_value = version
    client.post.return_value = put
    return client


def test_missing_file_flag_exits_with_1(capsys):
    assert main([]) == 1
    assert "Missing required parameter --file" in capsys.readouterr().out


def test_unreadable_file_exits_with_1(tmp_path: Path, capsys):
    missing = tmp_path / "missing.yml"

    assert main(["-f", str(missing)]) == 1
    assert f"Could not open file {missing}." in capsys.readouterr().out


def test_dry_run_succeeds_without_store(document: Path, caplog):
    assert main(["-f", str(document), "-p", "/service/demo/", "--dry-run"]) == 0
    assert 'Key: "service/demo/services/redis_dsn" Data: "tcp://127.0.0.1:6379"' in caplog.text


def test_import_writes_to_connected_endpoints(document: Path):
    client = _etcd_client()

    with patch("httpx.Client", return_value=client):
        code = main(["-f", str(document), "-p", "/p", "-c", "10.0.0.1:2379,10.0.0.2:2379"])

    assert code == 0
    client.get.assert_called_once_with("http://10.0.0.1:2379/version", timeout=5.0)
    assert client.post.call_args.args[0] == "http://10.0.0.1:2379/v3/kv/put"


def test_connection_failure_exits_with_1(document: Path, caplog):
    client = _etcd_client()
    client.get.side_effect = httpx.ConnectError("connection refused")

    with patch("httpx.Client", return_value=client):
        code = main(["-f", str(document), "-c", "10.0.0.1:2379"])

    assert code == 1
    assert "Import failed" in caplog.text
    client.post.assert_not_called()


def test_write_failure_exits_with_1(document: Path):
    client = _etcd_client()
    client.post.side_effect = httpx.ReadTimeout("read timed out")

    with patch("httpx.Client", return_value=client):
        assert main(["-f", str(document)]) == 1


def test_malformed_document_exits_with_1(tmp_path: Path):
    doc = tmp_path / "bad.yml"
    doc.write_text("a:\n  - [nested]\n", encoding="utf-8")

    assert main(["-f", str(doc), "--dry-run"]) == 1


def test_strict_flag_fails_on_empty_values(tmp_path: Path):
    doc = tmp_path / "app.yml"
    doc.write_text("a:\n", encoding="utf-8")

    assert main(["-f", str(doc), "--dry-run"]) == 0
    assert main(["-f", str(doc), "--dry-run", "--strict"]) == 1


def test_config_file_supplies_settings(tmp_path: Path, document: Path):
    config = tmp_path / "import.json"
    config.write_text(
        json.dumps({"file": str(document), "prefix": "/from-config", "dry_run": True}),
        encoding="utf-8",
    )

    assert main(["--config", str(config)]) == 0


def test_config_file_with_unknown_format_exits_with_1(tmp_path: Path):
    config = tmp_path / "import.toml"
    config.write_text("file = 'app.yml'\n", encoding="utf-8")

    assert main(["--config", str(config)]) == 1


def test_flags_override_config_sink_settings():
    args = build_parser().parse_args(
        ["-f", "app.yml", "-c", "10.0.0.9:2379", "--write-timeout", "1.5", "--user", "root:pw"]
    )
    config = {"prefix": "/cfg", "sink": {"system_type": "etcd", "endpoints": ["10.0.0.1:2379"]}}

    merged = merge_cli_args(config, args)

    assert merged["file"] == "app.yml"
    assert merged["prefix"] == "/cfg"
    assert merged["sink"] == {
        "system_type": "etcd",
        "endpoints": "10.0.0.9:2379",
        "write_timeout_seconds": 1.5,
        "username": "root",
        "password": "pw",
    }


def test_etcd_flags_conflict_with_memory_sink():
    args = build_parser().parse_args(["-f", "app.yml", "-c", "10.0.0.9:2379"])

    with pytest.raises(ValueError, match="only apply to etcd"):
        merge_cli_args({"sink": {"system_type": "memory"}}, args)


def test_user_without_password_separator_is_rejected(document: Path):
    args = build_parser().parse_args(["-f", "app.yml", "--user", "root"])

    with pytest.raises(ValueError, match="name:password"):
        merge_cli_args({}, args)

    assert main(["-f", str(document), "--user", "root"]) == 1
