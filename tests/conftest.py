from pathlib import Path

import pytest

from kvbootstrap.sinks.memory_sink import MemorySink


@pytest.fixture
def memory_sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def include_files(tmp_path: Path) -> Path:
    """Directory holding two small include files, f1 = AB and f2 = CD."""
    (tmp_path / "f1").write_bytes(b"AB")
    (tmp_path / "f2").write_bytes(b"CD")
    return tmp_path
