from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from kvbootstrap.core.logger import get_logger


class BaseSink(ABC):
    def __init__(self, config: Any):
        self.config = config
        self.log = get_logger(f"kvbootstrap.sinks.{self.__class__.__name__}")

    # --- Required method ---
    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """Write one key; an existing value for the key is overwritten."""
        raise NotImplementedError

    # --- Optional lifecycle hooks ---
    def connect(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "BaseSink":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # type: ignore
        self.close()
        return False

    # --- Logging helpers ---
    def log_info(self, msg: str):
        self.log.info(msg)

    def log_warn(self, msg: str):
        self.log.warning(msg)
