"""
Custom exception classes for kvbootstrap.

Every failure in the import path is raised as one of these; only the CLI
turns them into exit codes.
"""

from enum import Enum
from typing import Any, Optional


class KvBootstrapException(Exception):
    """Base exception class for all kvbootstrap exceptions."""

    pass


class DocumentLoadError(KvBootstrapException):
    """Raised when the YAML document cannot be read or parsed."""

    def __init__(self, path: Optional[str], reason: str):
        self.path = path
        self.reason = reason
        if path:
            super().__init__(f"Could not load document {path}: {reason}")
        else:
            super().__init__(f"Could not load document: {reason}")


class MalformedDocumentError(KvBootstrapException):
    """
    Raised when the document parses as YAML but does not fit the
    mapping / sequence-of-paths / scalar model.

    Example:
        >>> raise MalformedDocumentError(
        ...     "sequence items must be file paths",
        ...     location="line 4, column 7",
        ... )
    """

    def __init__(self, reason: str, location: Optional[str] = None):
        self.reason = reason
        self.location = location
        message = reason
        if location:
            message += f" ({location})"
        super().__init__(message)


class FileIncludeError(KvBootstrapException):
    """Raised when a file listed under a sequence cannot be read."""

    def __init__(self, key: str, file_path: str, cause: Exception):
        self.key = key
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"Cannot include file {file_path!r} for key {key!r}: {cause}")


class SinkError(KvBootstrapException):
    """Raised when a sink fails during connect or write."""

    pass


class SinkConnectionError(SinkError):
    """Raised when no store endpoint can be reached."""

    pass


class SinkWriteError(SinkError):
    """Raised when a single key write fails or times out."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Write of key {key!r} failed: {reason}")


class NullNodePolicy(Enum):
    """Policy for document values that are none of mapping, sequence or scalar."""

    SKIP = "skip"              # Drop the node silently (default)
    FAIL = "fail"              # Raise MalformedDocumentError


class NullNodeHandler:
    """
    Handles null document values based on configured policy.

    Usage:
        >>> handler = NullNodeHandler(policy=NullNodePolicy.FAIL)
        >>> handler.handle(key="services/mail", location="line 3, column 8")
        # Raises MalformedDocumentError

        >>> handler = NullNodeHandler(policy=NullNodePolicy.SKIP)
        >>> handler.handle(key="services/mail", location="line 3, column 8")
        # Node is dropped and counted in handler.skipped
    """

    def __init__(
        self,
        policy: NullNodePolicy = NullNodePolicy.SKIP,
        logger: Optional[Any] = None,
    ):
        self.policy = policy
        self.logger = logger
        self.skipped = 0

    def handle(self, key: str, location: Optional[str] = None) -> None:
        """
        Drop or reject a null value found at ``key``.

        Raises:
            MalformedDocumentError: If policy is FAIL
        """
        if self.policy == NullNodePolicy.FAIL:
            raise MalformedDocumentError(f"Key {key!r} has no value", location=location)

        self.skipped += 1
        if self.logger:
            self.logger.debug(f"Skipping null value at {key!r} ({location})")


