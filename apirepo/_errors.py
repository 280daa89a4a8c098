# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

__all__ = (
    "ErrorKind",
    "RepositoryError",
    "MissingInputError",
    "BuildRequestError",
    "TransportError",
    "DecodeError",
    "DependencyUnmetError",
    "SetError",
)


class ErrorKind(str, Enum):
    MISSING_INPUT = "missing_input"
    BUILD_REQUEST_FAILED = "build_request_failed"
    TRANSPORT_FAILED = "transport_failed"
    DECODE_FAILED = "decode_failed"
    DEPENDENCY_UNMET = "dependency_unmet"
    SET_FAILED = "set_failed"
    UNKNOWN = "unknown"


class RepositoryError(Exception):
    """Root of every failure surfaced by a repository pipeline.

    Interfaces may declare a subclass as their ``error_type``; failures are
    then converted into it with :meth:`from_error` so that callers only ever
    see one error family per interface.
    """

    default_message: ClassVar[str] = "Repository error"
    default_kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN
    status_code: int | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
        kind: ErrorKind | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}
        self.status_code = status_code
        self.kind = kind or self.default_kind

    @classmethod
    def from_error(cls, error: BaseException) -> RepositoryError:
        """Wrap an arbitrary failure into this error family."""
        if isinstance(error, cls):
            return error
        if isinstance(error, RepositoryError):
            return cls(
                error.message,
                details=error.details,
                status_code=error.status_code,
                cause=error,
                kind=error.kind,
            )
        return cls(str(error) or type(error).__name__, cause=error)

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            **({"status_code": self.status_code} if self.status_code else {}),
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> BaseException | None:
        """Get the cause of this error, if any."""
        return self.__cause__


class MissingInputError(RepositoryError):
    """A parametrized task was started without its input."""

    default_message = "Task started without input"
    default_kind = ErrorKind.MISSING_INPUT


class BuildRequestError(RepositoryError):
    default_message = "Failed to build request"
    default_kind = ErrorKind.BUILD_REQUEST_FAILED


class TransportError(RepositoryError):
    default_message = "Transport failed"
    default_kind = ErrorKind.TRANSPORT_FAILED


class DecodeError(RepositoryError):
    default_message = "Failed to decode output"
    default_kind = ErrorKind.DECODE_FAILED


class DependencyUnmetError(RepositoryError):
    """A resource dependency is not available.

    Fetches treat unmet dependencies as a skip, this error only shows up as
    the cause of a :class:`SetError`.
    """

    default_message = "Resource dependency unmet"
    default_kind = ErrorKind.DEPENDENCY_UNMET


class SetError(RepositoryError):
    default_message = "Failed to set resource value"
    default_kind = ErrorKind.SET_FAILED
