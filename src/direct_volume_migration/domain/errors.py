"""Domain exceptions and error classification for migration tasks."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum


class MigrationError(Exception):
    """Base class for migration errors."""


class ResourceNotFoundError(MigrationError):
    """Raised when a referenced resource cannot be found."""


class ResourceNotReadyError(MigrationError):
    """Raised when a referenced resource exists but is not ready yet."""


class ClusterClientError(MigrationError):
    """Raised when a cluster client cannot be built or a cluster call fails."""


class TransferBackendError(MigrationError):
    """Raised when the transfer backend rejects or fails a request."""


class ResourceConflictError(MigrationError):
    """Raised when a write is rejected because the stored object changed."""


class FatalPlanError(MigrationError):
    """Raised when the migration plan is structurally invalid and cannot be retried."""


class MigrationTaskNotFoundError(MigrationError):
    """Raised when a migration task cannot be found."""


class MigrationTaskValidationError(MigrationError):
    """Raised when a management request is invalid."""


class MigrationTaskStateError(MigrationTaskValidationError):
    """Raised when a management operation is not allowed in the task's current phase."""


class ResolutionError(MigrationError):
    """Wraps a failure raised while resolving reconcile inputs."""

    def __init__(self, resolver: str, step: str, cause: BaseException) -> None:
        super().__init__(f"{resolver}: {step}: {cause}")
        self.resolver = resolver
        self.step = step
        self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        """Resolution failures are retried unless the plan itself is broken."""

        return classify_error(self) is not ErrorKind.FATAL_PLAN


class ErrorKind(StrEnum):
    """Error categories that drive engine control flow."""

    CONFLICT = "Conflict"
    FATAL_PLAN = "FatalPlan"
    OTHER = "Other"


def iter_error_chain(exc: BaseException) -> list[BaseException]:
    """Return the exception followed by its causes, without cycles."""

    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and all(current is not seen for seen in chain):
        chain.append(current)
        current = current.__cause__
    return chain


def classify_error(exc: BaseException) -> ErrorKind:
    """Classify an error by the types found in its cause chain."""

    chain = iter_error_chain(exc)
    if any(isinstance(item, ResourceConflictError) for item in chain):
        return ErrorKind.CONFLICT
    if any(isinstance(item, FatalPlanError) for item in chain):
        return ErrorKind.FATAL_PLAN
    return ErrorKind.OTHER


def root_cause(exc: BaseException) -> BaseException:
    """Return the innermost error of a wrapped chain."""

    return iter_error_chain(exc)[-1]


@contextmanager
def resolution_step(resolver: str, step: str) -> Iterator[None]:
    """Wrap any failure raised inside the block with resolver context."""

    try:
        yield
    except ResolutionError:
        raise
    except Exception as exc:
        raise ResolutionError(resolver, step, exc) from exc


__all__ = [
    "ClusterClientError",
    "ErrorKind",
    "FatalPlanError",
    "MigrationError",
    "MigrationTaskNotFoundError",
    "MigrationTaskStateError",
    "MigrationTaskValidationError",
    "ResolutionError",
    "ResourceConflictError",
    "ResourceNotFoundError",
    "ResourceNotReadyError",
    "TransferBackendError",
    "classify_error",
    "iter_error_chain",
    "resolution_step",
    "root_cause",
]
