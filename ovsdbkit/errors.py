"""Errors reported by an OVSDB server for individual operations."""

from __future__ import annotations

from collections.abc import Sequence

from .operation import Operation, OperationResult


class OperationError(Exception):
    """An error reported for one operation; also used for unknown error names."""

    NAME = ""

    def __init__(
        self,
        details: str = "",
        operation: Operation | None = None,
        name: str | None = None,
    ) -> None:
        self.name = name if name is not None else self.NAME
        self.details = details
        self.operation = operation
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.details:
            return f"{self.name}: {self.details}"
        return self.name


class ReferentialIntegrityViolation(OperationError):
    NAME = "referential integrity violation"


class ConstraintViolation(OperationError):
    NAME = "constraint violation"


class ResourcesExhausted(OperationError):
    NAME = "resources exhausted"


class IOError(OperationError):  # noqa: A001 - mirrors the protocol's error name
    NAME = "I/O error"


class DuplicateUUIDName(OperationError):
    NAME = "duplicate uuid name"


class DomainError(OperationError):
    NAME = "domain error"


class RangeError(OperationError):
    NAME = "range error"


class TimedOut(OperationError):
    NAME = "timed out"


class NotSupported(OperationError):
    NAME = "not supported"


class Aborted(OperationError):
    NAME = "aborted"


class NotOwner(OperationError):
    NAME = "not owner"


_BY_NAME = {
    cls.NAME: cls
    for cls in (
        ReferentialIntegrityViolation,
        ConstraintViolation,
        ResourcesExhausted,
        IOError,
        DuplicateUUIDName,
        DomainError,
        RangeError,
        TimedOut,
        NotSupported,
        Aborted,
        NotOwner,
    )
}


class TransactionError(Exception):
    """A transaction failed; ``errors`` lists per-operation failures."""

    def __init__(
        self,
        message: str,
        errors: list[OperationError] | None = None,
        commit_error: OperationError | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
        self.commit_error = commit_error


def error_from_result(
    operation: Operation | None, result: OperationResult
) -> OperationError | None:
    """Return the error described by ``result``, or None if it succeeded."""
    if not result.error:
        return None
    cls = _BY_NAME.get(result.error)
    if cls is None:
        return OperationError(result.details, operation, name=result.error)
    return cls(result.details, operation)


def check_operation_results(
    results: Sequence[OperationResult], operations: Sequence[Operation]
) -> None:
    """Raise TransactionError if the transaction or any operation failed.

    An extra result beyond the operations carries a commit error.
    """
    if len(results) < len(operations):
        raise TransactionError(
            f"ovsdb transaction error. {len(operations)} operations submitted "
            f"but only {len(results)} results received"
        )
    errors: list[OperationError] = []
    for index, result in enumerate(results):
        if index >= len(operations):
            commit_error = error_from_result(None, result)
            if commit_error is not None:
                raise TransactionError(str(commit_error), errors, commit_error)
            break
        err = error_from_result(operations[index], result)
        if err is not None:
            errors.append(err)
    if errors:
        raise TransactionError(f"{len(errors)} ovsdb operations failed", errors)