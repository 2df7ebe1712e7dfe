"""Custom exceptions for the kNODEledge backend.

Provides a structured exception hierarchy with error codes and
machine-readable error information. Each layer raises its own kinds:

- store adapter: StorageError, DocumentNotFoundError
- repositories: NotFoundError, InvalidArgumentError, ReadFailureError,
  WriteFailureError
- services: RepositoryFailureError, DomainFailureError (NotFoundError and
  InvalidArgumentError pass through unchanged)
- use cases: UseCaseError
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Lookup errors (1xxx)
    NOT_FOUND = 1001

    # Request errors (2xxx)
    INVALID_ARGUMENT = 2001
    DOMAIN_VALIDATION_FAILED = 2002

    # Repository errors (4xxx)
    READ_FAILURE = 4001
    WRITE_FAILURE = 4002

    # Store adapter errors (45xx)
    STORAGE_FAILED = 4501
    DOCUMENT_NOT_FOUND = 4502

    # Service errors (5xxx)
    REPOSITORY_FAILURE = 5001
    DOMAIN_FAILURE = 5002

    # Use case errors (6xxx)
    INTERNAL_ERROR = 6001


class KnodeledgeError(Exception):
    """Base exception for all kNODEledge errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class StorageError(KnodeledgeError):
    """Raised by the document store when the underlying database fails."""

    default_code = ErrorCode.STORAGE_FAILED

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if path:
            details["path"] = path
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class DocumentNotFoundError(StorageError):
    """Raised by the document store when a document does not exist."""

    default_code = ErrorCode.DOCUMENT_NOT_FOUND

    def __init__(self, path: str, document_id: str):
        super().__init__(
            f"Document '{path}/{document_id}' not found",
            operation="get",
            path=path,
        )
        self.document_id = document_id


class NotFoundError(KnodeledgeError):
    """Raised when a record is absent or not visible to the caller.

    A record owned by another user is reported the same way as a missing one.
    """

    default_code = ErrorCode.NOT_FOUND


class InvalidArgumentError(KnodeledgeError):
    """Raised when a well-formed request violates a cross-field rule."""

    default_code = ErrorCode.INVALID_ARGUMENT


class ReadFailureError(KnodeledgeError):
    """Raised when a read fails or stored data breaks an integrity rule."""

    default_code = ErrorCode.READ_FAILURE


class WriteFailureError(KnodeledgeError):
    """Raised when the store rejects a write."""

    default_code = ErrorCode.WRITE_FAILURE


class RepositoryFailureError(KnodeledgeError):
    """Raised by services when a repository read or write failed."""

    default_code = ErrorCode.REPOSITORY_FAILURE


class DomainFailureError(KnodeledgeError):
    """Raised by services when stored data cannot be turned into an entity."""

    default_code = ErrorCode.DOMAIN_FAILURE


class UseCaseErrorKind(str, Enum):
    """Error kinds surfaced to the HTTP layer."""

    DOMAIN_VALIDATION = "domain validation error"
    INVALID_ARGUMENT = "invalid argument"
    NOT_FOUND = "not found"
    INTERNAL = "internal error"


_KIND_TO_CODE = {
    UseCaseErrorKind.DOMAIN_VALIDATION: ErrorCode.DOMAIN_VALIDATION_FAILED,
    UseCaseErrorKind.INVALID_ARGUMENT: ErrorCode.INVALID_ARGUMENT,
    UseCaseErrorKind.NOT_FOUND: ErrorCode.NOT_FOUND,
    UseCaseErrorKind.INTERNAL: ErrorCode.INTERNAL_ERROR,
}


class UseCaseError(KnodeledgeError):
    """Raised by use cases.

    Carries either a plain message or a full error response (a dict mirroring
    the request shape with a message per offending field), never both.

    Attributes:
        kind: The error kind, mapped to an HTTP status by the caller
        response: Error response for validation failures, else None
    """

    def __init__(
        self,
        kind: UseCaseErrorKind,
        message: str = "",
        response: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message or kind.value, code=_KIND_TO_CODE[kind])
        self.kind = kind
        self.response = response

    @classmethod
    def with_message(cls, kind: UseCaseErrorKind, message: str) -> "UseCaseError":
        return cls(kind, message=message)

    @classmethod
    def with_response(
        cls, kind: UseCaseErrorKind, response: Dict[str, Any]
    ) -> "UseCaseError":
        return cls(kind, response=response)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind.value
        if self.response is not None:
            data["response"] = self.response
        return data
