"""Error translation shared by the services."""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from pydantic import ValidationError

from knodeledge.exceptions import (
    DomainFailureError,
    InvalidArgumentError,
    NotFoundError,
    ReadFailureError,
    RepositoryFailureError,
    WriteFailureError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def repository_errors(action: str) -> Iterator[None]:
    """Re-raise repository failures as RepositoryFailureError.

    NotFoundError and InvalidArgumentError are meaningful to callers and
    pass through unchanged.
    """
    try:
        yield
    except (NotFoundError, InvalidArgumentError):
        raise
    except (ReadFailureError, WriteFailureError) as e:
        logger.error(f"Repository failed to {action}: {e.message}")
        raise RepositoryFailureError(f"failed to {action}: {e.message}") from e


def to_entity(factory: Callable[..., T], **fields: Any) -> T:
    """Build an entity from stored values.

    Stored data that breaks a domain rule raises DomainFailureError.
    """
    try:
        return factory(**fields)
    except ValidationError as e:
        logger.error(f"Stored data does not convert to {factory.__name__}: {e}")
        raise DomainFailureError(
            f"failed to convert entry to {factory.__name__}: {e.errors()[0]['msg']}"
        ) from e
