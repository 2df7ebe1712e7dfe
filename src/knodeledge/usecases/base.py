"""Helpers shared by the use cases.

Use cases receive already-deserialized request dicts shaped like
{"user": {"id": ...}, "project": {"id": ...}, "chapter": {...}}. Missing
parts and keys read as empty values and fail validation with the usual
field messages.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping

from knodeledge.exceptions import (
    InvalidArgumentError,
    KnodeledgeError,
    NotFoundError,
    UseCaseError,
    UseCaseErrorKind,
)
from knodeledge.models.schema import Chapter, Graph

logger = logging.getLogger(__name__)


def request_part(request: Any, part: str) -> Mapping[str, Any]:
    value = request.get(part) if isinstance(request, Mapping) else None
    return value if isinstance(value, Mapping) else {}


def request_text(request: Any, part: str, key: str) -> str:
    value = request_part(request, part).get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def request_value(request: Any, part: str, key: str, default: Any = None) -> Any:
    value = request_part(request, part).get(key)
    return default if value is None else value


def request_list(request: Any, part: str, key: str) -> List[Any]:
    value = request_part(request, part).get(key)
    return list(value) if isinstance(value, (list, tuple)) else []


def has_error(*messages: str) -> bool:
    return any(messages)


def validation_error(response: Dict[str, Any]) -> UseCaseError:
    return UseCaseError.with_response(UseCaseErrorKind.DOMAIN_VALIDATION, response)


@contextmanager
def service_errors() -> Iterator[None]:
    """Translate service errors into UseCaseError kinds."""
    try:
        yield
    except NotFoundError as e:
        raise UseCaseError.with_message(UseCaseErrorKind.NOT_FOUND, e.message) from e
    except InvalidArgumentError as e:
        raise UseCaseError.with_message(UseCaseErrorKind.INVALID_ARGUMENT, e.message) from e
    except UseCaseError:
        raise
    except KnodeledgeError as e:
        logger.error(f"Internal error: {e}")
        raise UseCaseError.with_message(UseCaseErrorKind.INTERNAL, e.message) from e


def chapter_to_dict(chapter: Chapter) -> Dict[str, Any]:
    return {
        "id": chapter.id,
        "name": chapter.name,
        "number": chapter.number,
        "sections": [{"id": s.id, "name": s.name} for s in chapter.sections],
    }


def graph_to_dict(graph: Graph) -> Dict[str, Any]:
    return {
        "id": graph.id,
        "name": graph.name,
        "paragraph": graph.paragraph,
        "children": [child.model_dump() for child in graph.children],
    }
