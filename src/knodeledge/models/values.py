"""Single-field value validators.

Each validator takes a raw primitive and returns it unchanged when it
satisfies the field's rule, or raises ValueError whose message is part of the
public API (clients display it next to the offending field). Use check() to
get a (value, message) pair instead of an exception.
"""
from typing import Any, Callable, Optional, Tuple, TypeVar

T = TypeVar("T")

NAME_MAX_CHARACTERS = 100
RELATION_MAX_CHARACTERS = 100
DESCRIPTION_MAX_CHARACTERS = 400
CONTENT_MAX_BYTES = 40000


def _required_id(field: str, value: str, echo: bool = True) -> str:
    if not value:
        if not echo:
            raise ValueError(f"{field} is required")
        raise ValueError(f"{field} is required, but got '{value}'")
    return value


def _name(field: str, value: str) -> str:
    if not value:
        raise ValueError(f"{field} is required, but got '{value}'")
    if len(value) > NAME_MAX_CHARACTERS:
        raise ValueError(
            f"{field} cannot be longer than {NAME_MAX_CHARACTERS} characters, "
            f"but got '{value}'"
        )
    return value


def _max_characters(field: str, value: str, limit: int, echo: bool = True) -> str:
    if len(value) > limit:
        if not echo:
            raise ValueError(f"{field} cannot be longer than {limit} characters")
        raise ValueError(
            f"{field} cannot be longer than {limit} characters, but got '{value}'"
        )
    return value


def _max_bytes(field: str, value: str, limit: int = CONTENT_MAX_BYTES) -> str:
    size = len(value.encode("utf-8"))
    if size > limit:
        raise ValueError(
            f"{field} must be less than or equal to {limit} bytes, "
            f"but got {size} bytes"
        )
    return value


# Ids

def validate_user_id(value: str) -> str:
    return _required_id("user id", value, echo=False)


def validate_project_id(value: str) -> str:
    return _required_id("project id", value, echo=False)


def validate_chapter_id(value: str) -> str:
    return _required_id("chapter id", value)


def validate_graph_id(value: str) -> str:
    return _required_id("graph id", value)


def validate_paper_id(value: str) -> str:
    return _required_id("paper id", value)


def validate_section_id(value: str) -> str:
    return _required_id("section id", value)


# Names

def validate_project_name(value: str) -> str:
    return _name("project name", value)


def validate_chapter_name(value: str) -> str:
    return _name("chapter name", value)


def validate_graph_name(value: str) -> str:
    return _name("graph name", value)


def validate_section_name(value: str) -> str:
    return _name("section name", value)


# Everything else

def validate_chapter_number(value: int) -> int:
    """Chapter numbers are 1-based positions."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"chapter number must be greater than 0, but got '{value}'")
    return value


def validate_project_description(value: str) -> str:
    return _max_characters(
        "project description", value, DESCRIPTION_MAX_CHARACTERS, echo=False
    )


def validate_graph_relation(value: str) -> str:
    return _max_characters("graph relation", value, RELATION_MAX_CHARACTERS)


def validate_graph_description(value: str) -> str:
    return _max_characters("graph description", value, DESCRIPTION_MAX_CHARACTERS)


def validate_graph_paragraph(value: str) -> str:
    return _max_bytes("graph paragraph", value)


def validate_paper_content(value: str) -> str:
    return _max_bytes("paper content", value)


def validate_section_content(value: str) -> str:
    return _max_bytes("section content", value)


def check(validator: Callable[[Any], T], raw: Any) -> Tuple[Optional[T], str]:
    """Run a validator and return (value, "") or (None, message)."""
    try:
        return validator(raw), ""
    except ValueError as e:
        return None, str(e)
