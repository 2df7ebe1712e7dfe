"""Validation of untrusted nested request data.

Both validators report every problem at once: the returned error model has
exactly the shape of the input so a client can zip errors to inputs by index.
They never raise for bad input.
"""
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from knodeledge.models import values
from knodeledge.models.schema import (
    DUPLICATED_CHILD_NAME_TEMPLATE,
    GraphChild,
    GraphChildError,
    GraphChildrenError,
    SectionWithoutAutofield,
    SectionWithoutAutofieldError,
    SectionWithoutAutofieldListError,
    find_duplicated_name,
)

MAX_SECTIONS = 20


def _field(raw: Any, key: str, default: Any = "") -> Any:
    if isinstance(raw, Mapping):
        return raw.get(key, default)
    return default


def _text(raw: Any, key: str) -> str:
    value = _field(raw, key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _children_of(raw: Any) -> Sequence[Any]:
    children = _field(raw, "children", [])
    if isinstance(children, (list, tuple)):
        return children
    return []


FieldCheck = Tuple[str, str]


class _Level:
    """A children list being walked, plus the results of its finished items."""

    __slots__ = ("raw_children", "entities", "items", "ok", "pending")

    def __init__(self, raw_children: Sequence[Any]):
        self.raw_children = raw_children
        self.entities: List[Optional[GraphChild]] = []
        self.items: List[GraphChildError] = []
        self.ok = True
        # Checked name, relation and description of the child being descended into.
        self.pending: Optional[Tuple[FieldCheck, FieldCheck, FieldCheck]] = None

    def next_raw_child(self) -> Tuple[bool, Any]:
        index = len(self.items)
        if index < len(self.raw_children):
            return True, self.raw_children[index]
        return False, None

    def add(
        self,
        children: List[Optional[GraphChild]],
        children_errors: GraphChildrenError,
        children_ok: bool,
    ) -> None:
        (name, name_msg), (relation, relation_msg), (description, description_msg) = (
            self.pending
        )
        self.pending = None

        self.items.append(
            GraphChildError.model_construct(
                name=name_msg,
                relation=relation_msg,
                description=description_msg,
                children=children_errors,
            )
        )

        if name_msg or relation_msg or description_msg or not children_ok:
            self.ok = False
            self.entities.append(None)
            return

        # Built from already validated parts; skip running the rules again.
        self.entities.append(
            GraphChild.model_construct(
                name=name,
                relation=relation,
                description=description,
                children=children,
            )
        )

    def finish(self) -> Tuple[List[Optional[GraphChild]], GraphChildrenError, bool]:
        message = ""
        duplicated = find_duplicated_name(
            entity.name for entity in self.entities if entity is not None
        )
        if duplicated is not None:
            message = DUPLICATED_CHILD_NAME_TEMPLATE.format(duplicated)
            self.ok = False
        errors = GraphChildrenError.model_construct(message=message, items=self.items)
        return self.entities, errors, self.ok


def _check_fields(raw: Any) -> Tuple[FieldCheck, FieldCheck, FieldCheck]:
    return (
        values.check(values.validate_graph_name, _text(raw, "name")),
        values.check(values.validate_graph_relation, _text(raw, "relation")),
        values.check(values.validate_graph_description, _text(raw, "description")),
    )


def validate_graph_children(
    raw_children: Sequence[Any],
) -> Tuple[List[Optional[GraphChild]], GraphChildrenError, bool]:
    """Validate a children tree of arbitrary depth.

    The tree is walked with an explicit stack of levels, so depth is bounded
    by memory, not by the interpreter's recursion limit. Each level is
    finished (sibling uniqueness checked, error model built) before it is
    attached to its parent.

    Args:
        raw_children: List of dicts with name, relation, description and
            children (recursively). Missing keys count as empty.

    Returns:
        (entities, errors, ok). entities has one slot per input child; a slot
        is None when that child or any of its descendants is invalid. errors
        mirrors the input at every depth. When ok is True every slot is set.
    """
    stack = [_Level(raw_children)]
    while True:
        level = stack[-1]
        found, raw = level.next_raw_child()
        if found:
            level.pending = _check_fields(raw)
            stack.append(_Level(_children_of(raw)))
            continue

        result = level.finish()
        stack.pop()
        if not stack:
            return result
        stack[-1].add(*result)


def graph_children_depth(raw_children: Sequence[Any]) -> int:
    """Depth of a raw children tree (0 for an empty list).

    Walks iteratively so hostile inputs cannot exhaust the call stack.
    """
    depth = 0
    stack = [(child, 1) for child in raw_children]
    while stack:
        raw, level = stack.pop()
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in _children_of(raw))
    return depth


def validate_section_list(
    raw_sections: Sequence[Any],
) -> Tuple[List[Optional[SectionWithoutAutofield]], SectionWithoutAutofieldListError, bool]:
    """Validate the flat section list of a sectionalize request.

    The list must hold 1 to 20 items. When the count is out of range only the
    list message is reported and every item gets an empty placeholder.

    Returns:
        (entities, errors, ok), entities and errors.items parallel to the input.
    """
    count = len(raw_sections)
    if count == 0:
        return [], SectionWithoutAutofieldListError(
            message="sections are required, but got []"
        ), False
    if count > MAX_SECTIONS:
        return (
            [None] * count,
            SectionWithoutAutofieldListError(
                message=(
                    f"sections length must be less than or equal to "
                    f"{MAX_SECTIONS}, but got {count}"
                ),
                items=[SectionWithoutAutofieldError() for _ in range(count)],
            ),
            False,
        )

    entities: List[Optional[SectionWithoutAutofield]] = []
    items: List[SectionWithoutAutofieldError] = []
    ok = True

    for raw in raw_sections:
        name, name_msg = values.check(values.validate_section_name, _text(raw, "name"))
        content, content_msg = values.check(
            values.validate_section_content, _text(raw, "content")
        )
        items.append(SectionWithoutAutofieldError(name=name_msg, content=content_msg))

        if name_msg or content_msg:
            ok = False
            entities.append(None)
            continue
        entities.append(SectionWithoutAutofield.model_construct(name=name, content=content))

    return entities, SectionWithoutAutofieldListError(items=items), ok
