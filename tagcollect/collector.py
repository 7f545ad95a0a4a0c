"""Collects host tags into ordered attribute and key records."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from .logging import get_logger
from .models import Body, Field, Host, KeyTag, Method, ProgramClass, Tag, TagKind
from .records import Attribute, Key, TextSink

_LOGGER = get_logger("collector")


def is_not_source_file(tag: Tag) -> bool:
    """Class-scope filter: source-file markers are implied by the output file name."""
    return tag.kind is not TagKind.SOURCE_FILE


class TagCollector:
    """Accumulates attributes and keys across one or more collection calls.

    Records are appended in program order: the class, its fields in
    declaration order, its methods in declaration order and, for each method
    body, every statement followed by its tagged use/def boxes.
    """

    def __init__(self) -> None:
        self._attributes: List[Attribute] = []
        self._keys: List[Key] = []

    @property
    def attributes(self) -> Sequence[Attribute]:
        return tuple(self._attributes)

    @property
    def keys(self) -> Sequence[Key]:
        return tuple(self._keys)

    def is_empty(self) -> bool:
        return not self._attributes and not self._keys

    def collect_tags(self, program_class: ProgramClass, include_bodies: bool = True) -> None:
        """Collect tags from the class, its fields, its methods and optionally their bodies."""
        before = len(self._attributes)
        self.collect_class_tags(program_class)

        for class_field in program_class.fields:
            self.collect_field_tags(class_field)

        for method in program_class.methods:
            self.collect_method_tags(method)
            if not include_bodies or not method.has_active_body:
                continue
            self.collect_body_tags(method.active_body)

        _LOGGER.debug(
            "Collected %d attribute(s) for class %s",
            len(self._attributes) - before,
            program_class.name,
        )

    def collect_key_tags(self, program_class: ProgramClass) -> None:
        for tag in program_class.tags:
            if tag.kind is not TagKind.COLOR_KEY:
                continue
            if not isinstance(tag, KeyTag):
                raise TypeError(f"{type(tag).__name__} reports a colour-key kind without key fields")
            key = Key(tag.red, tag.green, tag.blue, tag.key)
            key.set_analysis_type(tag.analysis_type)
            self._keys.append(key)

    def collect_class_tags(self, program_class: ProgramClass) -> None:
        self._collect_host_tags(program_class, is_not_source_file)

    def collect_field_tags(self, class_field: Field) -> None:
        self._collect_host_tags(class_field)

    def collect_method_tags(self, method: Method) -> None:
        # Abstract and native methods contribute nothing, not even their own tags.
        if method.has_active_body:
            self._collect_host_tags(method)

    def collect_body_tags(self, body: Body) -> None:
        """Collect statement tags and the tags of each statement's use/def boxes.

        Every statement yields an attribute, even an empty one. A box yields an
        attribute only when it carries tags; the statement's last line marker
        is appended after each of the box's tags.
        """
        for unit in body.units:
            unit_attribute = Attribute()
            line_tag: Optional[Tag] = None
            for tag in unit.tags:
                unit_attribute.add_tag(tag)
                if tag.kind is TagKind.LINE_NUMBER:
                    line_tag = tag
            self._attributes.append(unit_attribute)

            for box in unit.use_and_def_boxes:
                if not box.tags:
                    continue
                box_attribute = Attribute()
                for tag in box.tags:
                    box_attribute.add_tag(tag)
                    if line_tag is not None:
                        box_attribute.add_tag(line_tag)
                self._attributes.append(box_attribute)

    def print_tags(self, sink: TextSink) -> None:
        for attribute in self._attributes:
            attribute.print(sink)

    print_attributes = print_tags

    def print_keys(self, sink: TextSink) -> None:
        for key in self._keys:
            key.print(sink)

    def _collect_host_tags(
        self, host: Host, include: Callable[[Tag], bool] | None = None
    ) -> None:
        tags = [tag for tag in host.tags if include is None or include(tag)]
        if not tags:
            return
        attribute = Attribute()
        for tag in tags:
            attribute.add_tag(tag)
        self._attributes.append(attribute)


__all__ = ["TagCollector", "is_not_source_file"]
