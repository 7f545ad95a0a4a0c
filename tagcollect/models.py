"""Read-only intermediate representation consumed by the tag collector."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class MissingBodyError(RuntimeError):
    """Raised when a method's active body is requested but was never realised."""


class TagKind(Enum):
    """Closed set of tag kinds the collector distinguishes."""

    SOURCE_FILE = "source_file"
    LINE_NUMBER = "line_number"
    COLOR_KEY = "key"
    OTHER = "text"


@dataclass(frozen=True)
class Tag:
    """Immutable metadata annotation attached to a host."""

    @property
    def kind(self) -> TagKind:
        return TagKind.OTHER


@dataclass(frozen=True)
class SourceFileTag(Tag):
    """Names the source file a class was compiled from."""

    source_file: str

    @property
    def kind(self) -> TagKind:
        return TagKind.SOURCE_FILE


@dataclass(frozen=True)
class LineNumberTag(Tag):
    """Line of the IR listing a statement was printed on."""

    line: int

    @property
    def kind(self) -> TagKind:
        return TagKind.LINE_NUMBER


@dataclass(frozen=True)
class KeyTag(Tag):
    """Colour legend entry produced by an analysis."""

    red: int
    green: int
    blue: int
    key: str
    analysis_type: str = ""

    @property
    def kind(self) -> TagKind:
        return TagKind.COLOR_KEY


@dataclass(frozen=True)
class TextTag(Tag):
    """Free-form analysis result."""

    text: str
    analysis_type: str = ""


@dataclass
class Host:
    """Any IR element that carries tags."""

    tags: List[Tag] = field(default_factory=list)


@dataclass
class ValueBox(Host):
    """Operand slot used or defined by a statement."""

    value: str = ""


@dataclass
class Unit(Host):
    """Single statement of a method body."""

    text: str = ""
    use_and_def_boxes: List[ValueBox] = field(default_factory=list)


@dataclass
class Body:
    """Realised statement list of a method."""

    units: List[Unit] = field(default_factory=list)


@dataclass
class Method(Host):
    name: str = ""
    body: Optional[Body] = None

    @property
    def has_active_body(self) -> bool:
        return self.body is not None

    @property
    def active_body(self) -> Body:
        if self.body is None:
            raise MissingBodyError(f"Method '{self.name}' has no active body")
        return self.body


@dataclass
class Field(Host):
    name: str = ""


@dataclass
class ProgramClass(Host):
    """Class with its fields and methods in declaration order."""

    name: str = ""
    fields: List[Field] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)


@dataclass
class Program:
    """Ordered collection of classes loaded from a program dump."""

    classes: List[ProgramClass] = field(default_factory=list)

    def find_class(self, name: str) -> Optional[ProgramClass]:
        for program_class in self.classes:
            if program_class.name == name:
                return program_class
        return None
