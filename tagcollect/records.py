"""Printable records produced by the tag collector."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Protocol, Tuple

from jinja2 import Environment, FileSystemLoader, Template

from .models import KeyTag, LineNumberTag, SourceFileTag, Tag, TagKind, TextTag

_TEMPLATES_DIR = Path(__file__).with_name("templates")


class TextSink(Protocol):
    """Anything records can be printed to (files, ``io.StringIO``, ``sys.stdout``)."""

    def write(self, text: str) -> object:
        ...


@dataclass(frozen=True)
class TextEntry:
    """Rendered form of a non-line tag."""

    info: str
    analysis_type: str


@lru_cache(maxsize=None)
def _environment() -> Environment:
    loader = FileSystemLoader(str(_TEMPLATES_DIR))
    return Environment(loader=loader, autoescape=True, trim_blocks=True, lstrip_blocks=True)


def _template(name: str) -> Template:
    return _environment().get_template(name)


def describe_tag(tag: Tag) -> TextEntry:
    """Return the text shown for a tag that is not a line marker."""
    kind = tag.kind
    if kind is TagKind.SOURCE_FILE:
        if not isinstance(tag, SourceFileTag):
            raise TypeError(f"{type(tag).__name__} reports a source-file kind without a source file")
        return TextEntry(info=f"SourceFile: {tag.source_file}", analysis_type="")
    if kind is TagKind.COLOR_KEY:
        if not isinstance(tag, KeyTag):
            raise TypeError(f"{type(tag).__name__} reports a colour-key kind without key fields")
        return TextEntry(info=f"Key: {tag.key}", analysis_type=tag.analysis_type)
    if kind is TagKind.LINE_NUMBER:
        raise ValueError("Line number tags are rendered as a position, not text")
    if isinstance(tag, TextTag):
        return TextEntry(info=tag.text, analysis_type=tag.analysis_type)
    return TextEntry(info=str(tag), analysis_type="")


class Attribute:
    """Ordered tags collected for a single host."""

    def __init__(self) -> None:
        self._tags: List[Tag] = []

    def add_tag(self, tag: Tag) -> None:
        self._tags.append(tag)

    @property
    def tags(self) -> Tuple[Tag, ...]:
        return tuple(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"Attribute(tags={self._tags!r})"

    def line_span(self) -> Tuple[int, int]:
        """Return the first and last line covered by this attribute's line markers."""
        lines = [tag.line for tag in self._tags if isinstance(tag, LineNumberTag)]
        if not lines:
            return 0, 0
        return min(lines), max(lines)

    def text_entries(self) -> List[TextEntry]:
        return [describe_tag(tag) for tag in self._tags if tag.kind is not TagKind.LINE_NUMBER]

    def print(self, sink: TextSink) -> None:
        """Write this attribute as an ``<attribute>`` element.

        Attributes holding nothing but line markers have nothing to display
        and produce no output.
        """
        texts = self.text_entries()
        if not texts:
            return
        start_line, end_line = self.line_span()
        rendered = _template("attribute.xml.j2").render(
            start_line=start_line,
            end_line=end_line,
            texts=texts,
        )
        sink.write(rendered + "\n")


class Key:
    """Colour legend entry decoded from a class-level key tag."""

    def __init__(self, red: int, green: int, blue: int, key: str) -> None:
        self.red = red
        self.green = green
        self.blue = blue
        self.key = key
        self.analysis_type = ""

    def set_analysis_type(self, analysis_type: str) -> None:
        self.analysis_type = analysis_type

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return (self.red, self.green, self.blue, self.key, self.analysis_type) == (
            other.red,
            other.green,
            other.blue,
            other.key,
            other.analysis_type,
        )

    def __repr__(self) -> str:
        return (
            f"Key(red={self.red}, green={self.green}, blue={self.blue}, "
            f"key={self.key!r}, analysis_type={self.analysis_type!r})"
        )

    def print(self, sink: TextSink) -> None:
        sink.write(_template("key.xml.j2").render(key=self) + "\n")


__all__ = ["Attribute", "Key", "TextEntry", "TextSink", "describe_tag"]
