"""Build the in-memory IR from YAML or JSON program dumps."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .models import (
    Body,
    Field,
    KeyTag,
    LineNumberTag,
    Method,
    Program,
    ProgramClass,
    SourceFileTag,
    Tag,
    TagKind,
    TextTag,
    Unit,
    ValueBox,
)


class LoaderError(RuntimeError):
    """Raised when a program dump is unreadable or malformed."""


def load_program(path: Path) -> Program:
    """Read a program dump from ``path`` (``.json``, ``.yml`` or ``.yaml``)."""
    if not path.exists():
        raise FileNotFoundError(f"Program dump not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoaderError(f"Failed to read {path.name}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise LoaderError(f"Failed to parse {path.name}: {exc}") from exc
    return program_from_dict(data if data is not None else {})


def program_from_dict(data: Any) -> Program:
    if not isinstance(data, Mapping):
        raise LoaderError("Program dump must contain a mapping at the root")
    classes = [
        _parse_class(item, f"classes[{index}]")
        for index, item in enumerate(_as_list(data.get("classes"), "classes"))
    ]
    return Program(classes=classes)


def _parse_class(data: Any, where: str) -> ProgramClass:
    mapping = _as_mapping(data, where)
    return ProgramClass(
        name=_require_str(mapping, "name", where),
        tags=_parse_tags(mapping.get("tags"), where),
        fields=[
            _parse_field(item, f"{where}.fields[{index}]")
            for index, item in enumerate(_as_list(mapping.get("fields"), f"{where}.fields"))
        ],
        methods=[
            _parse_method(item, f"{where}.methods[{index}]")
            for index, item in enumerate(_as_list(mapping.get("methods"), f"{where}.methods"))
        ],
    )


def _parse_field(data: Any, where: str) -> Field:
    mapping = _as_mapping(data, where)
    return Field(name=_require_str(mapping, "name", where), tags=_parse_tags(mapping.get("tags"), where))


def _parse_method(data: Any, where: str) -> Method:
    mapping = _as_mapping(data, where)
    body = None
    if mapping.get("body") is not None:
        body_data = _as_mapping(mapping["body"], f"{where}.body")
        body = Body(
            units=[
                _parse_unit(item, f"{where}.body.units[{index}]")
                for index, item in enumerate(_as_list(body_data.get("units"), f"{where}.body.units"))
            ]
        )
    return Method(
        name=_require_str(mapping, "name", where),
        tags=_parse_tags(mapping.get("tags"), where),
        body=body,
    )


def _parse_unit(data: Any, where: str) -> Unit:
    mapping = _as_mapping(data, where)
    boxes: List[ValueBox] = []
    for index, item in enumerate(_as_list(mapping.get("boxes"), f"{where}.boxes")):
        box_where = f"{where}.boxes[{index}]"
        box_data = _as_mapping(item, box_where)
        boxes.append(
            ValueBox(
                value=str(box_data.get("value", "")),
                tags=_parse_tags(box_data.get("tags"), box_where),
            )
        )
    return Unit(
        text=str(mapping.get("text", "")),
        tags=_parse_tags(mapping.get("tags"), where),
        use_and_def_boxes=boxes,
    )


def _parse_tags(data: Any, where: str) -> List[Tag]:
    return [
        _parse_tag(item, f"{where}.tags[{index}]")
        for index, item in enumerate(_as_list(data, f"{where}.tags"))
    ]


def _parse_tag(data: Any, where: str) -> Tag:
    mapping = _as_mapping(data, where)
    raw_kind = mapping.get("kind", TagKind.OTHER.value)
    try:
        kind = TagKind(raw_kind)
    except ValueError as exc:
        known = ", ".join(member.value for member in TagKind)
        raise LoaderError(f"{where}: unknown tag kind '{raw_kind}' (expected one of: {known})") from exc

    analysis_type = str(mapping.get("analysis_type", ""))
    if kind is TagKind.SOURCE_FILE:
        return SourceFileTag(source_file=_require_str(mapping, "source_file", where))
    if kind is TagKind.LINE_NUMBER:
        return LineNumberTag(line=_require_int(mapping, "line", where))
    if kind is TagKind.COLOR_KEY:
        return KeyTag(
            red=_require_int(mapping, "red", where),
            green=_require_int(mapping, "green", where),
            blue=_require_int(mapping, "blue", where),
            key=_require_str(mapping, "key", where),
            analysis_type=analysis_type,
        )
    return TextTag(text=_require_str(mapping, "text", where), analysis_type=analysis_type)


def _as_mapping(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, Mapping):
        raise LoaderError(f"{where}: expected a mapping")
    return dict(value)


def _as_list(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise LoaderError(f"{where}: expected a list")
    return value


def _require_str(mapping: Mapping[str, Any], key: str, where: str) -> str:
    value = mapping.get(key)
    if not isinstance(value, str) or not value:
        raise LoaderError(f"{where}: '{key}' must be a non-empty string")
    return value


def _require_int(mapping: Mapping[str, Any], key: str, where: str) -> int:
    value = mapping.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise LoaderError(f"{where}: '{key}' must be an integer")
    return value


__all__ = ["LoaderError", "load_program", "program_from_dict"]
