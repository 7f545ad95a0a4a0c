"""Writes one XML attributes document per class."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .collector import TagCollector
from .config import CollectConfig, OutputConfig
from .loader import LoaderError
from .logging import class_context, get_logger
from .models import Program, ProgramClass
from .records import TextSink

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
_NAME_SEPARATORS = re.compile(r"[\\/]")


@dataclass
class ExportResult:
    """Outcome of exporting a single class."""

    class_name: str
    path: Optional[Path]
    attributes: int
    keys: int

    @property
    def written(self) -> bool:
        return self.path is not None


class AttributeExporter:
    """Runs a fresh collector per class and prints its records as XML."""

    def __init__(
        self,
        collect: CollectConfig | None = None,
        output: OutputConfig | None = None,
    ) -> None:
        self.collect = collect or CollectConfig()
        self.output = output or OutputConfig()
        self._logger = get_logger("exporter")

    def collect_class(self, program_class: ProgramClass) -> TagCollector:
        collector = TagCollector()
        with class_context(program_class.name):
            collector.collect_tags(program_class, self.collect.include_bodies)
            if self.collect.keys:
                collector.collect_key_tags(program_class)
        return collector

    def render_class(self, program_class: ProgramClass) -> str:
        """Return the attributes document for ``program_class``."""
        buffer = io.StringIO()
        self.write_document(self.collect_class(program_class), buffer)
        return buffer.getvalue()

    def export(self, program: Program, output_dir: Path | None = None) -> List[ExportResult]:
        target_dir = output_dir or self.output.directory
        results: List[ExportResult] = []
        for program_class in program.classes:
            results.append(self._export_class(program_class, target_dir))
        written = sum(1 for result in results if result.written)
        self._logger.info("Wrote %d attribute document(s) to %s", written, target_dir)
        return results

    @staticmethod
    def write_document(collector: TagCollector, sink: TextSink) -> None:
        sink.write(_XML_DECLARATION + "\n")
        sink.write("<attributes>\n")
        collector.print_tags(sink)
        collector.print_keys(sink)
        sink.write("</attributes>\n")

    def _export_class(self, program_class: ProgramClass, target_dir: Path) -> ExportResult:
        collector = self.collect_class(program_class)
        result = ExportResult(
            class_name=program_class.name,
            path=None,
            attributes=len(collector.attributes),
            keys=len(collector.keys),
        )
        if collector.is_empty() and self.output.skip_empty:
            self._logger.debug("Skipping %s: no tags collected", program_class.name)
            return result

        path = document_path(target_dir, program_class.name)
        target_dir.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            self.write_document(collector, handle)
        self._logger.debug(
            "Wrote %s (%d attribute(s), %d key(s))", path, result.attributes, result.keys
        )
        result.path = path
        return result


def document_path(target_dir: Path, class_name: str) -> Path:
    """Return the document path for a class, flattening package separators to dots.

    ``java/lang/String`` and ``java.lang.String`` both map to
    ``<target_dir>/java.lang.String.xml``. Names with empty, ``.`` or ``..``
    segments are rejected.
    """
    segments = _NAME_SEPARATORS.split(class_name)
    if any(segment in {"", ".", ".."} for segment in segments):
        raise LoaderError(f"Class name '{class_name}' cannot be used as a document name")
    path = target_dir / (".".join(segments) + ".xml")
    if path.resolve().parent != target_dir.resolve():
        raise LoaderError(f"Class name '{class_name}' resolves outside {target_dir}")
    return path


__all__ = ["AttributeExporter", "ExportResult", "document_path"]
