"""Tests for tagcollect.exporter."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tagcollect.config import CollectConfig, OutputConfig
from tagcollect.exporter import AttributeExporter, document_path
from tagcollect.loader import LoaderError, load_program
from tagcollect.logging import configure_logging
from tagcollect.models import Program
from tests._fixtures.program_builder import klass, text

EXPECTED_FOO = """<?xml version="1.0" encoding="UTF-8"?>
<attributes>
<attribute>
<jmpPos sline="0" eline="0"/>
<textAttribute info="hot class" aType="profiler"/>
<textAttribute info="Key: hot" aType="profiler"/>
</attribute>
<attribute>
<jmpPos sline="5" eline="5"/>
<textAttribute info="defined here" aType=""/>
</attribute>
<key red="255" green="0" blue="0" key="hot" aType="profiler"/>
</attributes>
"""


def test_render_class_produces_full_document(program_path: Path) -> None:
    program = load_program(program_path)

    document = AttributeExporter().render_class(program.classes[0])

    # The statement attribute holds only a line marker and prints nothing.
    assert document == EXPECTED_FOO


def test_export_writes_one_document_per_tagged_class(program_path: Path, tmp_path: Path) -> None:
    program = load_program(program_path)
    out_dir = tmp_path / "out"

    results = AttributeExporter().export(program, out_dir)

    foo, empty = results
    assert foo.class_name == "Foo"
    assert foo.path == out_dir / "Foo.xml"
    assert (foo.attributes, foo.keys) == (3, 1)
    assert foo.path.read_text(encoding="utf-8") == EXPECTED_FOO
    assert empty.written is False
    assert not (out_dir / "Empty.xml").exists()


def test_export_can_keep_empty_documents(program_path: Path, tmp_path: Path) -> None:
    program = load_program(program_path)
    exporter = AttributeExporter(output=OutputConfig(directory=tmp_path / "xml", skip_empty=False))

    results = exporter.export(program)

    assert all(result.written for result in results)
    assert (tmp_path / "xml" / "Empty.xml").read_text(encoding="utf-8") == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<attributes>\n</attributes>\n'
    )


def test_collect_options_are_honoured(program_path: Path) -> None:
    program = load_program(program_path)
    exporter = AttributeExporter(collect=CollectConfig(include_bodies=False, keys=False))

    collector = exporter.collect_class(program.classes[0])

    assert len(collector.attributes) == 1
    assert collector.keys == ()


def test_export_logs_summary(program_path: Path, tmp_path: Path, caplog, monkeypatch) -> None:
    program = load_program(program_path)
    monkeypatch.setattr(logging.getLogger("tagcollect"), "propagate", True)

    with caplog.at_level(logging.INFO, logger="tagcollect"):
        AttributeExporter().export(program, tmp_path / "out")

    assert "Wrote 1 attribute document(s)" in caplog.text


def test_export_flattens_internal_class_names(tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    program = Program(classes=[klass("java/lang/Foo", tags=[text("a")])])

    (result,) = AttributeExporter().export(program, out_dir)

    assert result.path == out_dir / "java.lang.Foo.xml"
    assert result.path.exists()
    assert sorted(p.name for p in out_dir.iterdir()) == ["java.lang.Foo.xml"]


def test_export_rejects_names_escaping_output_dir(tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    program = Program(classes=[klass("../escaped", tags=[text("a")])])

    with pytest.raises(LoaderError, match="cannot be used as a document name"):
        AttributeExporter().export(program, out_dir)

    assert not (tmp_path / "escaped.xml").exists()
    assert not out_dir.exists()


@pytest.mark.parametrize("name", ["..", "a//b", "pkg\\..\\Foo", "./Foo", "Foo/"])
def test_document_path_rejects_unsafe_segments(tmp_path: Path, name: str) -> None:
    with pytest.raises(LoaderError):
        document_path(tmp_path, name)


def test_document_path_maps_backslashes_to_dots(tmp_path: Path) -> None:
    assert document_path(tmp_path, "com\\acme\\Widget") == tmp_path / "com.acme.Widget.xml"
    assert document_path(tmp_path, "Widget$Inner") == tmp_path / "Widget$Inner.xml"


def test_export_log_lines_carry_class_context(program_path: Path, tmp_path: Path) -> None:
    log_file = tmp_path / "export.log"
    logger = configure_logging(verbose=True, log_file=log_file)
    try:
        AttributeExporter().export(load_program(program_path), tmp_path / "out")
        for handler in logger.handlers:
            handler.flush()
        log_text = log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    assert "tagcollect.collector [Foo] Collected 3 attribute(s) for class Foo" in log_text
