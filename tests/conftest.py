from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

SAMPLE_PROGRAM = """
classes:
  - name: Foo
    tags:
      - {kind: source_file, source_file: Foo.java}
      - {kind: text, text: hot class, analysis_type: profiler}
      - {kind: key, red: 255, green: 0, blue: 0, key: hot, analysis_type: profiler}
    fields:
      - name: x
    methods:
      - name: bar
        body:
          units:
            - text: "x = 1"
              tags:
                - {kind: line_number, line: 5}
              boxes:
                - value: x
                  tags:
                    - {kind: text, text: defined here}
      - name: native_call
        tags:
          - {kind: text, text: skipped}
  - name: Empty
    tags:
      - {kind: source_file, source_file: Empty.java}
"""


@pytest.fixture
def program_path(tmp_path: Path) -> Path:
    """Write the sample program dump and return its path."""
    path = tmp_path / "program.yml"
    path.write_text(textwrap.dedent(SAMPLE_PROGRAM).lstrip("\n"), encoding="utf-8")
    return path
