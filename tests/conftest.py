"""Shared fixtures for plugin-parity tests."""

import textwrap
from pathlib import Path

import pytest

from plugin_parity.frontend import create_program


@pytest.fixture
def write_file(tmp_path):
    """Write a (dedented) source file under tmp_path and return its path."""
    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def load_program(write_file):
    """Write an entry file and build a program, returning (program, checker, entry unit)."""
    def _load(content: str, name: str = "index.d.ts"):
        entry = write_file(name, content)
        program = create_program([entry])
        return program, program.get_type_checker(), program.get_source_unit(entry)
    return _load
