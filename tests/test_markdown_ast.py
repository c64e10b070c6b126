"""Tests for the Markdown syntax tree builder."""

from __future__ import annotations

import pytest

from slidemark.exceptions import ParseSyntaxError
from slidemark.markdown_ast import MarkdownAstBuilder


class _TokenizerFailure(Exception):
    def __init__(self, message: str, lineno: int) -> None:
        super().__init__(message)
        self.lineno = lineno


def test_tokenizer_failure_reports_line(monkeypatch):
    builder = MarkdownAstBuilder()

    def fail(text, env=None):
        raise _TokenizerFailure("unbalanced fence", lineno=3)

    monkeypatch.setattr(builder.markdown_processor, "parse", fail)

    with pytest.raises(ParseSyntaxError) as excinfo:
        builder.build("# A\n\nbody\n")

    assert excinfo.value.line == 3
    assert "line 3" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, _TokenizerFailure)


def test_tokenizer_failure_without_position(monkeypatch):
    builder = MarkdownAstBuilder()

    def fail(text, env=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(builder.markdown_processor, "parse", fail)

    with pytest.raises(ParseSyntaxError) as excinfo:
        builder.build("body")

    assert excinfo.value.line is None
    assert str(excinfo.value).startswith("[document] parse_syntax_error:")
