"""Tests for speaker-notes extraction."""

from __future__ import annotations

import pytest

from slidemark.markdown_ast import build_ast
from slidemark.notes import NotesExtractor, extract_notes, parse_notes_comment


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("<!-- notes: remember to smile -->", "remember to smile"),
        ("<!-- NOTES:  shout -->", "shout"),
        ("<!-- bare comment -->", "bare comment"),
        ("<!--    -->", None),
        ("<div>not a comment</div>", None),
        ("<!-- a --> trailing text", None),
    ],
)
def test_parse_notes_comment(raw, expected):
    assert parse_notes_comment(raw) == expected


def test_marker_and_bare_comments_keep_document_order():
    nodes = build_ast("<!-- notes: Key point A -->\n\n<!-- Key point B -->\n\nBody").nodes

    result = extract_notes(nodes)

    assert result.notes == "Key point A\nKey point B"
    assert [node.type for node in result.nodes] == ["paragraph"]


def test_extraction_is_idempotent():
    nodes = build_ast("Intro\n\n<!-- notes: first -->\n\n- item\n\n<!-- second -->").nodes
    extractor = NotesExtractor()

    first = extractor.extract(nodes)
    second = extractor.extract(nodes)

    assert first.notes == second.notes == "first\nsecond"
    assert first.nodes == second.nodes
    assert len(nodes) == 4


def test_segment_without_comments_has_no_notes():
    result = extract_notes(build_ast("Just text").nodes)

    assert result.notes is None
    assert len(result.nodes) == 1


def test_other_html_blocks_stay_in_the_node_range():
    nodes = build_ast("<div>box</div>\n\n<!-- notes: hi -->").nodes

    result = extract_notes(nodes)

    assert result.notes == "hi"
    assert [node.type for node in result.nodes] == ["html_block"]


def test_inline_comment_in_running_text_becomes_notes():
    nodes = build_ast("Hello <!-- notes: secret --> world").nodes

    result = extract_notes(nodes)

    assert result.notes == "secret"
    assert [node.type for node in result.nodes] == ["paragraph"]


def test_block_and_inline_notes_keep_document_order():
    nodes = build_ast("<!-- notes: first -->\n\n- item <!-- second -->\n\nText <!-- notes: third -->").nodes

    assert extract_notes(nodes).notes == "first\nsecond\nthird"


def test_inline_html_that_is_not_a_comment_carries_no_notes():
    result = extract_notes(build_ast("Press <kbd>Ctrl</kbd> now").nodes)

    assert result.notes is None
