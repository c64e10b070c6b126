"""Tests for node to element transformation."""

from __future__ import annotations

import pytest

from slidemark.exceptions import UnrecognizedNodeKind
from slidemark.markdown_ast import build_ast
from slidemark.segmenter import segment_nodes
from slidemark.slide_models import (
    BulletList,
    Code,
    Image,
    NumberedList,
    SlideLayout,
    Table,
    Text,
    TextSpan,
)
from slidemark.transformer import (
    NodeTransformer,
    classify_layout,
    parse_fence_info,
    parse_highlight_lines,
    parse_size_attributes,
)


def _first(text: str, *, strict: bool = False):
    node = build_ast(text).nodes[0]
    return NodeTransformer(strict=strict).transform_node(node)


def test_paragraph_with_inline_styles():
    (element,) = _first("Hello **world** and *you*")

    assert element == Text(
        text="Hello world and you",
        spans=(TextSpan(6, 11, "bold"), TextSpan(16, 19, "italic")),
    )


def test_link_and_code_spans():
    (element,) = _first("See [docs](https://example.com/a?b=1) or `run()`")

    styles = {span.style: span for span in element.spans}
    assert element.text == "See docs or run()"
    assert styles["link"] == TextSpan(4, 8, "link", "https://example.com/a?b=1")
    assert styles["code"] == TextSpan(12, 17, "code")


def test_image_with_size_annotation():
    assert _first("![logo](logo.png){width=300}") == [
        Image(url="logo.png", alt="logo", width=300, height=None)
    ]


def test_paragraph_with_several_images():
    images = _first("![a](a.png) ![b](b.png){height=40}")

    assert [image.url for image in images] == ["a.png", "b.png"]
    assert images[1].height == 40


def test_image_inside_text_splits_the_paragraph():
    assert _first("Look ![a](a.png) here") == [
        Text(text="Look"),
        Image(url="a.png", alt="a"),
        Text(text="here"),
    ]


def test_size_annotation_inside_text_sizes_the_image():
    assert _first("See ![logo](logo.png){width=300} here") == [
        Text(text="See"),
        Image(url="logo.png", alt="logo", width=300),
        Text(text="here"),
    ]


def test_split_text_keeps_its_styles():
    elements = _first("Some **bold** ![i](i.png) and *more*")

    assert elements == [
        Text(text="Some bold", spans=(TextSpan(5, 9, "bold"),)),
        Image(url="i.png", alt="i"),
        Text(text="and more", spans=(TextSpan(4, 8, "italic"),)),
    ]


def test_image_inside_link_keeps_alt_text_without_annotation():
    (element,) = _first("[![badge](b.svg){width=20}](https://example.com) passing")

    assert isinstance(element, Text)
    assert element.text == "badge passing"


def test_unparseable_size_annotation_is_ignored():
    assert _first("![a](a.png){width=wide}") == [Image(url="a.png", alt="a")]


@pytest.mark.parametrize(
    "annotation, expected",
    [
        ("width=300", (300, None)),
        ("width: 120px height=80", (120, 80)),
        ("height='50pt'", (None, 50)),
        ("width=0", (None, None)),
        ("colour=red", (None, None)),
    ],
)
def test_parse_size_attributes(annotation, expected):
    assert parse_size_attributes(annotation) == expected


def test_highlight_and_fence_info():
    assert parse_highlight_lines("2-3,5") == frozenset({2, 3, 5})
    assert parse_highlight_lines("2-x") == frozenset()
    assert parse_fence_info("python {1,3}") == ("python", frozenset({1, 3}))
    assert parse_fence_info("") == (None, frozenset())


def test_fenced_code_block():
    (element,) = _first("```python {2}\na = 1\nb = 2\n```")

    assert element == Code(content="a = 1\nb = 2", language="python", highlighted_lines=frozenset({2}))


def test_nested_lists():
    (element,) = _first("- a\n  - b\n- c")

    assert isinstance(element, BulletList)
    assert [item.text for item in element.items] == ["a", "c"]
    assert element.items[0].children[0].items[0].text == "b"


def test_ordered_list_start():
    (element,) = _first("3. x\n4. y")

    assert isinstance(element, NumberedList)
    assert element.start == 3


def test_table_rows_are_rectangular():
    (element,) = _first("| a | b |\n|---|---|\n| 1 | 2 |\n| 3 |")

    assert isinstance(element, Table)
    assert element.header == ("a", "b")
    assert element.rows == (("1", "2"), ("3", ""))
    assert element.is_rectangular


def test_blockquote_degrades_to_text():
    assert _first("> quoted") == [Text(text="quoted")]


def test_raw_html_dropped_when_lenient():
    assert _first("<div>x</div>") == []


@pytest.mark.parametrize("text, kind", [("> quoted", "blockquote"), ("<div>x</div>", "html_block")])
def test_strict_mode_raises_for_unsupported_nodes(text, kind):
    with pytest.raises(UnrecognizedNodeKind) as excinfo:
        _first(text, strict=True)

    assert excinfo.value.node_kind == kind
    assert excinfo.value.line == 1


def test_segment_subtitle_detection():
    (segment,) = segment_nodes(build_ast("# Title\n\n## Sub").nodes)

    result = NodeTransformer().transform_segment(segment, is_first=True)

    assert result.title == "Title"
    assert result.subtitle == "Sub"
    assert result.elements == ()
    assert result.layout is SlideLayout.TITLE


def test_strict_segment_collects_issues():
    (segment,) = segment_nodes(build_ast("> a\n\ntext\n\n<div>b</div>").nodes)

    result = NodeTransformer(strict=True).transform_segment(segment, slide_id="slide_01")

    assert [issue.node_kind for issue in result.issues] == ["blockquote", "html_block"]
    assert all(issue.slide_id == "slide_01" for issue in result.issues)
    assert result.elements == (Text(text="text"),)


def test_classify_layout():
    text = Text(text="x")
    bullets = BulletList(items=["a"])
    image = Image(url="a.png")

    assert classify_layout(None, None, [], is_first=False) is SlideLayout.BLANK
    assert classify_layout("T", None, [], is_first=True) is SlideLayout.TITLE
    assert classify_layout("T", None, [], is_first=False) is SlideLayout.SECTION_HEADER
    assert classify_layout("T", None, [text, image], is_first=False) is SlideLayout.TWO_COLUMN
    assert classify_layout("T", None, [bullets, bullets], is_first=False) is SlideLayout.TWO_COLUMN
    assert classify_layout("T", None, [text, text], is_first=False) is SlideLayout.TITLE_AND_BODY
