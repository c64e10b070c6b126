"""Tests for content-model validation."""

from __future__ import annotations

from slidemark.exceptions import (
    DuplicateIdentifier,
    InvalidReference,
    LayoutContentMismatch,
    MalformedTable,
)
from slidemark.slide_models import Image, Presentation, Slide, SlideLayout, Table, Text
from slidemark.validator import PresentationValidator, validate_presentation


def test_valid_presentation_has_no_violations():
    presentation = Presentation(
        title="Deck",
        slides=[Slide("slide_01", elements=[Text(text="hi")]), Slide("slide_02")],
    )

    assert validate_presentation(presentation) == []


def test_violations_are_collected_in_document_order():
    presentation = Presentation(
        title="Deck",
        slides=[
            Slide("slide_01", elements=[Table(rows=[("a", "b"), ("c",)])]),
            Slide("slide_01", elements=[Text(text="ok"), Image(url="  ")]),
        ],
    )

    violations = validate_presentation(presentation)

    assert [type(item) for item in violations] == [
        MalformedTable,
        DuplicateIdentifier,
        InvalidReference,
    ]
    assert violations[0].element_index == 0
    assert violations[2].slide_id == "slide_01"
    assert violations[2].element_index == 1


def test_layout_check_only_when_enabled():
    slide = Slide(
        "slide_01",
        layout=SlideLayout.TITLE,
        title="Cover",
        elements=[Image(url="a.png")],
    )
    presentation = Presentation(title="Deck", slides=[slide])

    assert PresentationValidator().validate(presentation) == []
    (violation,) = PresentationValidator(strict_layout=True).validate(presentation)
    assert isinstance(violation, LayoutContentMismatch)
    assert "image" in violation.message


def test_title_layout_tolerates_short_text():
    slide = Slide("slide_01", layout=SlideLayout.TITLE, elements=[Text(text="a"), Text(text="b")])

    assert validate_presentation(Presentation(title="D", slides=[slide]), strict_layout=True) == []


def test_violation_string_includes_location():
    violation = MalformedTable("bad rows", slide_id="slide_03", element_index=2)

    assert str(violation) == "[slide_03, element 2] malformed_table: bad rows"
