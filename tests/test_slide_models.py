"""Tests for the presentation content model."""

from __future__ import annotations

import json

import pytest

from slidemark.config import ParserConfig
from slidemark.pipeline import parse_markdown
from slidemark.slide_models import (
    Background,
    BulletList,
    Code,
    Presentation,
    RGBColor,
    Slide,
    SlideLayout,
    Text,
    ThemeConfig,
    element_from_dict,
)

FRONT_MATTER = ParserConfig(front_matter=True)

DECK = """---
title: Demo
theme:
  secondary_color: "#abc"
---

# Demo

---

## Code

```python {1}
print("hi")
```

- one
  1. nested

<!-- notes: talk -->
"""


def test_json_round_trip_preserves_presentation():
    presentation = parse_markdown(DECK, FRONT_MATTER).presentation

    restored = Presentation.from_json(presentation.to_json())

    assert restored == presentation


def test_interchange_shape():
    data = json.loads(parse_markdown(DECK, FRONT_MATTER).presentation.to_json())

    assert data["metadata"] == {"title": "Demo", "author": None, "date": None}
    assert data["theme"]["secondaryColor"] == "#AABBCC"
    slide = data["slides"][1]
    assert slide["id"] == "slide_02"
    assert slide["layout"] == "title-and-body"
    assert [element["type"] for element in slide["elements"]] == ["code", "bulletList"]
    assert slide["elements"][0]["highlightedLines"] == [1]
    assert slide["notes"] == "talk"


def test_replace_slide_returns_new_value():
    presentation = Presentation(title="D", slides=[Slide("slide_01"), Slide("slide_02")])
    edited = Slide("slide_02", title="Edited")

    updated = presentation.replace_slide(edited)

    assert updated.get_slide("slide_02").title == "Edited"
    assert presentation.get_slide("slide_02").title is None
    assert updated.slide_ids == ["slide_01", "slide_02"]


def test_replace_unknown_slide_raises():
    with pytest.raises(KeyError):
        Presentation(title="D").replace_slide(Slide("slide_09"))


def test_without_empty_slides_keeps_identifiers():
    presentation = Presentation(
        title="D",
        slides=[Slide("slide_01", layout=SlideLayout.BLANK), Slide("slide_02", notes="n")],
    )

    assert presentation.without_empty_slides().slide_ids == ["slide_02"]


def test_values_are_immutable():
    slide = Slide("slide_01", elements=[Text(text="a")])

    with pytest.raises(AttributeError):
        slide.title = "changed"
    assert isinstance(slide.elements, tuple)


def test_theme_validation():
    assert ThemeConfig(font_family="verdana").font_family == "Verdana"
    with pytest.raises(ValueError):
        ThemeConfig(font_family="Comic Sans MS")
    with pytest.raises(ValueError):
        ThemeConfig(font_size=200)
    with pytest.raises(ValueError):
        ThemeConfig(primary_color="#12345")


def test_theme_accepts_both_key_styles():
    camel = ThemeConfig.from_dict({"primaryColor": "#000000", "fontSize": 20})
    snake = ThemeConfig.from_dict({"primary_color": "#000000", "font_size": 20})

    assert camel == snake
    assert camel.primary_color.hex == "#000000"


def test_color_parsing():
    assert RGBColor.from_hex("#abc") == RGBColor(170, 187, 204)
    assert RGBColor.from_hex("2C3E50").hex == "#2C3E50"
    assert Background(color="#FFFFFF").color == RGBColor(255, 255, 255)


def test_element_from_dict():
    assert element_from_dict({"type": "bulletList", "items": [{"text": "a"}]}) == BulletList(
        items=["a"]
    )
    assert element_from_dict({"type": "code", "content": "x"}) == Code(content="x")
    with pytest.raises(ValueError):
        element_from_dict({"type": "video"})
