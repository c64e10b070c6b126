import base64
import io

import pytest

pytest.importorskip("pptx")
from pptx import Presentation as PptxPresentation
from pptx.enum.shapes import MSO_SHAPE_TYPE

from slidemark.generators.pptx_renderer import SlideDeckRenderer
from slidemark.pipeline import parse_markdown
from slidemark.slide_models import Background, Image, Presentation, Slide, SlideLayout

PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

DECK = """# Launch Plan

## Spring release

---

# Agenda

- **Scope** and goals
  - nested detail
- Timeline

<!-- notes: keep it short -->

---

# Numbers

| Metric | Value |
|--------|-------|
| Users  | 10k   |

```python {2}
total = 0
total += 1
```
"""


def _open(stream: io.BytesIO) -> PptxPresentation:
    return PptxPresentation(io.BytesIO(stream.getvalue()))


def _texts(slide):
    return [shape.text_frame.text for shape in slide.shapes if getattr(shape, "has_text_frame", False)]


def test_render_document_writes_every_slide():
    presentation = parse_markdown(DECK).presentation

    prs = _open(SlideDeckRenderer().render_document(presentation))

    assert len(prs.slides) == 3
    cover, agenda, numbers = prs.slides
    assert cover.shapes.title.text == "Launch Plan"
    assert "Spring release" in _texts(cover)
    assert any("Scope and goals" in text for text in _texts(agenda))
    assert agenda.notes_slide.notes_text_frame.text == "keep it short"
    assert any(shape.has_table for shape in numbers.shapes)
    assert any("total += 1" in text for text in _texts(numbers))


def test_empty_placeholders_are_removed():
    presentation = Presentation(title="D", slides=[Slide("slide_01", layout=SlideLayout.TITLE, title="Only")])

    prs = _open(SlideDeckRenderer().render_document(presentation))

    assert all(shape.text_frame.text for shape in prs.slides[0].placeholders)


def test_images_come_from_the_loader():
    requested = []

    def loader(url):
        requested.append(url)
        return PNG_1X1

    presentation = Presentation(
        title="D",
        slides=[Slide("slide_01", elements=[Image(url="pic.png", width=72, height=72)])],
    )

    prs = _open(SlideDeckRenderer(image_loader=loader).render_document(presentation))

    assert requested == ["pic.png"]
    pictures = [shape for shape in prs.slides[0].shapes if shape.shape_type == MSO_SHAPE_TYPE.PICTURE]
    assert len(pictures) == 1
    assert pictures[0].width == 914400


def test_missing_image_becomes_placeholder(tmp_path, caplog):
    presentation = Presentation(
        title="D",
        slides=[Slide("slide_01", elements=[Image(url="absent.png", alt="diagram")])],
    )

    prs = _open(SlideDeckRenderer(base_dir=tmp_path).render_document(presentation))

    assert "[diagram]" in _texts(prs.slides[0])
    assert "absent.png" in caplog.text


def test_local_images_resolve_against_base_dir(tmp_path):
    (tmp_path / "pic.png").write_bytes(PNG_1X1)
    presentation = Presentation(title="D", slides=[Slide("slide_01", elements=[Image(url="pic.png")])])

    prs = _open(SlideDeckRenderer(base_dir=tmp_path).render_document(presentation))

    assert any(shape.shape_type == MSO_SHAPE_TYPE.PICTURE for shape in prs.slides[0].shapes)


def test_background_color_is_applied():
    presentation = Presentation(
        title="D",
        slides=[Slide("slide_01", title="Bg", background=Background(color="#102030"))],
    )

    prs = _open(SlideDeckRenderer().render_document(presentation))

    assert str(prs.slides[0].background.fill.fore_color.rgb) == "102030"


def test_render_preview_image_returns_none_without_soffice(monkeypatch):
    presentation = parse_markdown(DECK).presentation
    renderer = SlideDeckRenderer()

    pptx_stream = renderer.render_document(presentation)
    monkeypatch.setattr("slidemark.generators.pptx_renderer._locate_soffice", lambda: None)
    preview = renderer.render_preview_image(presentation, pptx_bytes=pptx_stream.getvalue())
    assert preview is None
