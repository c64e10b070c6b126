"""Utilities to render :class:`Presentation` objects into PPTX files."""

from __future__ import annotations

import io
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from pptx import Presentation as PptxPresentation
from pptx.dml.color import RGBColor as PptxColor
from pptx.util import Emu, Pt

from ..slide_models import (
    BulletList,
    Code,
    Image,
    ListBlock,
    NumberedList,
    Presentation,
    RGBColor,
    Slide,
    SlideElement,
    SlideLayout,
    Table,
    Text,
    TextSpan,
    ThemeConfig,
)

LOGGER = logging.getLogger(__name__)

ImageLoader = Callable[[str], Optional[bytes]]
Frame = Tuple[int, int, int, int]

# Indices into the default python-pptx template.
LAYOUT_INDEX = {
    SlideLayout.TITLE: 0,
    SlideLayout.SECTION_HEADER: 2,
    SlideLayout.TITLE_AND_BODY: 5,
    SlideLayout.TWO_COLUMN: 5,
    SlideLayout.BLANK: 6,
}

CODE_FONT = "Courier New"
BULLET_GLYPHS = ("•", "–", "◦")


class LocalImageLoader:
    """Resolve image urls against a local directory; remote urls yield ``None``."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = Path(base_dir or Path("."))

    def __call__(self, url: str) -> Optional[bytes]:
        if "://" in url:
            return None
        path = Path(url)
        if not path.is_absolute():
            path = self.base_dir / path
        if not path.is_file():
            return None
        return path.read_bytes()


class SlideDeckRenderer:
    """Render presentations into PPTX binaries (and optional previews)."""

    def __init__(
        self,
        *,
        template_path: Optional[Path] = None,
        image_loader: Optional[ImageLoader] = None,
        base_dir: Optional[Path] = None,
    ) -> None:
        self.template_path = Path(template_path) if template_path else None
        self.image_loader = image_loader or LocalImageLoader(base_dir)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render_document(self, presentation: Presentation) -> io.BytesIO:
        """Return a PPTX stream that represents ``presentation``."""

        prs = (
            PptxPresentation(str(self.template_path))
            if self.template_path
            else PptxPresentation()
        )
        _clear_existing_slides(prs)
        theme = presentation.theme or ThemeConfig()
        prs.core_properties.title = presentation.title
        if presentation.author:
            prs.core_properties.author = presentation.author

        for slide in presentation.slides:
            self._render_slide(prs, slide, theme)

        buffer = io.BytesIO()
        prs.save(buffer)
        buffer.seek(0)
        LOGGER.debug("Rendered %d slide(s) to PPTX", len(presentation.slides))
        return buffer

    def render_preview_image(
        self,
        presentation: Presentation,
        *,
        slide_index: int = 0,
        pptx_bytes: Optional[bytes] = None,
    ) -> Optional[bytes]:
        """Generate a PNG preview for ``presentation`` if LibreOffice is available."""

        soffice_path = _locate_soffice()
        if soffice_path is None:
            return None

        payload = pptx_bytes or self.render_document(presentation).getvalue()
        with tempfile.TemporaryDirectory() as tmpdir:
            pptx_path = Path(tmpdir) / "preview.pptx"
            pptx_path.write_bytes(payload)
            cmd = [
                soffice_path,
                "--headless",
                "--convert-to",
                "png",
                "--outdir",
                tmpdir,
                str(pptx_path),
            ]
            try:
                subprocess.run(
                    cmd,
                    check=True,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    timeout=60,
                )
            except (OSError, subprocess.SubprocessError) as exc:
                LOGGER.warning("Preview conversion failed: %s", exc)
                return None

            png_files = sorted(Path(tmpdir).glob("*.png"))
            if not png_files:
                return None
            index = max(0, min(slide_index, len(png_files) - 1))
            return png_files[index].read_bytes()

    # ------------------------------------------------------------------
    # Slide rendering
    # ------------------------------------------------------------------
    def _render_slide(self, prs, slide: Slide, theme: ThemeConfig) -> None:
        layout = prs.slide_layouts[LAYOUT_INDEX[slide.layout]]
        pptx_slide = prs.slides.add_slide(layout)
        # Title and subtitle without a placeholder lead the content area.
        elements: List[SlideElement] = []

        title_shape = pptx_slide.shapes.title
        if slide.title:
            if title_shape is not None:
                title_shape.text = slide.title
                for paragraph in title_shape.text_frame.paragraphs:
                    for run in paragraph.runs:
                        _style_font(run.font, theme.font_family, None, theme.primary_color)
            else:
                elements.append(Text(text=slide.title, heading_level=1))

        if slide.subtitle:
            subtitle_shape = _placeholder(pptx_slide, 1)
            if subtitle_shape is not None and subtitle_shape.has_text_frame:
                subtitle_shape.text_frame.text = slide.subtitle
                for paragraph in subtitle_shape.text_frame.paragraphs:
                    for run in paragraph.runs:
                        _style_font(run.font, theme.font_family, None, theme.secondary_color)
            else:
                elements.append(Text(text=slide.subtitle, heading_level=2))
        elements.extend(slide.elements)

        has_title_area = title_shape is not None and bool(slide.title)
        frames = _content_frames(prs, len(elements), has_title_area, slide.layout)
        for element, frame in zip(elements, frames):
            self._render_element(pptx_slide, element, frame, theme)

        if slide.notes:
            pptx_slide.notes_slide.notes_text_frame.text = slide.notes
        if slide.background is not None and slide.background.color is not None:
            fill = pptx_slide.background.fill
            fill.solid()
            fill.fore_color.rgb = _color(slide.background.color)
        _remove_empty_placeholders(pptx_slide)

    def _render_element(self, pptx_slide, element: SlideElement, frame: Frame, theme: ThemeConfig) -> None:
        if isinstance(element, Text):
            self._render_text(pptx_slide, element, frame, theme)
        elif isinstance(element, (BulletList, NumberedList)):
            self._render_list(pptx_slide, element, frame, theme)
        elif isinstance(element, Image):
            self._render_image(pptx_slide, element, frame, theme)
        elif isinstance(element, Table):
            self._render_table(pptx_slide, element, frame, theme)
        elif isinstance(element, Code):
            self._render_code(pptx_slide, element, frame, theme)

    def _render_text(self, pptx_slide, element: Text, frame: Frame, theme: ThemeConfig) -> None:
        text_frame = _textbox(pptx_slide, frame)
        paragraph = text_frame.paragraphs[0]
        if element.heading_level:
            size = theme.font_size + max(0, 8 - 2 * element.heading_level)
            _write_runs(paragraph, element.text, element.spans, theme, size=size, bold=True,
                        color=theme.primary_color)
        else:
            _write_runs(paragraph, element.text, element.spans, theme, size=theme.font_size)

    def _render_list(self, pptx_slide, element: ListBlock, frame: Frame, theme: ThemeConfig) -> None:
        text_frame = _textbox(pptx_slide, frame)
        state = {"first": True}

        def emit(block: ListBlock, level: int) -> None:
            numbered = isinstance(block, NumberedList)
            for offset, item in enumerate(block.items):
                if state["first"]:
                    paragraph = text_frame.paragraphs[0]
                    state["first"] = False
                else:
                    paragraph = text_frame.add_paragraph()
                paragraph.level = min(level, 8)
                marker = (
                    f"{block.start + offset}. "
                    if numbered
                    else BULLET_GLYPHS[level % len(BULLET_GLYPHS)] + " "
                )
                indent = "    " * level
                prefix = indent + marker
                shifted = tuple(
                    TextSpan(span.start + len(prefix), span.end + len(prefix), span.style, span.href)
                    for span in item.spans
                )
                _write_runs(paragraph, prefix + item.text, shifted, theme,
                            size=max(theme.font_size - 2 * level, 8))
                for child in item.children:
                    emit(child, level + 1)

        emit(element, 0)

    def _render_image(self, pptx_slide, element: Image, frame: Frame, theme: ThemeConfig) -> None:
        left, top, width, height = frame
        data = self.image_loader(element.url) if element.url else None
        if data is not None:
            try:
                pptx_slide.shapes.add_picture(
                    io.BytesIO(data),
                    left,
                    top,
                    width=Pt(element.width) if element.width else None,
                    height=Pt(element.height) if element.height else (
                        None if element.width else height
                    ),
                )
                return
            except Exception as exc:
                LOGGER.warning("Failed to embed image %s: %s", element.url, exc)
        else:
            LOGGER.warning("Image %s could not be loaded; inserting placeholder", element.url)

        text_frame = _textbox(pptx_slide, frame)
        caption = element.alt or element.url or "image"
        _write_runs(text_frame.paragraphs[0], f"[{caption}]", (), theme,
                    size=theme.font_size, color=theme.secondary_color)

    def _render_table(self, pptx_slide, element: Table, frame: Frame, theme: ThemeConfig) -> None:
        rows = element.all_rows()
        columns = element.column_count
        if not rows or not columns:
            LOGGER.debug("Skipping empty table")
            return
        left, top, width, height = frame
        graphic_frame = pptx_slide.shapes.add_table(len(rows), columns, left, top, width, height)
        table = graphic_frame.table
        table.first_row = element.header is not None
        for row_idx, row in enumerate(rows):
            for col_idx in range(columns):
                cell = table.cell(row_idx, col_idx)
                cell.text = row[col_idx] if col_idx < len(row) else ""
                for paragraph in cell.text_frame.paragraphs:
                    for run in paragraph.runs:
                        _style_font(run.font, theme.font_family, Pt(max(theme.font_size - 4, 8)), None)

    def _render_code(self, pptx_slide, element: Code, frame: Frame, theme: ThemeConfig) -> None:
        text_frame = _textbox(pptx_slide, frame)
        size = Pt(max(theme.font_size - 4, 8))
        for number, line in enumerate(element.lines, start=1):
            paragraph = text_frame.paragraphs[0] if number == 1 else text_frame.add_paragraph()
            run = paragraph.add_run()
            run.text = line
            highlighted = number in element.highlighted_lines
            _style_font(run.font, CODE_FONT, size, theme.secondary_color if highlighted else None)
            run.font.bold = highlighted


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------

def _color(color: RGBColor) -> PptxColor:
    return PptxColor(color.red, color.green, color.blue)


def _style_font(font, name: Optional[str], size, color: Optional[RGBColor]) -> None:
    if name:
        font.name = name
    if size is not None:
        font.size = size
    if color is not None:
        font.color.rgb = _color(color)


def _textbox(pptx_slide, frame: Frame):
    left, top, width, height = frame
    shape = pptx_slide.shapes.add_textbox(left, top, width, height)
    text_frame = shape.text_frame
    text_frame.word_wrap = True
    return text_frame


def _segments(text: str, spans: Sequence[TextSpan]) -> List[Tuple[str, List[TextSpan]]]:
    bounds = {0, len(text)}
    for span in spans:
        bounds.add(min(span.start, len(text)))
        bounds.add(min(span.end, len(text)))
    points = sorted(bounds)
    pieces = []
    for start, end in zip(points, points[1:]):
        active = [span for span in spans if span.start <= start and span.end >= end]
        pieces.append((text[start:end], active))
    return pieces


def _write_runs(
    paragraph,
    text: str,
    spans: Sequence[TextSpan],
    theme: ThemeConfig,
    *,
    size: int,
    bold: bool = False,
    color: Optional[RGBColor] = None,
) -> None:
    for piece, active in _segments(text, spans):
        styles = {span.style for span in active}
        href = next((span.href for span in active if span.style == "link" and span.href), None)
        for line_idx, line in enumerate(piece.split("\n")):
            if line_idx:
                paragraph.add_line_break()
            if not line:
                continue
            run = paragraph.add_run()
            run.text = line
            font = run.font
            _style_font(
                font,
                CODE_FONT if "code" in styles else theme.font_family,
                Pt(size),
                theme.secondary_color if href else color,
            )
            font.bold = bold or "bold" in styles
            font.italic = "italic" in styles
            if "strikethrough" in styles:
                font._rPr.set("strike", "sngStrike")
            if href:
                run.hyperlink.address = href


def _content_frames(prs, count: int, has_title_area: bool, layout: SlideLayout) -> List[Frame]:
    if count == 0:
        return []
    slide_width = int(prs.slide_width)
    slide_height = int(prs.slide_height)
    margin = int(slide_width * 0.05)
    gap = int(slide_height * 0.02)
    top = int(slide_height * 0.24) if has_title_area else margin
    width = slide_width - 2 * margin
    height = slide_height - top - margin

    if layout is SlideLayout.TWO_COLUMN and count == 2:
        column_width = (width - gap) // 2
        return [
            (Emu(margin), Emu(top), Emu(column_width), Emu(height)),
            (Emu(margin + column_width + gap), Emu(top), Emu(column_width), Emu(height)),
        ]

    row_height = max((height - gap * (count - 1)) // count, gap)
    return [
        (Emu(margin), Emu(top + idx * (row_height + gap)), Emu(width), Emu(row_height))
        for idx in range(count)
    ]


def _placeholder(pptx_slide, idx: int):
    return next(
        (shape for shape in pptx_slide.placeholders if shape.placeholder_format.idx == idx),
        None,
    )


def _remove_empty_placeholders(pptx_slide) -> None:
    for shape in list(pptx_slide.placeholders):
        if shape.has_text_frame and not shape.text_frame.text:
            element = shape._element
            element.getparent().remove(element)


def _clear_existing_slides(presentation) -> None:
    for idx in range(len(presentation.slides) - 1, -1, -1):
        slide_id = presentation.slides._sldIdLst[idx].rId
        presentation.part.drop_rel(slide_id)
        del presentation.slides._sldIdLst[idx]


def _locate_soffice() -> Optional[str]:
    candidates = [
        "soffice",
        "/Applications/LibreOffice.app/Contents/MacOS/soffice",
        "/usr/bin/soffice",
    ]
    for candidate in candidates:
        try:
            subprocess.run(
                [candidate, "--version"],
                check=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            return candidate
        except (OSError, subprocess.SubprocessError):
            continue
    return None


__all__ = ["SlideDeckRenderer", "LocalImageLoader", "LAYOUT_INDEX"]
