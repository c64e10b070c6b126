"""Translate presentations into Google Slides ``batchUpdate`` request bodies.

The builder is declarative: it never talks to the network. Callers send the
returned requests with their own client, batching with :func:`chunk_requests`
and handling quota errors (writes are rate limited per user and per project)
on their side.

Speaker notes need the object id of each slide's notes shape, which only the
platform knows after the slides exist, so they are produced by a second call
to :meth:`GoogleSlidesRequestBuilder.build_notes_requests`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

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

Request = Dict[str, Any]
Box = Tuple[float, float, float, float]

PREDEFINED_LAYOUTS = {
    SlideLayout.TITLE: "TITLE",
    SlideLayout.SECTION_HEADER: "SECTION_HEADER",
    SlideLayout.TITLE_AND_BODY: "TITLE_ONLY",
    SlideLayout.TWO_COLUMN: "TITLE_ONLY",
    SlideLayout.BLANK: "BLANK",
}

# Placeholder types carried by each predefined layout.
_TITLE_PLACEHOLDER = {
    "TITLE": "CENTERED_TITLE",
    "SECTION_HEADER": "TITLE",
    "TITLE_ONLY": "TITLE",
}

BULLET_PRESET = "BULLET_DISC_CIRCLE_SQUARE"
NUMBERED_PRESET = "NUMBERED_DIGIT_ALPHA_ROMAN"
CODE_FONT = "Courier New"

DEFAULT_PAGE_SIZE = (720.0, 405.0)
MAX_REQUESTS_PER_BATCH = 500

_OBJECT_ID_INVALID = re.compile(r"[^A-Za-z0-9_\-:]")


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units, as the Slides API counts."""

    return len(text.encode("utf-16-le")) // 2


def _object_id(*parts: str) -> str:
    raw = "_".join(parts)
    cleaned = _OBJECT_ID_INVALID.sub("_", raw)
    if not cleaned[:1].isalnum() and not cleaned.startswith("_"):
        cleaned = "_" + cleaned
    return cleaned.ljust(5, "_")[:50]


def _rgb(color: RGBColor) -> Dict[str, Any]:
    return {
        "rgbColor": {
            "red": round(color.red / 255, 4),
            "green": round(color.green / 255, 4),
            "blue": round(color.blue / 255, 4),
        }
    }


def _pt(value: float) -> Dict[str, Any]:
    return {"magnitude": value, "unit": "PT"}


def _element_properties(page_id: str, box: Box) -> Dict[str, Any]:
    left, top, width, height = box
    return {
        "pageObjectId": page_id,
        "size": {"width": _pt(width), "height": _pt(height)},
        "transform": {
            "scaleX": 1,
            "scaleY": 1,
            "translateX": left,
            "translateY": top,
            "unit": "PT",
        },
    }


def chunk_requests(
    requests: Sequence[Request], max_requests_per_batch: int = MAX_REQUESTS_PER_BATCH
) -> List[Dict[str, List[Request]]]:
    """Split ``requests`` into ordered ``batchUpdate`` bodies."""

    if max_requests_per_batch < 1:
        raise ValueError("max_requests_per_batch must be at least 1")
    return [
        {"requests": list(requests[idx: idx + max_requests_per_batch])}
        for idx in range(0, len(requests), max_requests_per_batch)
    ]


class GoogleSlidesRequestBuilder:
    """Build Slides API requests for a :class:`Presentation`.

    ``url_resolver`` maps an image url to a publicly fetchable one (or
    ``None``); the default keeps ``http(s)`` urls and rejects everything else.
    """

    def __init__(
        self,
        *,
        page_size: Tuple[float, float] = DEFAULT_PAGE_SIZE,
        url_resolver: Optional[Callable[[str], Optional[str]]] = None,
    ) -> None:
        self.page_width, self.page_height = page_size
        self.url_resolver = url_resolver or _remote_only

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def build_requests(self, presentation: Presentation) -> List[Request]:
        theme = presentation.theme or ThemeConfig()
        requests: List[Request] = []
        for index, slide in enumerate(presentation.slides):
            requests.extend(self._slide_requests(slide, index, theme))
        LOGGER.debug(
            "Built %d request(s) for %d slide(s)", len(requests), len(presentation.slides)
        )
        return requests

    def build_notes_requests(
        self, presentation: Presentation, speaker_notes_ids: Mapping[str, str]
    ) -> List[Request]:
        """Insert each slide's notes into its speaker-notes shape.

        ``speaker_notes_ids`` maps slide ids to the ``speakerNotesObjectId``
        reported by the platform; slides without an entry are skipped.
        """

        requests: List[Request] = []
        for slide in presentation.slides:
            if not slide.notes:
                continue
            shape_id = speaker_notes_ids.get(slide.slide_id)
            if shape_id is None:
                LOGGER.warning("No speaker notes shape known for %s", slide.slide_id)
                continue
            requests.append(
                {"insertText": {"objectId": shape_id, "text": slide.notes, "insertionIndex": 0}}
            )
        return requests

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------
    def _slide_requests(self, slide: Slide, index: int, theme: ThemeConfig) -> List[Request]:
        page_id = _object_id(slide.slide_id)
        predefined = PREDEFINED_LAYOUTS[slide.layout]
        mappings = []
        title_id = subtitle_id = None
        if predefined in _TITLE_PLACEHOLDER:
            title_id = _object_id(page_id, "title")
            mappings.append(
                {
                    "layoutPlaceholder": {"type": _TITLE_PLACEHOLDER[predefined], "index": 0},
                    "objectId": title_id,
                }
            )
        if predefined == "TITLE":
            subtitle_id = _object_id(page_id, "subtitle")
            mappings.append(
                {"layoutPlaceholder": {"type": "SUBTITLE", "index": 0}, "objectId": subtitle_id}
            )

        create: Request = {
            "objectId": page_id,
            "insertionIndex": index,
            "slideLayoutReference": {"predefinedLayout": predefined},
        }
        if mappings:
            create["placeholderIdMappings"] = mappings
        requests: List[Request] = [{"createSlide": create}]

        # Title and subtitle without a placeholder lead the content area.
        elements: List[SlideElement] = []
        if slide.title:
            if title_id is not None:
                requests.extend(
                    _text_requests(title_id, slide.title, (), font=theme.font_family,
                                   color=theme.primary_color)
                )
            else:
                elements.append(Text(text=slide.title, heading_level=1))
        if slide.subtitle:
            if subtitle_id is not None:
                requests.extend(
                    _text_requests(subtitle_id, slide.subtitle, (), font=theme.font_family,
                                   color=theme.secondary_color)
                )
            else:
                elements.append(Text(text=slide.subtitle, heading_level=2))
        elements.extend(slide.elements)

        boxes = self._content_boxes(len(elements), title_id is not None and bool(slide.title),
                                    slide.layout)
        for idx, (element, box) in enumerate(zip(elements, boxes)):
            object_id = _object_id(page_id, f"e{idx}")
            requests.extend(self._element_requests(page_id, object_id, element, box, theme))

        if slide.background is not None:
            requests.extend(self._background_requests(page_id, slide))
        return requests

    def _background_requests(self, page_id: str, slide: Slide) -> List[Request]:
        background = slide.background
        fill: Dict[str, Any] = {}
        fields = []
        if background.image_url:
            resolved = self.url_resolver(background.image_url)
            if resolved:
                fill["stretchedPictureFill"] = {"contentUrl": resolved}
                fields.append("pageBackgroundFill.stretchedPictureFill.contentUrl")
            else:
                LOGGER.warning("Background image %s is not reachable; skipped", background.image_url)
        if background.color is not None and not fill:
            fill["solidFill"] = {"color": _rgb(background.color)}
            fields.append("pageBackgroundFill.solidFill.color")
        if not fill:
            return []
        return [
            {
                "updatePageProperties": {
                    "objectId": page_id,
                    "pageProperties": {"pageBackgroundFill": fill},
                    "fields": ",".join(fields),
                }
            }
        ]

    def _content_boxes(self, count: int, has_title_area: bool, layout: SlideLayout) -> List[Box]:
        if count == 0:
            return []
        margin = self.page_width * 0.05
        gap = self.page_height * 0.02
        top = self.page_height * 0.24 if has_title_area else margin
        width = self.page_width - 2 * margin
        height = self.page_height - top - margin

        if layout is SlideLayout.TWO_COLUMN and count == 2:
            column = (width - gap) / 2
            return [(margin, top, column, height), (margin + column + gap, top, column, height)]

        row = max((height - gap * (count - 1)) / count, gap)
        return [(margin, top + idx * (row + gap), width, row) for idx in range(count)]

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------
    def _element_requests(
        self, page_id: str, object_id: str, element: SlideElement, box: Box, theme: ThemeConfig
    ) -> List[Request]:
        if isinstance(element, Text):
            return self._text_box(page_id, object_id, element, box, theme)
        if isinstance(element, (BulletList, NumberedList)):
            return self._list_box(page_id, object_id, element, box, theme)
        if isinstance(element, Image):
            return self._image(page_id, object_id, element, box, theme)
        if isinstance(element, Table):
            return self._table(page_id, object_id, element, box, theme)
        if isinstance(element, Code):
            return self._code_box(page_id, object_id, element, box, theme)
        return []

    @staticmethod
    def _create_text_box(page_id: str, object_id: str, box: Box) -> Request:
        return {
            "createShape": {
                "objectId": object_id,
                "shapeType": "TEXT_BOX",
                "elementProperties": _element_properties(page_id, box),
            }
        }

    def _text_box(self, page_id, object_id, element: Text, box, theme) -> List[Request]:
        requests = [self._create_text_box(page_id, object_id, box)]
        if element.heading_level:
            size = theme.font_size + max(0, 8 - 2 * element.heading_level)
            requests.extend(
                _text_requests(object_id, element.text, element.spans, font=theme.font_family,
                               size=size, bold=True, color=theme.primary_color)
            )
        else:
            requests.extend(
                _text_requests(object_id, element.text, element.spans, font=theme.font_family,
                               size=theme.font_size)
            )
        return requests

    def _list_box(self, page_id, object_id, element: ListBlock, box, theme) -> List[Request]:
        lines: List[str] = []
        spans: List[TextSpan] = []
        offset = 0

        def walk(block: ListBlock, depth: int) -> None:
            nonlocal offset
            for item in block.items:
                prefix = "\t" * depth
                line = prefix + item.text.replace("\n", " ")
                for span in item.spans:
                    spans.append(
                        TextSpan(offset + len(prefix) + span.start,
                                 offset + len(prefix) + span.end, span.style, span.href)
                    )
                lines.append(line)
                offset += len(line) + 1
                for child in item.children:
                    walk(child, depth + 1)

        walk(element, 0)
        text = "\n".join(lines)
        requests = [self._create_text_box(page_id, object_id, box)]
        requests.extend(
            _text_requests(object_id, text, spans, font=theme.font_family, size=theme.font_size)
        )
        if text:
            # Leading tabs become nesting levels and are removed by the API,
            # so bullets go last.
            requests.append(
                {
                    "createParagraphBullets": {
                        "objectId": object_id,
                        "textRange": {"type": "ALL"},
                        "bulletPreset": NUMBERED_PRESET
                        if isinstance(element, NumberedList)
                        else BULLET_PRESET,
                    }
                }
            )
        return requests

    def _image(self, page_id, object_id, element: Image, box, theme) -> List[Request]:
        url = self.url_resolver(element.url) if element.url else None
        if url is None:
            LOGGER.warning("Image %s is not reachable by the platform; inserting placeholder",
                           element.url)
            caption = f"[{element.alt or element.url or 'image'}]"
            return [self._create_text_box(page_id, object_id, box)] + _text_requests(
                object_id, caption, (), font=theme.font_family, size=theme.font_size,
                color=theme.secondary_color,
            )
        left, top, width, height = box
        if element.width:
            width = float(element.width)
        if element.height:
            height = float(element.height)
        return [
            {
                "createImage": {
                    "objectId": object_id,
                    "url": url,
                    "elementProperties": _element_properties(page_id, (left, top, width, height)),
                }
            }
        ]

    def _table(self, page_id, object_id, element: Table, box, theme) -> List[Request]:
        rows = element.all_rows()
        columns = element.column_count
        if not rows or not columns:
            LOGGER.debug("Skipping empty table %s", object_id)
            return []
        requests: List[Request] = [
            {
                "createTable": {
                    "objectId": object_id,
                    "elementProperties": _element_properties(page_id, box),
                    "rows": len(rows),
                    "columns": columns,
                }
            }
        ]
        for row_idx, row in enumerate(rows):
            for col_idx, cell in enumerate(row):
                if not cell:
                    continue
                location = {"rowIndex": row_idx, "columnIndex": col_idx}
                requests.append(
                    {
                        "insertText": {
                            "objectId": object_id,
                            "cellLocation": location,
                            "text": cell,
                            "insertionIndex": 0,
                        }
                    }
                )
                style: Dict[str, Any] = {"fontFamily": theme.font_family}
                fields = ["fontFamily"]
                if element.header is not None and row_idx == 0:
                    style["bold"] = True
                    fields.append("bold")
                requests.append(
                    {
                        "updateTextStyle": {
                            "objectId": object_id,
                            "cellLocation": location,
                            "textRange": {"type": "ALL"},
                            "style": style,
                            "fields": ",".join(fields),
                        }
                    }
                )
        return requests

    def _code_box(self, page_id, object_id, element: Code, box, theme) -> List[Request]:
        requests = [self._create_text_box(page_id, object_id, box)]
        if not element.content:
            return requests
        size = max(theme.font_size - 4, 8)
        requests.extend(_text_requests(object_id, element.content, (), font=CODE_FONT, size=size))
        start = 0
        for number, line in enumerate(element.lines, start=1):
            end = start + utf16_length(line)
            if number in element.highlighted_lines and end > start:
                requests.append(
                    _style_request(
                        object_id,
                        {"type": "FIXED_RANGE", "startIndex": start, "endIndex": end},
                        {"bold": True, "foregroundColor": {"opaqueColor": _rgb(theme.secondary_color)}},
                    )
                )
            start = end + 1
        return requests


# ----------------------------------------------------------------------
# Text helpers
# ----------------------------------------------------------------------

def _remote_only(url: str) -> Optional[str]:
    return url if url.startswith(("http://", "https://")) else None


def _style_request(object_id: str, text_range: Dict[str, Any], style: Dict[str, Any]) -> Request:
    return {
        "updateTextStyle": {
            "objectId": object_id,
            "textRange": text_range,
            "style": style,
            "fields": ",".join(style),
        }
    }


def _span_style(span: TextSpan) -> Dict[str, Any]:
    if span.style == "bold":
        return {"bold": True}
    if span.style == "italic":
        return {"italic": True}
    if span.style == "strikethrough":
        return {"strikethrough": True}
    if span.style == "code":
        return {"fontFamily": CODE_FONT}
    if span.style == "link" and span.href:
        return {"link": {"url": span.href}}
    return {}


def _text_requests(
    object_id: str,
    text: str,
    spans: Iterable[TextSpan],
    *,
    font: Optional[str] = None,
    size: Optional[int] = None,
    bold: bool = False,
    color: Optional[RGBColor] = None,
) -> List[Request]:
    """Insert ``text`` into ``object_id`` and apply base and span styles."""

    if not text:
        return []
    requests: List[Request] = [
        {"insertText": {"objectId": object_id, "text": text, "insertionIndex": 0}}
    ]

    base: Dict[str, Any] = {}
    if font:
        base["fontFamily"] = font
    if size:
        base["fontSize"] = _pt(size)
    if bold:
        base["bold"] = True
    if color is not None:
        base["foregroundColor"] = {"opaqueColor": _rgb(color)}
    if base:
        requests.append(_style_request(object_id, {"type": "ALL"}, base))

    for span in spans:
        style = _span_style(span)
        start = utf16_length(text[: span.start])
        end = utf16_length(text[: span.end])
        if not style or end <= start:
            continue
        requests.append(
            _style_request(
                object_id, {"type": "FIXED_RANGE", "startIndex": start, "endIndex": end}, style
            )
        )
    return requests


__all__ = [
    "GoogleSlidesRequestBuilder",
    "chunk_requests",
    "utf16_length",
    "PREDEFINED_LAYOUTS",
    "MAX_REQUESTS_PER_BATCH",
]
