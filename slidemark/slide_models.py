"""Data models representing the platform-neutral presentation content.

Every type here is a frozen value object. Generators receive a
:class:`Presentation` and may read it from any number of threads; edits are
expressed by building a new value (see :meth:`Presentation.replace_slide`).
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union


class SlideLayout(str, Enum):
    """Fixed set of slide layouts understood by every generator."""

    TITLE = "title"
    TITLE_AND_BODY = "title-and-body"
    TWO_COLUMN = "two-column"
    BLANK = "blank"
    SECTION_HEADER = "section-header"


SPAN_STYLES = frozenset({"bold", "italic", "code", "strikethrough", "link"})

WEB_SAFE_FONTS: Tuple[str, ...] = (
    "Arial",
    "Courier New",
    "Georgia",
    "Helvetica",
    "Tahoma",
    "Times New Roman",
    "Trebuchet MS",
    "Verdana",
)

MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 96

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


# ----------------------------------------------------------------------
# Theme
# ----------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RGBColor:
    """An explicit RGB triple; never a platform theme-color token."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255:
                raise ValueError(f"RGB channel out of range: {channel!r}")

    @classmethod
    def from_hex(cls, value: str) -> "RGBColor":
        match = _HEX_COLOR_RE.match(str(value).strip())
        if match is None:
            raise ValueError(f"Invalid hex color: {value!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @classmethod
    def coerce(cls, value: Union["RGBColor", str, Iterable[int]]) -> "RGBColor":
        if isinstance(value, RGBColor):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        red, green, blue = value
        return cls(red, green, blue)

    @property
    def hex(self) -> str:
        return f"#{self.red:02X}{self.green:02X}{self.blue:02X}"

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)


@dataclass(frozen=True, slots=True)
class ThemeConfig:
    """Explicit theme options; every field has one documented effect."""

    primary_color: RGBColor = RGBColor(44, 62, 80)
    secondary_color: RGBColor = RGBColor(52, 152, 219)
    font_family: str = "Arial"
    font_size: int = 18

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary_color", RGBColor.coerce(self.primary_color))
        object.__setattr__(self, "secondary_color", RGBColor.coerce(self.secondary_color))

        canonical = {font.lower(): font for font in WEB_SAFE_FONTS}
        font = canonical.get(str(self.font_family).strip().lower())
        if font is None:
            raise ValueError(
                f"Font family {self.font_family!r} is not web-safe; "
                f"choose one of {', '.join(WEB_SAFE_FONTS)}"
            )
        object.__setattr__(self, "font_family", font)

        if isinstance(self.font_size, bool) or not isinstance(self.font_size, int):
            raise ValueError(f"Font size must be an integer, got {self.font_size!r}")
        if not MIN_FONT_SIZE <= self.font_size <= MAX_FONT_SIZE:
            raise ValueError(
                f"Font size {self.font_size} outside {MIN_FONT_SIZE}..{MAX_FONT_SIZE} pt"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primaryColor": self.primary_color.hex,
            "secondaryColor": self.secondary_color.hex,
            "fontFamily": self.font_family,
            "fontSize": self.font_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThemeConfig":
        """Accept both the camelCase interchange keys and snake_case keys."""

        defaults = cls()

        def pick(camel: str, snake: str, default: Any) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        return cls(
            primary_color=pick("primaryColor", "primary_color", defaults.primary_color),
            secondary_color=pick("secondaryColor", "secondary_color", defaults.secondary_color),
            font_family=pick("fontFamily", "font_family", defaults.font_family),
            font_size=pick("fontSize", "font_size", defaults.font_size),
        )


@dataclass(frozen=True, slots=True)
class Background:
    """Slide background: a solid color, an image, or both (image on top)."""

    color: Optional[RGBColor] = None
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.color is not None:
            object.__setattr__(self, "color", RGBColor.coerce(self.color))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.color is not None:
            payload["color"] = self.color.hex
        if self.image_url is not None:
            payload["imageUrl"] = self.image_url
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Background":
        return cls(color=data.get("color"), image_url=data.get("imageUrl"))


# ----------------------------------------------------------------------
# Slide elements (closed set; see ELEMENT_TYPES)
# ----------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TextSpan:
    """Inline style applied to ``text[start:end]`` of the owning element."""

    start: int
    end: int
    style: str
    href: Optional[str] = None

    def __post_init__(self) -> None:
        if self.style not in SPAN_STYLES:
            raise ValueError(f"Unknown span style: {self.style!r}")
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span range: {self.start}..{self.end}")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"start": self.start, "end": self.end, "style": self.style}
        if self.href is not None:
            payload["href"] = self.href
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextSpan":
        return cls(
            start=int(data.get("start", 0)),
            end=int(data.get("end", 0)),
            style=data.get("style", ""),
            href=data.get("href"),
        )


def _spans_from(data: Dict[str, Any]) -> Tuple[TextSpan, ...]:
    return tuple(TextSpan.from_dict(item) for item in data.get("spans", []))


@dataclass(frozen=True, slots=True)
class Text:
    """A paragraph, or a sub-heading when ``heading_level`` is set."""

    kind: ClassVar[str] = "text"

    text: str
    spans: Tuple[TextSpan, ...] = ()
    heading_level: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "spans", tuple(self.spans))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.kind,
            "text": self.text,
            "spans": [span.to_dict() for span in self.spans],
        }
        if self.heading_level is not None:
            payload["headingLevel"] = self.heading_level
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Text":
        return cls(
            text=data.get("text", ""),
            spans=_spans_from(data),
            heading_level=data.get("headingLevel"),
        )


@dataclass(frozen=True, slots=True)
class ListItem:
    """One list entry; nested lists live in ``children``."""

    text: str
    spans: Tuple[TextSpan, ...] = ()
    children: Tuple["ListBlock", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "spans", tuple(self.spans))
        object.__setattr__(self, "children", tuple(self.children))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "spans": [span.to_dict() for span in self.spans],
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ListItem":
        children = []
        for child in data.get("children", []):
            element = element_from_dict(child)
            if not isinstance(element, (BulletList, NumberedList)):
                raise ValueError(f"List items may only nest lists, got {element.kind!r}")
            children.append(element)
        return cls(text=data.get("text", ""), spans=_spans_from(data), children=tuple(children))


def _coerce_items(items: Iterable[Union[ListItem, str]]) -> Tuple[ListItem, ...]:
    return tuple(item if isinstance(item, ListItem) else ListItem(str(item)) for item in items)


@dataclass(frozen=True, slots=True)
class BulletList:
    kind: ClassVar[str] = "bulletList"

    items: Tuple[ListItem, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _coerce_items(self.items))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "items": [item.to_dict() for item in self.items]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BulletList":
        return cls(items=tuple(ListItem.from_dict(item) for item in data.get("items", [])))


@dataclass(frozen=True, slots=True)
class NumberedList:
    kind: ClassVar[str] = "numberedList"

    items: Tuple[ListItem, ...] = ()
    start: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _coerce_items(self.items))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "start": self.start,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NumberedList":
        return cls(
            items=tuple(ListItem.from_dict(item) for item in data.get("items", [])),
            start=int(data.get("start", 1)),
        )


@dataclass(frozen=True, slots=True)
class Image:
    """Image reference; sizes are device-independent points."""

    kind: ClassVar[str] = "image"

    url: str
    alt: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "url": self.url,
            "alt": self.alt,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Image":
        return cls(
            url=data.get("url", ""),
            alt=data.get("alt"),
            width=data.get("width"),
            height=data.get("height"),
        )


@dataclass(frozen=True, slots=True)
class Table:
    """Cell text by row. ``header`` is the optional header row."""

    kind: ClassVar[str] = "table"

    rows: Tuple[Tuple[str, ...], ...] = ()
    header: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))
        if self.header is not None:
            object.__setattr__(self, "header", tuple(self.header))

    def all_rows(self) -> List[Tuple[str, ...]]:
        rows = list(self.rows)
        if self.header is not None:
            rows.insert(0, self.header)
        return rows

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.all_rows()), default=0)

    @property
    def is_rectangular(self) -> bool:
        return len({len(row) for row in self.all_rows()}) <= 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "header": list(self.header) if self.header is not None else None,
            "rows": [list(row) for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        header = data.get("header")
        return cls(
            rows=tuple(tuple(str(cell) for cell in row) for row in data.get("rows", [])),
            header=tuple(str(cell) for cell in header) if header is not None else None,
        )


@dataclass(frozen=True, slots=True)
class Code:
    """Fenced code; ``highlighted_lines`` are 1-based."""

    kind: ClassVar[str] = "code"

    content: str
    language: Optional[str] = None
    highlighted_lines: FrozenSet[int] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "highlighted_lines", frozenset(self.highlighted_lines))

    @property
    def lines(self) -> List[str]:
        return self.content.split("\n")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "content": self.content,
            "language": self.language,
            "highlightedLines": sorted(self.highlighted_lines),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Code":
        return cls(
            content=data.get("content", ""),
            language=data.get("language"),
            highlighted_lines=frozenset(int(line) for line in data.get("highlightedLines", [])),
        )


ListBlock = Union[BulletList, NumberedList]
SlideElement = Union[Text, BulletList, NumberedList, Image, Table, Code]

ELEMENT_TYPES: Dict[str, type] = {
    cls.kind: cls for cls in (Text, BulletList, NumberedList, Image, Table, Code)
}


def element_from_dict(data: Dict[str, Any]) -> SlideElement:
    """Rebuild a slide element from its tagged dictionary form."""

    kind = data.get("type")
    element_cls = ELEMENT_TYPES.get(kind)
    if element_cls is None:
        raise ValueError(f"Unknown slide element type: {kind!r}")
    return element_cls.from_dict(data)


# ----------------------------------------------------------------------
# Slides and presentation
# ----------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Slide:
    """A single slide within a presentation."""

    slide_id: str
    layout: SlideLayout = SlideLayout.TITLE_AND_BODY
    title: Optional[str] = None
    subtitle: Optional[str] = None
    elements: Tuple[SlideElement, ...] = ()
    notes: Optional[str] = None
    background: Optional[Background] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "layout", SlideLayout(self.layout))
        object.__setattr__(self, "elements", tuple(self.elements))

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.subtitle or self.elements or self.notes)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.slide_id,
            "layout": self.layout.value,
            "title": self.title,
            "subtitle": self.subtitle,
            "notes": self.notes,
            "background": self.background.to_dict() if self.background else None,
            "elements": [element.to_dict() for element in self.elements],
        }
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slide":
        background = data.get("background")
        return cls(
            slide_id=data.get("id", ""),
            layout=SlideLayout(data.get("layout", SlideLayout.TITLE_AND_BODY.value)),
            title=data.get("title"),
            subtitle=data.get("subtitle"),
            elements=tuple(element_from_dict(item) for item in data.get("elements", [])),
            notes=data.get("notes"),
            background=Background.from_dict(background) if background else None,
        )


@dataclass(frozen=True, slots=True)
class Presentation:
    """Root of the content model."""

    title: str
    slides: Tuple[Slide, ...] = ()
    author: Optional[str] = None
    date: Optional[str] = None
    theme: Optional[ThemeConfig] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "slides", tuple(self.slides))

    @property
    def slide_ids(self) -> List[str]:
        return [slide.slide_id for slide in self.slides]

    def get_slide(self, slide_id: str) -> Optional[Slide]:
        return next((slide for slide in self.slides if slide.slide_id == slide_id), None)

    def replace_slide(self, slide: Slide) -> "Presentation":
        """Return a new presentation with the slide of the same id swapped in."""

        for idx, existing in enumerate(self.slides):
            if existing.slide_id == slide.slide_id:
                slides = self.slides[:idx] + (slide,) + self.slides[idx + 1:]
                return replace(self, slides=slides)
        raise KeyError(f"Slide '{slide.slide_id}' not found in presentation")

    def without_empty_slides(self) -> "Presentation":
        """Drop slides with no visible content or notes; identifiers are kept."""

        return replace(self, slides=tuple(slide for slide in self.slides if not slide.is_empty))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "metadata": {"title": self.title, "author": self.author, "date": self.date},
            "slides": [slide.to_dict() for slide in self.slides],
        }
        if self.theme is not None:
            payload["theme"] = self.theme.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Presentation":
        metadata = dict(data.get("metadata", {}))
        theme = data.get("theme")
        return cls(
            title=metadata.get("title") or "",
            author=metadata.get("author"),
            date=metadata.get("date"),
            theme=ThemeConfig.from_dict(theme) if theme else None,
            slides=tuple(Slide.from_dict(item) for item in data.get("slides", [])),
        )

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_json(cls, payload: str) -> "Presentation":
        return cls.from_dict(json.loads(payload))


__all__ = [
    "SlideLayout",
    "SPAN_STYLES",
    "WEB_SAFE_FONTS",
    "RGBColor",
    "ThemeConfig",
    "Background",
    "TextSpan",
    "Text",
    "ListItem",
    "BulletList",
    "NumberedList",
    "Image",
    "Table",
    "Code",
    "ListBlock",
    "SlideElement",
    "ELEMENT_TYPES",
    "element_from_dict",
    "Slide",
    "Presentation",
]
