"""Map syntax nodes inside a segment onto slide elements."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from markdown_it.tree import SyntaxTreeNode

from .exceptions import UnrecognizedNodeKind
from .markdown_ast import node_line
from .notes import is_comment_block
from .segmenter import Segment, heading_depth
from .slide_models import (
    BulletList,
    Code,
    Image,
    ListBlock,
    ListItem,
    NumberedList,
    SlideElement,
    SlideLayout,
    Table,
    Text,
    TextSpan,
)

LOGGER = logging.getLogger(__name__)

_STYLE_BY_NODE = {"strong": "bold", "em": "italic", "s": "strikethrough", "link": "link"}

_ATTRIBUTE_BLOCK_RE = re.compile(r"^\{([^{}]*)\}")
_SIZE_PAIR_RE = re.compile(r"^(width|height)[=:][\"']?(\d+)(?:px|pt)?[\"']?$", re.IGNORECASE)
_HIGHLIGHT_BLOCK_RE = re.compile(r"\{([^{}]*)\}")
_HIGHLIGHT_ITEM_RE = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?$")

MAX_HIGHLIGHT_SPAN = 10000


# ----------------------------------------------------------------------
# Annotation parsing helpers
# ----------------------------------------------------------------------

def parse_size_attributes(annotation: str) -> Tuple[Optional[int], Optional[int]]:
    """Parse ``width=300 height:200`` style pairs; unknown pairs are ignored."""

    width: Optional[int] = None
    height: Optional[int] = None
    normalised = re.sub(r"\s*([=:])\s*", r"\1", annotation.strip())
    for token in re.split(r"[\s,;]+", normalised):
        match = _SIZE_PAIR_RE.match(token)
        if match is None:
            continue
        value = int(match.group(2))
        if value <= 0:
            continue
        if match.group(1).lower() == "width":
            width = value
        else:
            height = value
    return width, height


def parse_highlight_lines(spec: str) -> FrozenSet[int]:
    """Parse ``2-3,5`` into ``{2, 3, 5}``; any malformed item voids the set."""

    lines = set()
    for item in spec.split(","):
        match = _HIGHLIGHT_ITEM_RE.match(item.strip())
        if match is None:
            return frozenset()
        start = int(match.group(1))
        end = int(match.group(2) or start)
        if start < 1 or end < start or end - start > MAX_HIGHLIGHT_SPAN:
            return frozenset()
        lines.update(range(start, end + 1))
    return frozenset(lines)


def parse_fence_info(info: str) -> Tuple[Optional[str], FrozenSet[int]]:
    """Split a fence info string into language tag and highlighted lines."""

    info = (info or "").strip()
    highlighted: FrozenSet[int] = frozenset()
    match = _HIGHLIGHT_BLOCK_RE.search(info)
    if match is not None:
        highlighted = parse_highlight_lines(match.group(1))
        info = (info[: match.start()] + " " + info[match.end():]).strip()
    language = info.split()[0] if info else None
    return language, highlighted


# ----------------------------------------------------------------------
# Inline flattening
# ----------------------------------------------------------------------

class _InlineText:
    """Accumulate plain text plus style spans from inline nodes."""

    def __init__(self) -> None:
        self.parts: List[str] = []
        self.offset = 0
        self.spans: List[TextSpan] = []

    def append(self, text: str) -> None:
        self.parts.append(text)
        self.offset += len(text)

    def extend(self, text: str, spans: Iterable[TextSpan]) -> None:
        base = self.offset
        self.append(text)
        for span in spans:
            self.spans.append(TextSpan(span.start + base, span.end + base, span.style, span.href))

    def walk(self, nodes: Sequence[SyntaxTreeNode]) -> "_InlineText":
        after_image = False
        for node in nodes:
            kind = node.type
            if kind == "text":
                content = node.content
                if after_image:
                    content = _ATTRIBUTE_BLOCK_RE.sub("", content, count=1)
                self.append(content)
            elif kind == "softbreak":
                self.append(" ")
            elif kind == "hardbreak":
                self.append("\n")
            elif kind == "code_inline":
                start = self.offset
                self.append(node.content)
                self._close_span(start, "code")
            elif kind == "image":
                LOGGER.info("Image %r inside inline markup kept as its alt text", node.attrs.get("src"))
                self.append(node.content)
            elif kind in _STYLE_BY_NODE:
                start = self.offset
                self.walk(node.children)
                href = node.attrs.get("href") if kind == "link" else None
                self._close_span(start, _STYLE_BY_NODE[kind], href)
            elif kind == "html_inline":
                continue
            elif node.children:
                self.walk(node.children)
            else:
                self.append(node.content or "")
            after_image = kind == "image"
        return self

    def _close_span(self, start: int, style: str, href: Optional[str] = None) -> None:
        if self.offset > start:
            self.spans.append(TextSpan(start, self.offset, style, None if href is None else str(href)))

    def result(self) -> Tuple[str, Tuple[TextSpan, ...]]:
        spans = sorted(self.spans, key=lambda span: (span.start, -span.end))
        return "".join(self.parts), tuple(spans)


def flatten_inline(node: Optional[SyntaxTreeNode]) -> Tuple[str, Tuple[TextSpan, ...]]:
    """Flatten a block node's inline content to ``(text, spans)``."""

    if node is None:
        return "", ()
    if node.type == "inline":
        return _InlineText().walk(node.children).result()
    builder = _InlineText()
    for child in node.children:
        if child.type == "inline":
            builder.walk(child.children)
    return builder.result()


def plain_text(node: SyntaxTreeNode) -> str:
    """Best-effort plain text of any block node."""

    if node.type in ("fence", "code_block", "html_block"):
        return node.content.rstrip("\n")
    if node.type == "inline":
        return flatten_inline(node)[0]
    pieces = [plain_text(child) for child in node.children]
    return "\n".join(piece for piece in pieces if piece)


def _join_blocks(blocks: Sequence[Tuple[str, Tuple[TextSpan, ...]]]) -> Tuple[str, Tuple[TextSpan, ...]]:
    builder = _InlineText()
    for idx, (text, spans) in enumerate(blocks):
        if idx:
            builder.append("\n")
        builder.extend(text, spans)
    return builder.result()


def _flush_text(builder: _InlineText, elements: List[SlideElement]) -> None:
    """Append the builder's text, trimmed, unless it is blank."""

    raw, spans = builder.result()
    text = raw.strip()
    if not text:
        return
    lead = len(raw) - len(raw.lstrip())
    clipped = []
    for span in spans:
        start = min(max(span.start - lead, 0), len(text))
        end = min(max(span.end - lead, 0), len(text))
        if end > start:
            clipped.append(TextSpan(start, end, span.style, span.href))
    elements.append(Text(text=text, spans=tuple(clipped)))


# ----------------------------------------------------------------------
# Layout choice
# ----------------------------------------------------------------------

def classify_layout(
    title: Optional[str],
    subtitle: Optional[str],
    elements: Sequence[SlideElement],
    *,
    is_first: bool,
) -> SlideLayout:
    """Pick the layout consistent with a slide's detected content."""

    if not elements:
        if title is None and subtitle is None:
            return SlideLayout.BLANK
        return SlideLayout.TITLE if is_first else SlideLayout.SECTION_HEADER
    if len(elements) == 2:
        has_image = any(isinstance(element, Image) for element in elements)
        all_lists = all(isinstance(element, (BulletList, NumberedList)) for element in elements)
        if has_image or all_lists:
            return SlideLayout.TWO_COLUMN
    return SlideLayout.TITLE_AND_BODY


# ----------------------------------------------------------------------
# Transformer
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class TransformedSlide:
    """Visible content derived from one segment."""

    title: Optional[str]
    subtitle: Optional[str]
    elements: Tuple[SlideElement, ...]
    layout: SlideLayout
    issues: Tuple[UnrecognizedNodeKind, ...] = field(default=())


class NodeTransformer:
    """Convert syntax nodes to slide elements.

    Unsupported content degrades to text or is dropped with a log record.
    With ``strict=True`` such content raises :class:`UnrecognizedNodeKind`
    from :meth:`transform_node`; :meth:`transform_segment` collects those
    errors in ``issues`` so every problem is reported in one pass.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def transform_segment(
        self,
        segment: Segment,
        nodes: Optional[Sequence[SyntaxTreeNode]] = None,
        *,
        is_first: bool = False,
        slide_id: Optional[str] = None,
    ) -> TransformedSlide:
        """Transform ``nodes`` (defaults to the segment's own nodes)."""

        nodes = list(segment.nodes if nodes is None else nodes)
        title = self._heading_text(segment.title) if segment.title is not None else None

        subtitle = None
        visible = [node for node in nodes if node.type != "hr" and not is_comment_block(node)]
        if title is not None and len(visible) == 1:
            candidate = visible[0]
            if (heading_depth(candidate) or 0) > (heading_depth(segment.title) or 0):
                subtitle = self._heading_text(candidate)
                nodes.remove(candidate)

        elements: List[SlideElement] = []
        issues: List[UnrecognizedNodeKind] = []
        for node in nodes:
            try:
                elements.extend(self.transform_node(node))
            except UnrecognizedNodeKind as exc:
                exc.slide_id = slide_id
                issues.append(exc)

        layout = classify_layout(title, subtitle, elements, is_first=is_first)
        return TransformedSlide(
            title=title,
            subtitle=subtitle,
            elements=tuple(elements),
            layout=layout,
            issues=tuple(issues),
        )

    def transform_node(self, node: SyntaxTreeNode) -> List[SlideElement]:
        """Return the element(s) for ``node``; an empty list means dropped."""

        kind = node.type
        if kind == "paragraph":
            return self._paragraph(node)
        if kind == "heading":
            text, spans = flatten_inline(node)
            return [Text(text=text, spans=spans, heading_level=heading_depth(node))]
        if kind in ("bullet_list", "ordered_list"):
            return [self._list(node)]
        if kind == "table":
            return [self._table(node)]
        if kind == "fence":
            language, highlighted = parse_fence_info(node.info)
            return [
                Code(
                    content=node.content.rstrip("\n"),
                    language=language,
                    highlighted_lines=highlighted,
                )
            ]
        if kind == "code_block":
            return [Code(content=node.content.rstrip("\n"))]
        if kind == "hr":
            return []
        if kind == "html_block" and is_comment_block(node):
            LOGGER.debug("Dropping empty comment at line %s", node_line(node))
            return []

        if self.strict:
            raise UnrecognizedNodeKind(kind, line=node_line(node))
        if kind == "blockquote":
            LOGGER.info("Block quote at line %s rendered as plain text", node_line(node))
            return [Text(text=plain_text(node))]
        LOGGER.warning("Dropping unsupported '%s' node at line %s", kind, node_line(node))
        return []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _heading_text(node: SyntaxTreeNode) -> Optional[str]:
        text, _ = flatten_inline(node)
        text = text.strip()
        return text or None

    @staticmethod
    def _paragraph(node: SyntaxTreeNode) -> List[SlideElement]:
        """Split a paragraph at its top-level images, keeping document order.

        A ``{width=.. height=..}`` block directly after an image sizes that
        image. Whitespace-only text between images is dropped.
        """

        inline = next((child for child in node.children if child.type == "inline"), None)
        if inline is None or not any(child.type == "image" for child in inline.children):
            text, spans = flatten_inline(node)
            return [Text(text=text, spans=spans)]

        elements: List[SlideElement] = []
        builder = _InlineText()
        annotatable = False
        for child in inline.children:
            if child.type == "image":
                _flush_text(builder, elements)
                builder = _InlineText()
                elements.append(
                    Image(url=str(child.attrs.get("src", "")), alt=child.content or None)
                )
                annotatable = True
                continue
            if annotatable and child.type == "text":
                match = _ATTRIBUTE_BLOCK_RE.match(child.content)
                if match is not None:
                    width, height = parse_size_attributes(match.group(1))
                    last = elements[-1]
                    elements[-1] = Image(url=last.url, alt=last.alt, width=width, height=height)
                    builder.append(child.content[match.end():])
                    annotatable = False
                    continue
            annotatable = False
            builder.walk([child])
        _flush_text(builder, elements)
        return elements

    def _list(self, node: SyntaxTreeNode) -> ListBlock:
        items = tuple(
            self._list_item(child) for child in node.children if child.type == "list_item"
        )
        if node.type == "ordered_list":
            try:
                start = int(node.attrs.get("start", 1))
            except (TypeError, ValueError):
                start = 1
            return NumberedList(items=items, start=start)
        return BulletList(items=items)

    def _list_item(self, node: SyntaxTreeNode) -> ListItem:
        blocks: List[Tuple[str, Tuple[TextSpan, ...]]] = []
        children: List[ListBlock] = []
        for child in node.children:
            if child.type in ("bullet_list", "ordered_list"):
                children.append(self._list(child))
            elif child.type in ("paragraph", "heading"):
                blocks.append(flatten_inline(child))
            elif child.type == "html_block" and is_comment_block(child):
                continue
            else:
                text = plain_text(child)
                if text:
                    blocks.append((text, ()))
        text, spans = _join_blocks(blocks)
        return ListItem(text=text, spans=spans, children=tuple(children))

    @staticmethod
    def _table(node: SyntaxTreeNode) -> Table:
        header: Optional[Tuple[str, ...]] = None
        rows: List[Tuple[str, ...]] = []
        for section in node.children:
            for row in section.children:
                cells = tuple(flatten_inline(cell)[0].strip() for cell in row.children)
                if section.type == "thead" and header is None:
                    header = cells
                else:
                    rows.append(cells)

        width = max((len(row) for row in ([header] if header else []) + rows), default=0)
        if header is not None and len(header) < width:
            header = header + ("",) * (width - len(header))
        padded = tuple(row + ("",) * (width - len(row)) for row in rows)
        return Table(rows=padded, header=header)


__all__ = [
    "NodeTransformer",
    "TransformedSlide",
    "classify_layout",
    "flatten_inline",
    "parse_fence_info",
    "parse_highlight_lines",
    "parse_size_attributes",
    "plain_text",
]
