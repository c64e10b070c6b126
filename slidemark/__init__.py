"""Markdown to platform-neutral slide content model."""

from .config import ParserConfig, load_config
from .exceptions import (
    ContentViolation,
    DuplicateIdentifier,
    InvalidReference,
    LayoutContentMismatch,
    MalformedTable,
    ParseSyntaxError,
    SlidemarkError,
    UnrecognizedNodeKind,
    ValidationFailed,
)
from .markdown_ast import MarkdownAstBuilder, MarkdownDocument, build_ast
from .notes import NotesExtractor, extract_notes, parse_notes_comment
from .pipeline import MarkdownSlideParser, ParseResult, parse_markdown
from .segmenter import Segment, SegmentationConfig, SlideSegmenter, segment_nodes
from .slide_models import (
    WEB_SAFE_FONTS,
    Background,
    BulletList,
    Code,
    Image,
    ListItem,
    NumberedList,
    Presentation,
    RGBColor,
    Slide,
    SlideLayout,
    Table,
    Text,
    TextSpan,
    ThemeConfig,
    element_from_dict,
)
from .transformer import NodeTransformer, TransformedSlide, classify_layout
from .validator import PresentationValidator, validate_presentation

__all__ = [
    "ParserConfig",
    "load_config",
    "SlidemarkError",
    "ParseSyntaxError",
    "ContentViolation",
    "UnrecognizedNodeKind",
    "MalformedTable",
    "DuplicateIdentifier",
    "LayoutContentMismatch",
    "InvalidReference",
    "ValidationFailed",
    "MarkdownAstBuilder",
    "MarkdownDocument",
    "build_ast",
    "NotesExtractor",
    "extract_notes",
    "parse_notes_comment",
    "MarkdownSlideParser",
    "ParseResult",
    "parse_markdown",
    "Segment",
    "SegmentationConfig",
    "SlideSegmenter",
    "segment_nodes",
    "WEB_SAFE_FONTS",
    "Background",
    "BulletList",
    "Code",
    "Image",
    "ListItem",
    "NumberedList",
    "Presentation",
    "RGBColor",
    "Slide",
    "SlideLayout",
    "Table",
    "Text",
    "TextSpan",
    "ThemeConfig",
    "element_from_dict",
    "NodeTransformer",
    "TransformedSlide",
    "classify_layout",
    "PresentationValidator",
    "validate_presentation",
]
