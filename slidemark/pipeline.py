"""End-to-end Markdown to content-model pipeline.

text -> syntax tree -> segments -> (notes + elements per segment) -> IR -> validation
"""

from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .config import ParserConfig
from .exceptions import ContentViolation, ValidationFailed
from .markdown_ast import MarkdownAstBuilder
from .notes import NotesExtractor
from .segmenter import SlideSegmenter
from .slide_models import Presentation, Slide, ThemeConfig
from .transformer import NodeTransformer
from .validator import PresentationValidator

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of a parse.

    ``presentation`` is always set for non-strict parses. Strict parses set
    it only when ``violations`` is empty.
    """

    presentation: Optional[Presentation]
    violations: Tuple[ContentViolation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> Presentation:
        """Return the presentation, or raise :class:`ValidationFailed`."""

        if self.violations or self.presentation is None:
            raise ValidationFailed(self.violations)
        return self.presentation


class MarkdownSlideParser:
    """Parse Markdown into a validated :class:`Presentation`.

    The parser keeps no per-call state, so one instance can be shared by
    concurrent callers.
    """

    def __init__(self, config: Optional[ParserConfig] = None) -> None:
        self.config = config or ParserConfig()
        self.ast_builder = MarkdownAstBuilder(front_matter=self.config.front_matter)
        self.segmenter = SlideSegmenter(self.config.segmentation)
        self.notes_extractor = NotesExtractor()
        self.transformer = NodeTransformer(strict=self.config.strict)
        self.validator = PresentationValidator(strict_layout=self.config.strict_layout)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def parse(self, text: str) -> ParseResult:
        document = self.ast_builder.build(text)
        segments = self.segmenter.segment(document.nodes)

        slides: List[Slide] = []
        violations: List[ContentViolation] = []
        for segment in segments:
            slide_id = f"slide_{segment.index + 1:02d}"
            notes = self.notes_extractor.extract(segment.nodes, segment.title)
            content = self.transformer.transform_segment(
                segment,
                notes.nodes,
                is_first=segment.index == 0,
                slide_id=slide_id,
            )
            violations.extend(content.issues)
            slides.append(
                Slide(
                    slide_id=slide_id,
                    layout=content.layout,
                    title=content.title,
                    subtitle=content.subtitle,
                    elements=content.elements,
                    notes=notes.notes,
                )
            )

        metadata = document.front_matter
        presentation = Presentation(
            title=self._resolve_title(metadata, slides),
            slides=tuple(slides),
            author=_optional_str(metadata.get("author")),
            date=_optional_str(metadata.get("date")),
            theme=self._resolve_theme(metadata),
        )
        violations.extend(self.validator.validate(presentation))
        LOGGER.debug(
            "Parsed %d slide(s) with %d violation(s)", len(slides), len(violations)
        )

        if self.config.strict and violations:
            return ParseResult(presentation=None, violations=tuple(violations))
        return ParseResult(presentation=presentation, violations=tuple(violations))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve_title(self, metadata: Dict[str, Any], slides: List[Slide]) -> str:
        title = _optional_str(metadata.get("title"))
        if title:
            return title
        first_titled = next((slide.title for slide in slides if slide.title), None)
        return first_titled or self.config.default_title

    def _resolve_theme(self, metadata: Dict[str, Any]) -> Optional[ThemeConfig]:
        raw = metadata.get("theme")
        if raw is None:
            return self.config.theme
        if not isinstance(raw, dict):
            LOGGER.warning("Ignoring front matter theme %r: expected a mapping", raw)
            return self.config.theme
        try:
            return ThemeConfig.from_dict(raw)
        except (TypeError, ValueError) as exc:
            LOGGER.warning("Ignoring invalid front matter theme: %s", exc)
            return self.config.theme


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def parse_markdown(text: str, config: Optional[ParserConfig] = None) -> ParseResult:
    """Parse ``text`` with a fresh :class:`MarkdownSlideParser`."""

    return MarkdownSlideParser(config).parse(text)


__all__ = ["MarkdownSlideParser", "ParseResult", "parse_markdown"]
