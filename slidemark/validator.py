"""Invariant checks over an assembled :class:`Presentation`."""

from __future__ import annotations

import logging
from typing import List, Set

from .exceptions import (
    ContentViolation,
    DuplicateIdentifier,
    InvalidReference,
    LayoutContentMismatch,
    MalformedTable,
)
from .slide_models import Image, Presentation, Slide, SlideLayout, Table, Text

LOGGER = logging.getLogger(__name__)

MAX_TITLE_SLIDE_ELEMENTS = 2


class PresentationValidator:
    """Collect every invariant violation of a presentation.

    The validator never mutates or repairs the tree. Violations come back in
    document order: slide by slide, then element by element.
    """

    def __init__(self, *, strict_layout: bool = False) -> None:
        self.strict_layout = strict_layout

    def validate(self, presentation: Presentation) -> List[ContentViolation]:
        violations: List[ContentViolation] = []
        seen: Set[str] = set()
        for slide in presentation.slides:
            if slide.slide_id in seen:
                violations.append(
                    DuplicateIdentifier(
                        f"Slide identifier '{slide.slide_id}' is used more than once",
                        slide_id=slide.slide_id,
                    )
                )
            seen.add(slide.slide_id)
            violations.extend(self._check_elements(slide))
            if self.strict_layout:
                violations.extend(self._check_layout(slide))

        if violations:
            LOGGER.info("Validation found %d violation(s)", len(violations))
        return violations

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------
    @staticmethod
    def _check_elements(slide: Slide) -> List[ContentViolation]:
        found: List[ContentViolation] = []
        for idx, element in enumerate(slide.elements):
            if isinstance(element, Table) and not element.is_rectangular:
                widths = sorted({len(row) for row in element.all_rows()})
                found.append(
                    MalformedTable(
                        f"Table rows have differing widths {widths}",
                        slide_id=slide.slide_id,
                        element_index=idx,
                    )
                )
            elif isinstance(element, Image) and not (element.url or "").strip():
                found.append(
                    InvalidReference(
                        "Image has an empty url",
                        slide_id=slide.slide_id,
                        element_index=idx,
                    )
                )
        return found

    @staticmethod
    def _check_layout(slide: Slide) -> List[ContentViolation]:
        if slide.layout is not SlideLayout.TITLE:
            return []
        extra = [element for element in slide.elements if not isinstance(element, Text)]
        if len(slide.elements) > MAX_TITLE_SLIDE_ELEMENTS or extra:
            return [
                LayoutContentMismatch(
                    f"Title layout carries {len(slide.elements)} element(s) "
                    f"({', '.join(element.kind for element in slide.elements)})",
                    slide_id=slide.slide_id,
                )
            ]
        return []


def validate_presentation(
    presentation: Presentation, *, strict_layout: bool = False
) -> List[ContentViolation]:
    return PresentationValidator(strict_layout=strict_layout).validate(presentation)


__all__ = ["PresentationValidator", "validate_presentation"]
