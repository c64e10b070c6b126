"""Exception hierarchy shared by the parsing pipeline and the validator."""

from __future__ import annotations

from typing import List, Optional, Sequence


class SlidemarkError(Exception):
    """Base exception for all slidemark errors."""

    error_type = "general"

    def __init__(
        self,
        message: str,
        *,
        slide_id: Optional[str] = None,
        element_index: Optional[int] = None,
        line: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.slide_id = slide_id
        self.element_index = element_index
        self.line = line

    @property
    def location(self) -> str:
        parts: List[str] = []
        if self.slide_id is not None:
            parts.append(self.slide_id)
        if self.element_index is not None:
            parts.append(f"element {self.element_index}")
        if self.line is not None:
            parts.append(f"line {self.line}")
        return ", ".join(parts) or "document"

    def __str__(self) -> str:
        return f"[{self.location}] {self.error_type}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlidemarkError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.slide_id == other.slide_id
            and self.element_index == other.element_index
            and self.line == other.line
        )

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.slide_id, self.element_index, self.line))


class ParseSyntaxError(SlidemarkError):
    """The Markdown source could not be turned into a syntax tree."""

    error_type = "parse_syntax_error"


# ----------------------------------------------------------------------
# Content violations: collected and returned, raised only on request
# ----------------------------------------------------------------------

class ContentViolation(SlidemarkError):
    """A problem found in the content model after assembly."""

    error_type = "content_violation"


class UnrecognizedNodeKind(ContentViolation):
    """A syntax node has no slide element mapping (strict mode only)."""

    error_type = "unrecognized_node_kind"

    def __init__(self, node_kind: str, *, line: Optional[int] = None, slide_id: Optional[str] = None) -> None:
        position = f"line {line}" if line is not None else "unknown position"
        super().__init__(
            f"Unrecognized node kind '{node_kind}' at {position}",
            slide_id=slide_id,
            line=line,
        )
        self.node_kind = node_kind


class MalformedTable(ContentViolation):
    """Table rows do not all share the same column count."""

    error_type = "malformed_table"


class DuplicateIdentifier(ContentViolation):
    """Two slides share an identifier."""

    error_type = "duplicate_identifier"


class LayoutContentMismatch(ContentViolation):
    """A slide's declared layout disagrees with the elements it carries."""

    error_type = "layout_content_mismatch"


class InvalidReference(ContentViolation):
    """An element points at an unusable resource (e.g. an empty image url)."""

    error_type = "invalid_reference"


class ValidationFailed(SlidemarkError):
    """Raised on request when a parse produced one or more violations."""

    error_type = "validation_failed"

    def __init__(self, violations: Sequence[ContentViolation]) -> None:
        self.violations = list(violations)
        summary = "; ".join(str(item) for item in self.violations[:5])
        if len(self.violations) > 5:
            summary += f"; ... ({len(self.violations) - 5} more)"
        super().__init__(f"{len(self.violations)} violation(s): {summary}")
