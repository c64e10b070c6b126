"""Speaker-notes extraction from HTML comments."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from markdown_it.tree import SyntaxTreeNode

LOGGER = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"<!--(.*?)-->", re.DOTALL)
_NOTES_MARKER_RE = re.compile(r"^\s*notes:", re.IGNORECASE)


def comment_bodies(raw: str) -> Optional[List[str]]:
    """Return the comment bodies of ``raw`` if it is made only of comments."""

    bodies = _COMMENT_RE.findall(raw)
    if not bodies or _COMMENT_RE.sub("", raw).strip():
        return None
    return bodies


def parse_notes_comment(raw: str) -> Optional[str]:
    """Return the notes text carried by a raw HTML comment block, if any.

    ``<!-- notes: text -->`` yields ``text``; a bare ``<!-- text -->`` yields
    the whole body. A block holding several comments yields their texts
    joined by newlines. Empty bare comments carry no notes.
    """

    bodies = comment_bodies(raw)
    if bodies is None:
        return None

    parts: List[str] = []
    matched = False
    for body in bodies:
        marker = _NOTES_MARKER_RE.match(body)
        if marker is not None:
            matched = True
            text = body[marker.end():].strip()
        else:
            text = body.strip()
            if not text:
                continue
            matched = True
        if text:
            parts.append(text)
    if not matched:
        return None
    return "\n".join(parts)


def is_comment_block(node: SyntaxTreeNode) -> bool:
    return node.type == "html_block" and comment_bodies(node.content) is not None


def inline_notes(node: SyntaxTreeNode) -> List[str]:
    """Notes carried by comments embedded in a block's inline content."""

    found: List[str] = []
    for child in node.walk():
        if child.type != "html_inline":
            continue
        text = parse_notes_comment(child.content)
        if text is not None:
            found.append(text)
    return found


@dataclass(frozen=True)
class NotesResult:
    notes: Optional[str]
    nodes: Tuple[SyntaxTreeNode, ...]


class NotesExtractor:
    """Pull notes comments out of a segment's node range.

    Comment blocks are removed from the range. Comments inside running text
    are read but left in place; the transformer skips inline HTML.

    Extraction is pure: the input sequence is never modified, so running it
    twice over the same segment gives the same notes and residual nodes.
    """

    def extract(
        self, nodes: Sequence[SyntaxTreeNode], title: Optional[SyntaxTreeNode] = None
    ) -> NotesResult:
        """Notes of ``nodes``; comments inside ``title`` come first."""

        found: List[str] = inline_notes(title) if title is not None else []
        residual: List[SyntaxTreeNode] = []
        for node in nodes:
            if node.type == "html_block":
                text = parse_notes_comment(node.content)
                if text is not None:
                    found.append(text)
                    continue
            else:
                found.extend(inline_notes(node))
            residual.append(node)

        if not found:
            return NotesResult(notes=None, nodes=tuple(residual))

        notes = "\n".join(part for part in found if part)
        LOGGER.debug("Extracted %d notes comment(s)", len(found))
        return NotesResult(notes=notes, nodes=tuple(residual))


def extract_notes(
    nodes: Sequence[SyntaxTreeNode], title: Optional[SyntaxTreeNode] = None
) -> NotesResult:
    return NotesExtractor().extract(nodes, title)


__all__ = [
    "NotesExtractor",
    "NotesResult",
    "extract_notes",
    "inline_notes",
    "parse_notes_comment",
    "comment_bodies",
    "is_comment_block",
]
