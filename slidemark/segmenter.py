"""Partition top-level syntax nodes into per-slide segments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from markdown_it.tree import SyntaxTreeNode

from .markdown_ast import node_line

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentationConfig:
    """Which delimiters start a new slide."""

    thematic_break_splits: bool = True
    heading_depth_splits: Optional[int] = None

    def __post_init__(self) -> None:
        if self.heading_depth_splits not in (None, 1, 2):
            raise ValueError(
                f"heading_depth_splits must be 1, 2 or None, got {self.heading_depth_splits!r}"
            )


@dataclass(frozen=True)
class Segment:
    """A contiguous run of nodes destined to become exactly one slide."""

    index: int
    title: Optional[SyntaxTreeNode]
    nodes: Tuple[SyntaxTreeNode, ...]
    line: Optional[int] = None

    def as_pair(self) -> Tuple[Optional[SyntaxTreeNode], Tuple[SyntaxTreeNode, ...]]:
        return self.title, self.nodes


def heading_depth(node: SyntaxTreeNode) -> Optional[int]:
    if node.type != "heading":
        return None
    try:
        return int(node.tag[1:])
    except (TypeError, ValueError):
        return None


class SlideSegmenter:
    """Split a node sequence on thematic breaks and/or headings.

    Segmentation is total: any node sequence (including an empty one) yields
    at least one segment, and a segment is never dropped for being empty.
    """

    def __init__(self, config: Optional[SegmentationConfig] = None) -> None:
        self.config = config or SegmentationConfig()

    def segment(self, nodes: Sequence[SyntaxTreeNode]) -> List[Segment]:
        segments: List[Segment] = []
        title: Optional[SyntaxTreeNode] = None
        body: List[SyntaxTreeNode] = []
        # True while the current segment was opened by a break and is still empty.
        just_broke = False

        for position, node in enumerate(nodes):
            if node.type == "hr" and self.config.thematic_break_splits:
                segments.append(self._close(len(segments), title, body))
                title, body = None, []
                just_broke = True
                continue

            if self._is_split_heading(node):
                if position > 0 and not just_broke:
                    segments.append(self._close(len(segments), title, body))
                    body = []
                title = node
                just_broke = False
                continue

            body.append(node)
            just_broke = False

        segments.append(self._close(len(segments), title, body))
        LOGGER.debug("Segmented %d nodes into %d segments", len(nodes), len(segments))
        return segments

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _is_split_heading(self, node: SyntaxTreeNode) -> bool:
        depth = self.config.heading_depth_splits
        return depth is not None and heading_depth(node) == depth

    @staticmethod
    def _close(
        index: int, title: Optional[SyntaxTreeNode], body: List[SyntaxTreeNode]
    ) -> Segment:
        nodes = list(body)
        if title is None and nodes and nodes[0].type == "heading":
            title = nodes.pop(0)
        first = title if title is not None else (nodes[0] if nodes else None)
        line = node_line(first) if first is not None else None
        return Segment(index=index, title=title, nodes=tuple(nodes), line=line)


def segment_nodes(
    nodes: Sequence[SyntaxTreeNode], config: Optional[SegmentationConfig] = None
) -> List[Segment]:
    """Functional entry point mirroring :meth:`SlideSegmenter.segment`."""

    return SlideSegmenter(config).segment(nodes)


__all__ = ["SegmentationConfig", "Segment", "SlideSegmenter", "segment_nodes", "heading_depth"]
