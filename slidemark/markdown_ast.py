"""Markdown syntax-tree construction on top of markdown-it-py."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.front_matter import front_matter_plugin

from .exceptions import ParseSyntaxError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkdownDocument:
    """Top-level syntax nodes of a Markdown source plus its front matter."""

    nodes: Tuple[SyntaxTreeNode, ...]
    front_matter: Dict[str, Any] = field(default_factory=dict)
    source: str = ""


def node_line(node: SyntaxTreeNode) -> Optional[int]:
    """Return the 1-based source line a block node starts on."""

    node_map = node.map
    return node_map[0] + 1 if node_map else None


class MarkdownAstBuilder:
    """Turn Markdown text into a :class:`MarkdownDocument`.

    The builder holds a configured parser but no per-document state, so a
    single instance may serve concurrent callers.
    """

    def __init__(self, *, front_matter: bool = False) -> None:
        self.front_matter = front_matter
        self.markdown_processor = _make_processor(front_matter=False)
        self.front_matter_processor = _make_processor(front_matter=True) if front_matter else None

    def build(self, text: str) -> MarkdownDocument:
        if not isinstance(text, str):
            raise TypeError(f"Markdown source must be str, got {type(text).__name__}")

        if self.front_matter_processor is not None:
            root = self._parse(self.front_matter_processor, text)
            head = root.children[0] if root.children else None
            if head is not None and head.type == "front_matter":
                metadata = self._load_front_matter(head)
                if metadata:
                    nodes = tuple(root.children[1:])
                    LOGGER.debug("Built syntax tree with %d top-level nodes", len(nodes))
                    return MarkdownDocument(nodes=nodes, front_matter=metadata, source=text)
                LOGGER.warning(
                    "Leading '---' block is not a YAML mapping; reading it as slide breaks"
                )

        root = self._parse(self.markdown_processor, text)
        nodes = tuple(root.children)
        LOGGER.debug("Built syntax tree with %d top-level nodes", len(nodes))
        return MarkdownDocument(nodes=nodes, source=text)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _parse(processor: MarkdownIt, text: str) -> SyntaxTreeNode:
        try:
            tokens = processor.parse(text)
        except Exception as exc:
            raise ParseSyntaxError(
                f"Markdown could not be tokenised: {exc}", line=_error_line(exc)
            ) from exc
        return SyntaxTreeNode(tokens)

    @staticmethod
    def _load_front_matter(node: SyntaxTreeNode) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(node.content)
        except yaml.YAMLError as exc:
            LOGGER.info("Front matter is not valid YAML: %s", exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return data


def _error_line(exc: Exception) -> Optional[int]:
    """1-based source line reported by a tokenizer or YAML error, if any."""

    for attr in ("line", "lineno"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    mark = getattr(exc, "problem_mark", None)
    if mark is not None and isinstance(getattr(mark, "line", None), int):
        return mark.line + 1
    return None


def _verbatim_link(url: str) -> str:
    return url


def _make_processor(*, front_matter: bool) -> MarkdownIt:
    processor = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
    # Image and link targets are kept as written rather than percent-encoded.
    processor.normalizeLink = _verbatim_link
    if front_matter:
        processor.use(front_matter_plugin)
    return processor


def build_ast(text: str, *, front_matter: bool = False) -> MarkdownDocument:
    """Convenience wrapper around :class:`MarkdownAstBuilder`."""

    return MarkdownAstBuilder(front_matter=front_matter).build(text)


__all__ = ["MarkdownAstBuilder", "MarkdownDocument", "build_ast", "node_line"]
