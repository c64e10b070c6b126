"""Parser configuration and environment-based loading."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from .segmenter import SegmentationConfig
from .slide_models import ThemeConfig

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "SLIDEMARK_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ParserConfig:
    """Options for :class:`slidemark.pipeline.MarkdownSlideParser`.

    Attributes
    ----------
    segmentation:
        Which delimiters start a new slide.
    strict:
        Turn unsupported syntax into ``UnrecognizedNodeKind`` findings and
        withhold the presentation when any finding exists.
    strict_layout:
        Enable the layout/content consistency check of the validator.
    front_matter:
        Read a leading YAML block as presentation metadata. Off by default,
        since a recognised block no longer counts as a thematic break.
    default_title:
        Presentation title used when neither front matter nor any slide
        provides one.
    theme:
        Theme applied when the front matter does not declare one.
    """

    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    strict: bool = False
    strict_layout: bool = False
    front_matter: bool = False
    default_title: str = "Untitled Presentation"
    theme: Optional[ThemeConfig] = None


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_depth(name: str, raw: str) -> Optional[int]:
    value = raw.strip().lower()
    if value in ("", "none", "off", "0"):
        return None
    if value in ("1", "2"):
        return int(value)
    raise ValueError(f"{name} must be 1, 2 or none, got {raw!r}")


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[str] = None,
) -> ParserConfig:
    """Build a :class:`ParserConfig` from ``SLIDEMARK_*`` environment variables.

    When ``environ`` is omitted the process environment is used after loading
    a ``.env`` file (existing variables win).
    """

    if environ is None:
        load_dotenv(dotenv_path=dotenv_path)
        environ = os.environ

    def get(key: str) -> Optional[str]:
        return environ.get(ENV_PREFIX + key)

    defaults = ParserConfig()
    segmentation = defaults.segmentation

    raw = get("THEMATIC_BREAK_SPLITS")
    thematic = (
        _parse_bool("SLIDEMARK_THEMATIC_BREAK_SPLITS", raw)
        if raw is not None
        else segmentation.thematic_break_splits
    )
    raw = get("HEADING_DEPTH_SPLITS")
    depth = (
        _parse_depth("SLIDEMARK_HEADING_DEPTH_SPLITS", raw)
        if raw is not None
        else segmentation.heading_depth_splits
    )

    flags = {}
    for attr in ("strict", "strict_layout", "front_matter"):
        raw = get(attr.upper())
        if raw is not None:
            flags[attr] = _parse_bool(ENV_PREFIX + attr.upper(), raw)

    config = ParserConfig(
        segmentation=SegmentationConfig(thematic_break_splits=thematic, heading_depth_splits=depth),
        default_title=get("DEFAULT_TITLE") or defaults.default_title,
        **flags,
    )
    LOGGER.debug("Loaded parser configuration: %s", config)
    return config


__all__ = ["ParserConfig", "load_config", "ENV_PREFIX"]
