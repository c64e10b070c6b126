"""Output generators consuming the presentation content model."""

from .google_slides import GoogleSlidesRequestBuilder, chunk_requests
from .html_renderer import HtmlDeckRenderer, render_inline_html
from .pptx_renderer import SlideDeckRenderer

__all__ = [
    "SlideDeckRenderer",
    "GoogleSlidesRequestBuilder",
    "chunk_requests",
    "HtmlDeckRenderer",
    "render_inline_html",
]
