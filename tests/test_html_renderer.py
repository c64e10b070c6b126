"""Tests for the HTML deck renderer."""

from __future__ import annotations

from slidemark.generators.html_renderer import HtmlDeckRenderer, render_inline_html
from slidemark.pipeline import parse_markdown
from slidemark.slide_models import Presentation, Slide, TextSpan


def test_inline_markup_is_escaped():
    html = render_inline_html("a < b & c", [TextSpan(4, 5, "bold")])

    assert str(html) == "a &lt; <strong>b</strong> &amp; c"


def test_nested_and_linked_spans():
    spans = [
        TextSpan(0, 9, "link", 'https://x.test/?q="1"'),
        TextSpan(0, 4, "bold"),
        TextSpan(5, 9, "code"),
    ]

    html = str(render_inline_html("Docs here", spans))

    assert html == (
        '<a href="https://x.test/?q=&#34;1&#34;"><strong>Docs</strong></a>'
        '<a href="https://x.test/?q=&#34;1&#34;"> </a>'
        '<a href="https://x.test/?q=&#34;1&#34;"><code>here</code></a>'
    )


def test_deck_renders_sections_and_notes(tmp_path):
    presentation = parse_markdown(
        "# Intro\n\n---\n\n# Body\n\nHello **you**\n\n- a\n\n<!-- notes: say hi -->"
    ).presentation

    renderer = HtmlDeckRenderer()
    html = renderer.render(presentation)

    assert html.count('<section class="slide"') == 2
    assert '<section class="slide" id="slide_01" data-layout="title"' in html
    assert "Hello <strong>you</strong>" in html
    assert '<aside class="notes">say hi</aside>' in html
    assert "<li>a" in html
    path = renderer.write(presentation, tmp_path / "deck" / "index.html")
    assert path.read_text(encoding="utf-8") == html


def test_titles_are_escaped():
    presentation = Presentation(title="<b>x</b>", slides=[Slide("slide_01", title="<script>")])

    html = HtmlDeckRenderer().render(presentation)

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
