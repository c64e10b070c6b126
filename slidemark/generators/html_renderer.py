"""Render presentations as a single self-contained HTML document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from jinja2 import BaseLoader, Environment, select_autoescape
from markupsafe import Markup, escape

from ..slide_models import Presentation, TextSpan, ThemeConfig

LOGGER = logging.getLogger(__name__)

# Outermost first.
_TAG_ORDER = ("link", "bold", "italic", "strikethrough", "code")
_TAGS = {"bold": "strong", "italic": "em", "strikethrough": "s", "code": "code"}


def render_inline_html(text: str, spans: Sequence[TextSpan] = ()) -> Markup:
    """Escape ``text`` and wrap each styled range in inline markup."""

    bounds = {0, len(text)}
    for span in spans:
        bounds.add(min(span.start, len(text)))
        bounds.add(min(span.end, len(text)))
    points = sorted(bounds)

    parts: List[str] = []
    for start, end in zip(points, points[1:]):
        active = [span for span in spans if span.start <= start and span.end >= end]
        chunk = str(escape(text[start:end])).replace("\n", "<br>")
        for style in reversed(_TAG_ORDER):
            span = next((item for item in active if item.style == style), None)
            if span is None:
                continue
            if style == "link":
                if span.href:
                    chunk = f'<a href="{escape(span.href)}">{chunk}</a>'
            else:
                tag = _TAGS[style]
                chunk = f"<{tag}>{chunk}</{tag}>"
        parts.append(chunk)
    return Markup("".join(parts))


DECK_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ presentation.title }}</title>
    {% if presentation.author %}<meta name="author" content="{{ presentation.author }}">{% endif %}
    <style>
        body { margin: 0; background: #EEEEEE; font-family: "{{ theme.font_family }}", sans-serif; font-size: {{ theme.font_size }}pt; }
        section.slide { box-sizing: border-box; width: 960px; min-height: 540px; margin: 24px auto; padding: 40px 56px; background: #FFFFFF; box-shadow: 0 2px 8px rgba(0, 0, 0, 0.15); }
        section.slide h1, section.slide h2, section.slide h3, section.slide h4, section.slide h5, section.slide h6 { color: {{ theme.primary_color.hex }}; }
        section.slide .subtitle { color: {{ theme.secondary_color.hex }}; }
        section.slide[data-layout="title"], section.slide[data-layout="section-header"] { display: flex; flex-direction: column; justify-content: center; text-align: center; }
        section.slide[data-layout="two-column"] .body { display: grid; grid-template-columns: 1fr 1fr; gap: 24px; }
        section.slide a { color: {{ theme.secondary_color.hex }}; }
        section.slide table { border-collapse: collapse; }
        section.slide th, section.slide td { border: 1px solid #CCCCCC; padding: 4px 10px; }
        section.slide pre { background: #F6F8FA; padding: 12px; font-family: "Courier New", monospace; }
        section.slide pre mark { display: block; background: #FFF3B0; }
        section.slide img { max-width: 100%; }
        aside.notes { display: none; }
    </style>
</head>
<body>
{% macro render_list(block) -%}
{% if block.kind == "numberedList" %}<ol{% if block.start != 1 %} start="{{ block.start }}"{% endif %}>{% else %}<ul>{% endif %}
{% for item in block.items %}<li>{{ item.text | inline(item.spans) }}{% for child in item.children %}{{ render_list(child) }}{% endfor %}</li>
{% endfor %}
{% if block.kind == "numberedList" %}</ol>{% else %}</ul>{% endif %}
{%- endmacro %}
{% for slide in presentation.slides %}
<section class="slide" id="{{ slide.slide_id }}" data-layout="{{ slide.layout.value }}"{% if slide.background %} style="{% if slide.background.color %}background-color: {{ slide.background.color.hex }};{% endif %}{% if slide.background.image_url %} background-image: url('{{ slide.background.image_url }}'); background-size: cover;{% endif %}"{% endif %}>
    {% if slide.title %}<h2>{{ slide.title }}</h2>{% endif %}
    {% if slide.subtitle %}<p class="subtitle">{{ slide.subtitle }}</p>{% endif %}
    {% if slide.elements %}
    <div class="body">
    {% for el in slide.elements %}
        {% if el.kind == "text" %}
            {% if el.heading_level %}<h{{ [el.heading_level + 1, 6] | min }}>{{ el.text | inline(el.spans) }}</h{{ [el.heading_level + 1, 6] | min }}>
            {% else %}<p>{{ el.text | inline(el.spans) }}</p>{% endif %}
        {% elif el.kind in ("bulletList", "numberedList") %}
            {{ render_list(el) }}
        {% elif el.kind == "image" %}
            <img src="{{ el.url }}" alt="{{ el.alt or '' }}"{% if el.width %} width="{{ el.width }}"{% endif %}{% if el.height %} height="{{ el.height }}"{% endif %}>
        {% elif el.kind == "table" %}
            <table>
            {% if el.header %}<thead><tr>{% for cell in el.header %}<th>{{ cell }}</th>{% endfor %}</tr></thead>{% endif %}
            <tbody>
            {% for row in el.rows %}<tr>{% for cell in row %}<td>{{ cell }}</td>{% endfor %}</tr>
            {% endfor %}
            </tbody>
            </table>
        {% elif el.kind == "code" %}
            <pre><code{% if el.language %} class="language-{{ el.language }}"{% endif %}>{% for line in el.lines %}{% if loop.index in el.highlighted_lines %}<mark>{{ line }}</mark>{% else %}{{ line }}
{% endif %}{% endfor %}</code></pre>
        {% endif %}
    {% endfor %}
    </div>
    {% endif %}
    {% if slide.notes %}<aside class="notes">{{ slide.notes }}</aside>{% endif %}
</section>
{% endfor %}
</body>
</html>
"""


class HtmlDeckRenderer:
    """Render a :class:`Presentation` with Jinja2."""

    def __init__(self, template: str = DECK_TEMPLATE) -> None:
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.env.filters["inline"] = render_inline_html
        self.template = self.env.from_string(template)

    def render(self, presentation: Presentation) -> str:
        html = self.template.render(
            presentation=presentation,
            theme=presentation.theme or ThemeConfig(),
        )
        LOGGER.debug("Rendered %d slide(s) to HTML", len(presentation.slides))
        return html

    def write(self, presentation: Presentation, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(presentation), encoding="utf-8")
        return path


__all__ = ["HtmlDeckRenderer", "render_inline_html", "DECK_TEMPLATE"]
