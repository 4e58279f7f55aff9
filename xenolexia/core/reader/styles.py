"""Reader themes and the chapter document handed to the rendering surface."""
from __future__ import annotations

import html
from dataclasses import asdict, dataclass
from typing import Literal

from xenolexia.utils.exceptions import ValidationError

Theme = Literal["light", "dark", "sepia"]
TextAlign = Literal["left", "justify"]

THEME_COLORS: dict[str, dict[str, str]] = {
    "light": {"background": "#ffffff", "text": "#1f2937", "foreign_word": "#6366f1", "link": "#0ea5e9"},
    "dark": {"background": "#1a1a2e", "text": "#e5e7eb", "foreign_word": "#818cf8", "link": "#38bdf8"},
    "sepia": {"background": "#f4ecd8", "text": "#5c4b37", "foreign_word": "#9333ea", "link": "#0891b2"},
}


@dataclass(slots=True, frozen=True)
class ReaderStyle:
    """Typography and theme settings applied by the rendering surface."""

    font_family: str = "Georgia, serif"
    font_size: int = 18
    line_height: float = 1.6
    text_align: TextAlign = "left"
    margin_horizontal: int = 24
    theme: Theme = "light"
    foreign_word_color: str | None = None

    def __post_init__(self) -> None:
        if self.theme not in THEME_COLORS:
            raise ValidationError("Unknown reader theme", {"theme": self.theme})
        if self.text_align not in ("left", "justify"):
            raise ValidationError("Unsupported text alignment", {"text_align": self.text_align})
        if self.font_size <= 0 or self.line_height <= 0 or self.margin_horizontal < 0:
            raise ValidationError(
                "Font size and line height must be positive, margins non-negative",
                {
                    "font_size": self.font_size,
                    "line_height": self.line_height,
                    "margin_horizontal": self.margin_horizontal,
                },
            )

    @property
    def colors(self) -> dict[str, str]:
        colors = dict(THEME_COLORS[self.theme])
        if self.foreign_word_color:
            colors["foreign_word"] = self.foreign_word_color
        return colors

    def settings_payload(self) -> dict[str, object]:
        """The ``apply_settings`` payload for a live surface."""

        payload = asdict(self)
        payload.pop("theme")
        payload.pop("foreign_word_color")
        return payload


def base_styles(style: ReaderStyle) -> str:
    colors = style.colors
    return f"""
:root {{
  --bg-color: {colors['background']};
  --text-color: {colors['text']};
  --foreign-color: {colors['foreign_word']};
  --link-color: {colors['link']};
  --font-family: {style.font_family};
  --font-size: {style.font_size}px;
  --line-height: {style.line_height};
  --text-align: {style.text_align};
  --margin-h: {style.margin_horizontal}px;
}}
* {{ box-sizing: border-box; }}
html, body {{
  margin: 0;
  padding: 0;
  background-color: var(--bg-color);
  color: var(--text-color);
  font-family: var(--font-family);
  font-size: var(--font-size);
  line-height: var(--line-height);
  text-align: var(--text-align);
  overflow-wrap: break-word;
}}
body {{ padding: 24px var(--margin-h); }}
p {{ margin: 0 0 1em 0; }}
h1, h2, h3, h4, h5, h6 {{ margin: 1.5em 0 0.5em 0; line-height: 1.3; font-weight: 600; }}
a {{ color: var(--link-color); }}
img {{ max-width: 100%; height: auto; display: block; margin: 1em auto; }}
blockquote {{ margin: 1em 0; padding-left: 1em; border-left: 3px solid var(--foreign-color); font-style: italic; }}
.foreign-word {{
  color: var(--foreign-color);
  text-decoration: underline dotted;
  text-underline-offset: 3px;
  cursor: pointer;
  font-weight: 500;
}}
#progress-indicator {{
  position: fixed;
  top: 0;
  left: 0;
  height: 3px;
  width: 0%;
  background-color: var(--foreign-color);
}}
""".strip()


def build_document(body: str, style: ReaderStyle, *, title: str = "") -> str:
    """Wrap processed chapter markup in a themed standalone HTML document."""

    return (
        "<!DOCTYPE html>\n"
        '<html><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{html.escape(title)}</title>"
        f"<style>{base_styles(style)}</style></head>"
        f'<body><div id="progress-indicator"></div>'
        f'<div id="content">{body}</div></body></html>'
    )
