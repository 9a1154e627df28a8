"""Markdown to HTML conversion for blog post bodies.

Raw HTML in a post is passed through untouched: post authors are trusted.
Fenced code blocks are highlighted with Pygments and tagged with a
``language-<name>`` class. Diagram blocks are left as escaped source so the
display path can swap them for rendered SVG later.
"""

import html
import logging
from functools import lru_cache

from mistletoe import Document  # type: ignore
from mistletoe.block_token import BlockCode  # type: ignore
from mistletoe.html_renderer import HTMLRenderer  # type: ignore
from pygments import highlight  # type: ignore
from pygments.formatters import HtmlFormatter  # type: ignore
from pygments.lexers import get_lexer_by_name  # type: ignore
from pygments.util import ClassNotFound  # type: ignore

logger = logging.getLogger(__name__)

# Languages rendered at display time instead of highlighted here
DIAGRAM_LANGUAGES = frozenset({"mermaid"})

HIGHLIGHT_CSS_CLASS = "highlight"

# Token spans only; the <pre><code> wrapper is ours
_FORMATTER = HtmlFormatter(nowrap=True)


class PostRenderer(HTMLRenderer):
    def render_block_code(self, token: BlockCode) -> str:
        code = token.children[0].content if token.children else ""
        language = (getattr(token, "language", "") or "").strip().split(" ")[0]
        return render_code_block(code, language)


def render_code_block(code: str, language: str = "") -> str:
    """Render one code block, highlighted when the language is known."""
    lang = language.lower()
    code_attr = f' class="language-{html.escape(lang)}"' if lang else ""

    inner = None
    if lang and lang not in DIAGRAM_LANGUAGES:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            logger.debug("No lexer for %r, leaving code block plain", lang)
        else:
            inner = highlight(code, lexer, _FORMATTER)
    if inner is None:
        inner = html.escape(code, quote=False)

    return f'<pre class="{HIGHLIGHT_CSS_CLASS}"><code{code_attr}>{inner}</code></pre>\n'


def render_markdown(body: str) -> str:
    """Convert a markdown body to HTML.

    Never raises: if the converter itself fails the body degrades to
    escaped literal text in a single ``<pre>`` block.
    """
    try:
        with PostRenderer() as renderer:
            return renderer.render(Document(body))
    except Exception:
        logger.exception("Markdown conversion failed, falling back to literal text")
        return f"<pre>{html.escape(body, quote=False)}</pre>\n"


@lru_cache(16)
def highlight_css(style: str = "monokai") -> str:
    """Return the Pygments stylesheet for highlighted code blocks."""
    try:
        formatter = HtmlFormatter(style=style)
    except ClassNotFound:
        logger.warning("Unknown highlight style %r, using default", style)
        formatter = HtmlFormatter()
    return formatter.get_style_defs(f".{HIGHLIGHT_CSS_CLASS}")
