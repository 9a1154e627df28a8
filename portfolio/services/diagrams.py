"""Display-time rendering of mermaid diagram blocks.

Stored post HTML keeps diagrams as ``<pre><code class="language-mermaid">``
blocks. When a post is displayed, ``enhance_diagrams`` submits each block to
a diagram renderer and swaps the ``<pre>`` for the returned SVG. Every block
is independent: a broken diagram stays as its source text and is logged,
the others still render.
"""

import asyncio
import contextlib
import json
import logging
from typing import Protocol

import httpx
from bs4 import BeautifulSoup, Tag  # type: ignore

from portfolio.config import Settings

logger = logging.getLogger(__name__)

DIAGRAM_SELECTOR = "pre > code.language-mermaid"
DIAGRAM_CONTAINER_CLASS = "mermaid-diagram"

# Black/white/orange site palette
MERMAID_THEME: dict = {
    "theme": "base",
    "themeVariables": {
        "primaryColor": "#9b9494",
        "primaryTextColor": "#000000",
        "primaryBorderColor": "#f97316",
        "lineColor": "#666666",
        "secondaryColor": "#afa9a9",
        "tertiaryColor": "#000000",
        "background": "#000000",
        "mainBkg": "#968f8f",
        "nodeBorder": "#f97316",
        "clusterBkg": "#1a1a1a",
        "clusterBorder": "#f97316",
        "titleColor": "#afa7a7",
        "edgeLabelBackground": "#000000",
        "nodeTextColor": "#000000",
    },
    "flowchart": {"curve": "basis", "padding": 20},
}


class DiagramRenderError(Exception):
    """A diagram could not be rendered."""

    pass


class DiagramRenderer(Protocol):
    async def render(self, source: str) -> str:
        """Render diagram source text to SVG markup."""
        ...


def themed_source(source: str, theme: dict | None = None) -> str:
    """Prefix diagram source with a mermaid init directive carrying the theme."""
    directive = json.dumps(MERMAID_THEME if theme is None else theme)
    return f"%%{{init: {directive}}}%%\n{source.strip()}\n"


class KrokiRenderer:
    """Render mermaid through a Kroki server over HTTP."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://kroki.io",
        theme: dict | None = None,
    ) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/mermaid/svg"
        self._theme = theme

    async def render(self, source: str) -> str:
        try:
            resp = await self._client.post(
                self._url,
                content=themed_source(source, self._theme).encode(),
                headers={"Content-Type": "text/plain"},
            )
        except httpx.HTTPError as exc:
            raise DiagramRenderError(f"Kroki request failed: {exc}") from exc

        if resp.status_code != 200:
            raise DiagramRenderError(
                f"Kroki returned {resp.status_code}: {resp.text[:200]}"
            )
        if "<svg" not in resp.text:
            raise DiagramRenderError("Kroki response contained no SVG")
        return resp.text


class MermaidCliRenderer:
    """Render mermaid with a local ``mmdc`` (mermaid-cli) binary."""

    def __init__(self, executable: str = "mmdc", theme: dict | None = None) -> None:
        self._executable = executable
        self._theme = theme

    async def render(self, source: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                "--input",
                "-",
                "--output",
                "-",
                "--outputFormat",
                "svg",
                "--backgroundColor",
                "transparent",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise DiagramRenderError(f"{self._executable} not found") from exc

        try:
            stdout, stderr = await proc.communicate(
                themed_source(source, self._theme).encode()
            )
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            # Reap the killed child
            await asyncio.shield(proc.wait())
            raise

        if proc.returncode != 0:
            raise DiagramRenderError(
                f"{self._executable} exited {proc.returncode}: "
                f"{stderr.decode(errors='replace')[:200]}"
            )
        svg = stdout.decode()
        if "<svg" not in svg:
            raise DiagramRenderError(f"{self._executable} produced no SVG")
        return svg


def build_renderer(
    settings: Settings, client: httpx.AsyncClient
) -> DiagramRenderer:
    """Pick the diagram renderer named in settings."""
    if settings.diagram_renderer == "mmdc":
        return MermaidCliRenderer(settings.mmdc_path)
    return KrokiRenderer(client, settings.kroki_url)


def _is_attached(element: Tag, container: Tag) -> bool:
    parent = element.parent
    while parent is not None:
        if parent is container:
            return True
        parent = parent.parent
    return False


async def _enhance_block(
    container: Tag,
    code: Tag,
    index: int,
    renderer: DiagramRenderer,
    timeout: float | None,
) -> bool:
    pre = code.parent
    source = code.get_text()
    try:
        svg = await asyncio.wait_for(renderer.render(source), timeout=timeout)
    except DiagramRenderError as exc:
        logger.warning("Diagram %d failed to render: %s", index, exc)
        return False
    except asyncio.TimeoutError:
        logger.warning("Diagram %d timed out after %ss", index, timeout)
        return False
    except Exception:
        logger.exception("Unexpected error rendering diagram %d", index)
        return False

    # The block may have been removed or already replaced while we waited
    if pre is None or not _is_attached(pre, container):
        logger.debug("Diagram %d detached before render completed, skipping", index)
        return False

    fragment = BeautifulSoup(
        f'<div class="{DIAGRAM_CONTAINER_CLASS}">{svg}</div>', "html.parser"
    )
    pre.replace_with(fragment.div)
    return True


async def enhance_diagrams(
    container: Tag,
    renderer: DiagramRenderer,
    *,
    timeout: float | None = 10.0,
) -> int:
    """Replace mermaid code blocks in ``container`` with rendered SVG, in place.

    Blocks are submitted in document order and rendered concurrently. Failures
    are logged per block and never raised. Returns the number of blocks
    replaced.
    """
    blocks = container.select(DIAGRAM_SELECTOR)
    if not blocks:
        return 0

    results = await asyncio.gather(
        *[
            _enhance_block(container, code, i, renderer, timeout)
            for i, code in enumerate(blocks)
        ]
    )
    rendered = sum(results)
    if rendered < len(blocks):
        logger.info("Rendered %d of %d diagrams", rendered, len(blocks))
    return rendered


async def enhance_html(
    html: str,
    renderer: DiagramRenderer,
    *,
    timeout: float | None = 10.0,
) -> str:
    """Parse ``html``, enhance its diagram blocks and return the new markup."""
    soup = BeautifulSoup(html, "html.parser")
    if await enhance_diagrams(soup, renderer, timeout=timeout) == 0:
        return html
    return str(soup)
