"""Blog post endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Path, Query, Request
from fastapi.responses import HTMLResponse, Response

from portfolio.config import get_settings
from portfolio.models.blog import SLUG_PATTERN, BlogIndex, BlogPost
from portfolio.services.diagrams import enhance_html
from portfolio.services.markdown_renderer import highlight_css
from portfolio.services.posts import NotFoundError, PostRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog", tags=["blog"])


def get_repository() -> PostRepository:
    """Repository over the configured content directory."""
    return PostRepository(get_settings().content_dir)


async def _get_post(slug: str) -> BlogPost:
    try:
        return await get_repository().get_by_slug(slug)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail="Blog post not found") from exc


@router.get("", response_model=BlogIndex)
async def list_blog_posts(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
):
    """Get the blog post index, newest first."""
    posts = await get_repository().list_all()
    page = posts[offset : offset + limit]
    return BlogIndex(posts=[p.summary() for p in page], total=len(posts))


# A leading underscore never matches SLUG_PATTERN
@router.get("/_slugs")
async def list_blog_slugs():
    """Every post slug, for static path generation."""
    return {"slugs": await get_repository().list_all_slugs()}


@router.get("/highlight.css")
async def get_highlight_css():
    """Stylesheet for highlighted code blocks."""
    css = highlight_css(get_settings().highlight_style)
    return Response(content=css, media_type="text/css")


@router.get("/{slug}", response_model=BlogPost)
async def get_blog_post(
    slug: str = Path(..., pattern=SLUG_PATTERN, max_length=200),
):
    """Get a single blog post by its slug.

    ``html_content`` still holds diagram blocks as code; the ``/content``
    endpoint renders them.
    """
    return await _get_post(slug)


@router.get("/{slug}/content")
async def get_blog_post_content(
    request: Request,
    slug: str = Path(..., pattern=SLUG_PATTERN, max_length=200),
):
    """Serve blog post HTML with mermaid diagrams rendered to SVG."""
    post = await _get_post(slug)
    renderer = request.app.state.diagram_renderer
    html = await enhance_html(
        post.html_content,
        renderer,
        timeout=get_settings().diagram_render_timeout,
    )
    return HTMLResponse(content=html)
