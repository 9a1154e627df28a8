"""Post repository: discovers, parses and converts blog source documents.

Two identifiers are kept apart: the file name is the storage key,
the frontmatter ``slug`` is the logical key. Lookups always go by slug, so
files can be renamed freely.

Every query re-reads the content directory; nothing is cached.

Corpus failure policy: a document that fails to parse (bad frontmatter,
missing required field, undecodable bytes) is skipped and logged, and the
rest of the corpus is served. This applies to every query alike.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from portfolio.models.blog import BlogPost, PostFrontmatter, parse_post_date
from portfolio.services.frontmatter import ParseError, parse_frontmatter
from portfolio.services.markdown_renderer import render_markdown

logger = logging.getLogger(__name__)


class NotFoundError(Exception):
    """No post has the requested slug."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Blog post not found: {slug}")


def _read_document(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"not valid UTF-8: {exc}", path.name) from exc


def read_document(path: Path) -> tuple[PostFrontmatter, str]:
    """Read a source document once and parse its metadata and body."""
    return parse_frontmatter(_read_document(path), path.name)


def build_post(path: Path, meta: PostFrontmatter, body: str) -> BlogPost:
    """Convert a parsed document into a post."""
    return BlogPost(
        title=meta.title,
        date=meta.date,
        excerpt=meta.excerpt,
        slug=meta.slug,
        tags=meta.tags,
        content=body,
        html_content=render_markdown(body),
        filename=path.name,
    )


def load_post(path: Path) -> BlogPost:
    """Parse and convert a single source document."""
    meta, body = read_document(path)
    return build_post(path, meta, body)


def _read_keyed(path: Path) -> tuple[Path, PostFrontmatter, str]:
    meta, body = read_document(path)
    return path, meta, body


def sort_posts(posts: list[BlogPost]) -> list[BlogPost]:
    """Order posts newest first.

    Dates are compared as parsed instants, not as text. Equal dates fall back
    to slug ascending, then to the incoming (file name) order.
    """
    ordered = sorted(posts, key=lambda p: p.slug)
    ordered.sort(key=lambda p: parse_post_date(p.date), reverse=True)
    return ordered


class PostRepository:
    """Query surface over a directory of markdown posts."""

    def __init__(self, content_dir: str | Path, *, extension: str = ".md") -> None:
        self.content_dir = Path(content_dir)
        self.extension = extension

    def discover(self) -> list[Path]:
        """Return source documents sorted by file name.

        A missing content directory is an empty corpus, not an error.
        """
        if not self.content_dir.is_dir():
            logger.info("Content directory %s does not exist", self.content_dir)
            return []
        return sorted(
            (
                p
                for p in self.content_dir.iterdir()
                if p.is_file() and p.name.endswith(self.extension)
            ),
            key=lambda p: p.name,
        )

    async def _load_each(
        self, loader: Callable[[Path], Any], paths: list[Path]
    ) -> list[Any]:
        """Run ``loader`` over ``paths`` concurrently, dropping unparseable docs.

        Documents removed after discovery are dropped too. Results keep the
        order of ``paths``.
        """

        async def _load(path: Path) -> Any:
            try:
                return await asyncio.to_thread(loader, path)
            except ParseError as exc:
                logger.warning("Skipping %s: %s", path.name, exc)
                return None
            except FileNotFoundError:
                logger.info("Skipping %s: removed while reading", path.name)
                return None

        results = await asyncio.gather(*[_load(p) for p in paths])
        return [r for r in results if r is not None]

    async def list_all(self) -> list[BlogPost]:
        """Return every post, newest first."""
        posts = await self._load_each(load_post, self.discover())
        return sort_posts(posts)

    async def list_all_slugs(self) -> list[str]:
        """Return the slug of every post in file name order.

        Duplicates are kept so authoring mistakes stay visible.
        """
        docs = await self._load_each(read_document, self.discover())
        return [meta.slug for meta, _body in docs]

    async def get_by_slug(self, slug: str) -> BlogPost:
        """Return the post whose frontmatter slug is ``slug``.

        Each document is read once. When several documents share the slug,
        the first by file name wins.

        Raises:
            NotFoundError: If no document declares ``slug``.
        """
        docs = await self._load_each(_read_keyed, self.discover())
        matches = [doc for doc in docs if doc[1].slug == slug]
        if not matches:
            raise NotFoundError(slug)
        if len(matches) > 1:
            logger.warning(
                "Duplicate slug %r in %s; serving %s",
                slug,
                ", ".join(path.name for path, _meta, _body in matches),
                matches[0][0].name,
            )
        return await asyncio.to_thread(build_post, *matches[0])
