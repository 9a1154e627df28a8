"""Regenerate public/sitemap.xml from the blog content directory.

Usage:
    python -m scripts.generate_sitemap
    python -m scripts.generate_sitemap --content-dir content/blogs --output public/sitemap.xml
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from portfolio.config import get_settings
from portfolio.services.posts import PostRepository
from portfolio.services.sitemap import build_sitemap_urls, render_sitemap_xml

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("generate_sitemap")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--content-dir", default=settings.content_dir)
    parser.add_argument("--base-url", default=settings.site_url)
    parser.add_argument("--output", default="public/sitemap.xml")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        slugs = await PostRepository(args.content_dir).list_all_slugs()
        urls = build_sitemap_urls(args.base_url, slugs)
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(render_sitemap_xml(urls), encoding="utf-8")
    except OSError:
        logger.exception("Error generating sitemap")
        return 1

    print(f"Sitemap written to {output}")
    print(f"  Total URLs:   {len(urls)}")
    print("  Homepage:     1")
    print("  Blog listing: 1")
    print(f"  Blog posts:   {len(slugs)}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
