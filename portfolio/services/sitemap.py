"""Sitemap generation from the set of addressable blog posts."""

from dataclasses import dataclass
from typing import Literal
from xml.sax.saxutils import escape

ChangeFreq = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass
class SitemapUrl:
    loc: str
    lastmod: str | None = None
    changefreq: ChangeFreq | None = None
    priority: float | None = None


def build_sitemap_urls(base_url: str, slugs: list[str]) -> list[SitemapUrl]:
    """Home page, blog listing, then one entry per post slug."""
    base = base_url.rstrip("/")
    urls = [
        SitemapUrl(loc=f"{base}/", changefreq="weekly", priority=1.0),
        SitemapUrl(loc=f"{base}/blogs/", changefreq="weekly", priority=0.8),
    ]
    for slug in slugs:
        urls.append(
            SitemapUrl(loc=f"{base}/blogs/{slug}/", changefreq="monthly", priority=0.7)
        )
    return urls


def render_sitemap_xml(urls: list[SitemapUrl]) -> str:
    entries = []
    for url in urls:
        entry = f"  <url>\n    <loc>{escape(url.loc)}</loc>"
        if url.lastmod:
            entry += f"\n    <lastmod>{escape(url.lastmod)}</lastmod>"
        if url.changefreq:
            entry += f"\n    <changefreq>{url.changefreq}</changefreq>"
        if url.priority is not None:
            entry += f"\n    <priority>{url.priority:.1f}</priority>"
        entry += "\n  </url>"
        entries.append(entry)

    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<urlset xmlns="{SITEMAP_NS}">\n'
        f"{body}\n"
        "</urlset>\n"
    )
