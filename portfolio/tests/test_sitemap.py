"""Tests for sitemap building and the generate_sitemap script."""

from scripts.generate_sitemap import main as generate_sitemap
from portfolio.services.sitemap import (
    SitemapUrl,
    build_sitemap_urls,
    render_sitemap_xml,
)


def test_build_urls_home_listing_then_posts():
    urls = build_sitemap_urls("https://site.test/", ["alpha", "beta"])

    assert [u.loc for u in urls] == [
        "https://site.test/",
        "https://site.test/blogs/",
        "https://site.test/blogs/alpha/",
        "https://site.test/blogs/beta/",
    ]
    assert (urls[0].changefreq, urls[0].priority) == ("weekly", 1.0)
    assert (urls[1].changefreq, urls[1].priority) == ("weekly", 0.8)
    assert (urls[2].changefreq, urls[2].priority) == ("monthly", 0.7)


def test_render_xml():
    xml = render_sitemap_xml(
        [
            SitemapUrl(loc="https://site.test/?a=1&b=2", lastmod="2024-03-01"),
            SitemapUrl(loc="https://site.test/blogs/", changefreq="weekly", priority=0.8),
        ]
    )

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<urlset')
    assert "<loc>https://site.test/?a=1&amp;b=2</loc>" in xml
    assert "<lastmod>2024-03-01</lastmod>" in xml
    assert "<changefreq>weekly</changefreq>" in xml
    assert "<priority>0.8</priority>" in xml
    assert xml.count("<url>") == 2
    assert xml.rstrip().endswith("</urlset>")


def test_render_xml_omits_unset_fields():
    xml = render_sitemap_xml([SitemapUrl(loc="https://site.test/")])
    assert "<lastmod>" not in xml
    assert "<changefreq>" not in xml
    assert "<priority>" not in xml


async def test_script_writes_sitemap(tmp_path, content_dir, write_post):
    write_post("a.md", slug="first")
    write_post("b.md", slug="second")
    output = tmp_path / "public" / "sitemap.xml"

    code = await generate_sitemap(
        [
            "--content-dir",
            str(content_dir),
            "--base-url",
            "https://site.test",
            "--output",
            str(output),
        ]
    )

    assert code == 0
    xml = output.read_text()
    assert "<loc>https://site.test/blogs/first/</loc>" in xml
    assert "<loc>https://site.test/blogs/second/</loc>" in xml
    assert xml.count("<url>") == 4


async def test_script_with_no_posts(tmp_path):
    output = tmp_path / "sitemap.xml"

    code = await generate_sitemap(
        ["--content-dir", str(tmp_path / "none"), "--output", str(output)]
    )

    assert code == 0
    assert output.read_text().count("<url>") == 2
