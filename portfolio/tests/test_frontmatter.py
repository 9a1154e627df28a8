"""Tests for frontmatter splitting and metadata validation."""

import pytest

from portfolio.services.frontmatter import (
    ParseError,
    parse_frontmatter,
    split_frontmatter,
)

WELL_FORMED = """\
---
title: Building a Blog
date: 2024-03-01
excerpt: How the blog pipeline works
slug: building-a-blog
tags: [python, markdown]
---
# Building a Blog

Body text.
"""


def test_split_returns_metadata_and_body():
    data, body = split_frontmatter(WELL_FORMED)
    assert data["title"] == "Building a Blog"
    assert data["tags"] == ["python", "markdown"]
    assert body == "# Building a Blog\n\nBody text."


def test_parse_validates_required_fields():
    meta, body = parse_frontmatter(WELL_FORMED)
    assert meta.title == "Building a Blog"
    assert meta.date == "2024-03-01"
    assert meta.excerpt == "How the blog pipeline works"
    assert meta.slug == "building-a-blog"
    assert meta.tags == ["python", "markdown"]
    assert body.startswith("# Building a Blog")


def test_tags_default_to_empty():
    text = WELL_FORMED.replace("tags: [python, markdown]\n", "")
    meta, _ = parse_frontmatter(text)
    assert meta.tags == []


def test_null_tags_default_to_empty():
    text = WELL_FORMED.replace("tags: [python, markdown]", "tags:")
    meta, _ = parse_frontmatter(text)
    assert meta.tags == []


def test_quoted_datetime_kept_verbatim():
    text = WELL_FORMED.replace("date: 2024-03-01", 'date: "2024-03-01T09:30:00Z"')
    meta, _ = parse_frontmatter(text)
    assert meta.date == "2024-03-01T09:30:00Z"


def test_unterminated_header_raises():
    text = "---\ntitle: Oops\nslug: oops\n\nNo closing delimiter.\n"
    with pytest.raises(ParseError, match="unterminated"):
        split_frontmatter(text)


def test_invalid_yaml_raises():
    text = "---\ntitle: [unclosed\n---\nBody\n"
    with pytest.raises(ParseError, match="invalid YAML"):
        split_frontmatter(text)


def test_non_mapping_header_has_no_metadata():
    text = "---\n- just\n- a list\n---\nBody\n"
    data, body = split_frontmatter(text)
    assert data == {}
    assert body == "Body"
    with pytest.raises(ParseError, match="title"):
        parse_frontmatter(text)


def test_numeric_slug_kept_as_text():
    text = WELL_FORMED.replace("slug: building-a-blog", "slug: 2024")
    meta, _ = parse_frontmatter(text)
    assert meta.slug == "2024"


def test_scalar_title_and_excerpt_kept_as_written():
    text = WELL_FORMED.replace("title: Building a Blog", "title: 1984").replace(
        "excerpt: How the blog pipeline works", "excerpt: Yes"
    )
    meta, _ = parse_frontmatter(text)
    assert meta.title == "1984"
    assert meta.excerpt == "Yes"


def test_unquoted_date_kept_as_written():
    text = WELL_FORMED.replace("date: 2024-03-01", "date: 2024-03-01 10:00:00")
    meta, _ = parse_frontmatter(text)
    assert meta.date == "2024-03-01 10:00:00"


def test_unterminated_header_error_carries_source():
    text = "---\ntitle: Oops\nslug: oops\n\nBody text.\n"
    with pytest.raises(ParseError, match="unterminated") as exc_info:
        split_frontmatter(text, source="oops.md")
    assert exc_info.value.source == "oops.md"


def test_document_without_header_is_all_body():
    data, body = split_frontmatter("# Just markdown\n")
    assert data == {}
    assert body == "# Just markdown"


def test_missing_required_field_names_it():
    text = WELL_FORMED.replace("excerpt: How the blog pipeline works\n", "")
    with pytest.raises(ParseError, match="excerpt"):
        parse_frontmatter(text, source="post.md")


def test_parse_error_carries_source():
    with pytest.raises(ParseError) as exc_info:
        parse_frontmatter("no header at all", source="broken.md")
    assert exc_info.value.source == "broken.md"
    assert str(exc_info.value).startswith("broken.md:")


def test_invalid_slug_rejected():
    text = WELL_FORMED.replace("slug: building-a-blog", "slug: Not/A Segment")
    with pytest.raises(ParseError, match="slug"):
        parse_frontmatter(text)


def test_non_iso_date_rejected():
    text = WELL_FORMED.replace("date: 2024-03-01", "date: March 1st")
    with pytest.raises(ParseError, match="date"):
        parse_frontmatter(text)


def test_crlf_and_bom_accepted():
    text = "\ufeff" + WELL_FORMED.replace("\n", "\r\n")
    meta, body = parse_frontmatter(text)
    assert meta.slug == "building-a-blog"
    assert "\r" not in body


def test_horizontal_rule_in_body_is_not_a_delimiter():
    text = WELL_FORMED + "\n---\n\nAfter the rule.\n"
    _, body = split_frontmatter(text)
    assert body.endswith("---\n\nAfter the rule.")
