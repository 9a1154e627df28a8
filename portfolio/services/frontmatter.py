"""Frontmatter parsing for blog source documents.

A document opens with a YAML header between two ``---`` lines, followed by
the markdown body::

    ---
    title: Hello
    date: 2024-03-01
    excerpt: First post
    slug: hello
    tags: [intro]
    ---
    # Hello

A document without a leading ``---`` has no metadata and is all body.
Plain YAML scalars are kept as the text the author wrote, so ``slug: 2024``
is the slug ``"2024"`` and ``excerpt: Yes`` stays ``"Yes"``.
"""

from typing import Any

import frontmatter  # type: ignore[reportMissingTypeStubs]
import yaml
from frontmatter.default_handlers import YAMLHandler  # type: ignore
from pydantic import ValidationError

from portfolio.models.blog import PostFrontmatter

NULL_TAG = "tag:yaml.org,2002:null"


class TextLoader(yaml.SafeLoader):
    """SafeLoader that resolves plain scalars to strings (nulls aside)."""


TextLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag == NULL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class TextYAMLHandler(YAMLHandler):
    def load(self, fm: str, **kwargs: Any) -> Any:
        kwargs.setdefault("Loader", TextLoader)
        return super().load(fm, **kwargs)


_HANDLER = TextYAMLHandler()


class ParseError(Exception):
    """Malformed frontmatter or a missing required metadata field."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


def split_frontmatter(
    text: str, source: str | None = None
) -> tuple[dict[str, Any], str]:
    """Split a document into its metadata mapping and body text.

    A header that is not a mapping yields no metadata.

    Raises:
        ParseError: If the header is unterminated or is not valid YAML.
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n").strip()
    if not _HANDLER.detect(text):
        return {}, text

    # An opening delimiter without a closing one is an error, not body text
    if len(_HANDLER.FM_BOUNDARY.findall(text)) < 2:
        raise ParseError("unterminated frontmatter block", source)

    try:
        data, body = frontmatter.parse(text, handler=_HANDLER)
    except yaml.YAMLError as exc:
        raise ParseError(f"invalid YAML in frontmatter: {exc}", source) from exc
    return data, body


def parse_frontmatter(
    text: str, source: str | None = None
) -> tuple[PostFrontmatter, str]:
    """Parse and validate a document's metadata, returning it with the body.

    Raises:
        ParseError: If the header is malformed or a required field
            (title, date, excerpt, slug) is missing or invalid.
    """
    data, body = split_frontmatter(text, source)
    try:
        meta = PostFrontmatter.model_validate(data)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise ParseError(
            f"invalid frontmatter fields: {', '.join(fields)}", source
        ) from exc
    return meta, body
