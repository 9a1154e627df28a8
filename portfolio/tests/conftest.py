"""Shared fixtures for portfolio blog tests."""

import textwrap

import pytest

from portfolio.services.diagrams import DiagramRenderError


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset module-level caches between tests."""
    yield

    from portfolio.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def content_dir(tmp_path):
    """An empty blog content directory."""
    path = tmp_path / "blogs"
    path.mkdir()
    return path


@pytest.fixture
def write_post(content_dir):
    """Write a source document into ``content_dir``.

    Usage::

        write_post("a.md", slug="hello", date="2024-03-01", body="# Hi")
    """

    def _write(
        filename: str,
        *,
        slug: str,
        date: str = "2024-01-01",
        title: str | None = None,
        excerpt: str = "An excerpt",
        tags: list[str] | None = None,
        body: str = "Hello, world.\n",
    ):
        header = [
            "---",
            f"title: {title or slug.replace('-', ' ').title()}",
            f"date: {date}",
            f"excerpt: {excerpt}",
            f"slug: {slug}",
        ]
        if tags is not None:
            header.append(f"tags: [{', '.join(tags)}]")
        header.append("---")
        path = content_dir / filename
        path.write_text("\n".join(header) + "\n" + textwrap.dedent(body))
        return path

    return _write


@pytest.fixture
def mock_settings(monkeypatch, content_dir):
    """Provide a Settings object with safe test defaults."""
    from portfolio.config import Settings, get_settings

    test_settings = Settings(
        content_dir=str(content_dir),
        site_url="https://test.example",
        diagram_renderer="kroki",
        kroki_url="http://kroki.test",
        diagram_render_timeout=2.0,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("portfolio.config.get_settings", lambda: test_settings)

    # Modules that did ``from portfolio.config import get_settings`` hold
    # their own binding, patch those too
    for mod_path in [
        "portfolio.main",
        "portfolio.routers.blog",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


class FakeRenderer:
    """Diagram renderer that fails on sources containing ``INVALID``."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def render(self, source: str) -> str:
        self.calls.append(source)
        if "INVALID" in source:
            raise DiagramRenderError("Parse error on line 1")
        label = source.strip().splitlines()[-1].strip()
        return f'<svg xmlns="http://www.w3.org/2000/svg"><text>{label}</text></svg>'


@pytest.fixture
def fake_renderer():
    return FakeRenderer()
