"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "https://soumyapanda.me",
    ]

    # Blog content
    content_dir: str = "content/blogs"
    site_url: str = "https://soumyapanda.me"
    highlight_style: str = "monokai"

    # Diagram rendering (mermaid blocks, rendered at display time)
    diagram_renderer: Literal["kroki", "mmdc"] = "kroki"
    kroki_url: str = "https://kroki.io"
    mmdc_path: str = "mmdc"
    diagram_render_timeout: float = 10.0

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
