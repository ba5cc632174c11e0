from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import LogFormat

DEFAULT_KEEP_ASSET_VERSIONS = 3


class ConsumerDocument(BaseModel):
    """
    An HTML document whose asset references are rewritten after each build.

    `prefix` is the relative path from the document to the output directory,
    e.g. "dist/" for the root index.html and "../dist/" for ar/index.html.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Path
    prefix: str = Field(..., min_length=1)


def _default_documents() -> list[ConsumerDocument]:
    return [
        ConsumerDocument(path=Path("index.html"), prefix="dist/"),
        ConsumerDocument(path=Path("ar") / "index.html", prefix="../dist/"),
    ]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SITE_BUNDLER_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    project_root: Path = Field(default=Path("."))

    # Relative to project_root unless stated otherwise.
    src_dir: Path = Field(default=Path("src"))
    entry: Path = Field(default=Path("main.js"), description="Relative to src_dir")
    styles_root: Path = Field(
        default=Path("styles") / "main.css", description="Relative to src_dir"
    )
    legacy_script: Path = Field(default=Path("js") / "main.js")
    legacy_style: Path = Field(default=Path("css") / "style.css")
    out_dir: Path = Field(default=Path("dist"))
    manifest_name: str = Field(default="build-manifest.json")

    keep_asset_versions: int = Field(
        default=DEFAULT_KEEP_ASSET_VERSIONS,
        ge=0,
        validation_alias=AliasChoices(
            "keep_asset_versions",
            "SITE_BUNDLER_KEEP_ASSET_VERSIONS",
            "KEEP_ASSET_VERSIONS",
        ),
    )

    documents: list[ConsumerDocument] = Field(default_factory=_default_documents)
    version_anchor: str = Field(default="apple-mobile-web-app-status-bar-style")

    run_root: Path = Field(default=Path(".bundler") / "runs")
    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()
