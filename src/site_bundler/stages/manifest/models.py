from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Environment = Literal["development", "production"]


class AssetEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    filename: str = Field(..., min_length=1)
    hash: str = Field(..., min_length=1)


class ManifestAssets(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    script: Optional[AssetEntry] = None
    style: Optional[AssetEntry] = None

    def get(self, kind: str) -> Optional[AssetEntry]:
        return getattr(self, kind, None)


class BuildManifest(BaseModel):
    """
    The single JSON record describing the latest build's artifacts.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    build_id: str = Field(..., alias="buildId", min_length=1)
    version: str = Field(..., min_length=1)
    timestamp: str
    assets: ManifestAssets = Field(default_factory=ManifestAssets)
    environment: Environment

    def to_json_obj(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
