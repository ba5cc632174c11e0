from .manifest import (
    build_manifest,
    manifest_schema,
    read_manifest,
    validate_manifest_dict,
    write_manifest,
)
from .models import AssetEntry, BuildManifest, ManifestAssets
from .stage import stage_manifest

__all__ = [
    "AssetEntry",
    "build_manifest",
    "BuildManifest",
    "manifest_schema",
    "ManifestAssets",
    "read_manifest",
    "stage_manifest",
    "validate_manifest_dict",
    "write_manifest",
]
