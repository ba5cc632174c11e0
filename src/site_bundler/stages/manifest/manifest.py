from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files
from pathlib import Path
from typing import Any, Final, Iterable, Mapping

from jsonschema import Draft202012Validator
from pydantic import ValidationError
from site_bundler.artifacts import Artifact, ArtifactKind
from site_bundler.core import ManifestError, atomic_write_json, content_hash, utc_now_iso

from .models import AssetEntry, BuildManifest, Environment, ManifestAssets

PKG: Final[str] = "site_bundler.stages.manifest"
MANIFEST_SCHEMA_REL: Final[str] = "schemas/build-manifest.schema.json"


def manifest_schema() -> dict[str, Any]:
    """
    JSON Schema for build-manifest.json
    """
    try:
        raw = files(PKG).joinpath(MANIFEST_SCHEMA_REL).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"Missing packaged resource: {MANIFEST_SCHEMA_REL}") from e
    return json.loads(raw)


@lru_cache(maxsize=1)
def validator() -> Draft202012Validator:
    return Draft202012Validator(manifest_schema())


def format_errors(errors: Iterable[Any]) -> str:
    lines: list[str] = []
    for e in errors:
        path = (
            ".".join(str(p) for p in e.path) if getattr(e, "path", None) else "<root>"
        )
        lines.append(f"- {path}: {e.message}")
    return "\n".join(lines)


def validate_manifest_dict(obj: dict[str, Any]) -> None:
    """
    Raises ManifestError with a readable message when `obj` does not match
    the shipped JSON schema.
    """
    errs = sorted(
        validator().iter_errors(obj), key=lambda e: list(getattr(e, "path", []))
    )
    if errs:
        raise ManifestError("Manifest validation failed:\n" + format_errors(errs))


def build_manifest(
    *,
    build_id: str,
    artifacts: Mapping[ArtifactKind, Artifact],
    environment: Environment,
    timestamp: str | None = None,
) -> BuildManifest:
    ts = timestamp or utc_now_iso()
    entries = {
        kind.value: AssetEntry(filename=a.filename, hash=a.hash)
        for kind, a in artifacts.items()
    }
    return BuildManifest(
        build_id=build_id,
        version=content_hash(f"{build_id}{ts}"),
        timestamp=ts,
        assets=ManifestAssets(**entries),
        environment=environment,
    )


def write_manifest(path: Path, manifest: BuildManifest) -> None:
    """
    Validate and atomically write the manifest, replacing any previous one.
    """
    obj = manifest.to_json_obj()
    validate_manifest_dict(obj)
    atomic_write_json(Path(path), obj)


def read_manifest(path: Path) -> BuildManifest:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestError(f"Build manifest not found: {path}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read build manifest {path}: {e}") from e

    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise ManifestError(
            f"Manifest must be a JSON object, got {type(obj).__name__}"
        )

    validate_manifest_dict(obj)
    try:
        return BuildManifest.model_validate(obj)
    except ValidationError as e:
        raise ManifestError(f"Manifest does not match model: {e}") from e
