"""Read-merge-write patching of ``package.json`` and ``app.json``.

Manifests are loaded as plain ordered dicts so every field the scaffolder does
not know about round-trips untouched.  The changes themselves are expressed as
small typed patch models (``DependencyPatch``, ``PluginPatch``,
``IdentityPatch``) that are applied to the loaded document in one go.

Writes are atomic: the merged document goes to a temporary file next to the
target and is then moved over it, so a failed write leaves the previous
manifest intact.
"""

from __future__ import annotations

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from create_rn_app.errors import ManifestReadError, ManifestWriteError

from .identity import ProjectIdentity

PACKAGE_JSON = "package.json"
APP_JSON = "app.json"


# ---------------------------------------------------------------------------
# Typed partial updates
# ---------------------------------------------------------------------------


class DependencyPatch(BaseModel):
    """Dependencies to merge into ``package.json``; added keys win."""

    model_config = ConfigDict(frozen=True)

    dependencies: dict[str, str] = Field(default_factory=dict)

    def apply(self, manifest: dict[str, Any], path: Path) -> None:
        current = manifest.get("dependencies")
        if current is None:
            current = {}
        elif not isinstance(current, dict):
            raise ManifestReadError(path, "'dependencies' is not an object")
        manifest["dependencies"] = {**current, **self.dependencies}


class PluginPatch(BaseModel):
    """Plugin ids appended, in order, to the Expo ``plugins`` list."""

    model_config = ConfigDict(frozen=True)

    plugins: list[str] = Field(default_factory=list)

    def apply(self, manifest: dict[str, Any], path: Path) -> None:
        config = expo_config(manifest, path)
        current = config.get("plugins")
        if current is None:
            current = []
        elif not isinstance(current, list):
            raise ManifestReadError(path, "'plugins' is not an array")
        config["plugins"] = [*current, *self.plugins]


class IdentityPatch(BaseModel):
    """Identity fields for both manifests."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    app_name: str
    slug: str
    scheme: str
    bundle_identifier: str
    android_package: str

    @classmethod
    def from_identity(cls, identity: ProjectIdentity) -> "IdentityPatch":
        return cls(
            package_name=identity.raw_name,
            app_name=identity.slug,
            slug=identity.slug,
            scheme=identity.slug,
            bundle_identifier=identity.bundle_id,
            android_package=identity.bundle_id,
        )

    def apply_package(self, manifest: dict[str, Any], path: Path) -> None:
        manifest["name"] = self.package_name

    def apply_app(self, manifest: dict[str, Any], path: Path) -> None:
        config = expo_config(manifest, path)
        config["name"] = self.app_name
        config["slug"] = self.slug
        config["scheme"] = self.scheme
        _platform_section(config, "ios", path)["bundleIdentifier"] = self.bundle_identifier
        _platform_section(config, "android", path)["package"] = self.android_package


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def patch_dependencies(manifest_path: str | Path, additions: dict[str, str]) -> dict[str, Any]:
    """Merge *additions* into the ``dependencies`` of the manifest at *manifest_path*.

    Existing entries with the same name are overwritten; every other key is
    preserved in its original position.

    Returns:
        The manifest as written.

    Raises:
        ManifestReadError: If the file is missing or not a JSON object.
        ManifestWriteError: If the merged manifest cannot be written.
    """
    path = Path(manifest_path)
    manifest = read_manifest(path)
    DependencyPatch(dependencies=additions).apply(manifest, path)
    write_manifest(path, manifest)
    return manifest


def patch_plugins(manifest_path: str | Path, plugin_ids: list[str]) -> dict[str, Any]:
    """Append *plugin_ids* to the ``plugins`` list of the app manifest.

    The list is created if absent.  Existing entries are kept and duplicates
    are not removed.

    Returns:
        The manifest as written.

    Raises:
        ManifestReadError: If the file is missing or not a JSON object.
        ManifestWriteError: If the merged manifest cannot be written.
    """
    path = Path(manifest_path)
    manifest = read_manifest(path)
    PluginPatch(plugins=plugin_ids).apply(manifest, path)
    write_manifest(path, manifest)
    return manifest


def rewrite_identity(project_path: str | Path, identity: ProjectIdentity) -> None:
    """Write *identity* into ``package.json`` and ``app.json`` under *project_path*.

    Both manifests are read and patched before either is written, so a read
    failure on ``app.json`` leaves ``package.json`` untouched.  Running this
    twice with the same identity is a no-op the second time.
    """
    root = Path(project_path)
    package_path = root / PACKAGE_JSON
    app_path = root / APP_JSON
    patch = IdentityPatch.from_identity(identity)

    package_manifest = read_manifest(package_path)
    app_manifest = read_manifest(app_path)
    patch.apply_package(package_manifest, package_path)
    patch.apply_app(app_manifest, app_path)

    write_manifest(package_path, package_manifest)
    write_manifest(app_path, app_manifest)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def read_manifest(path: str | Path) -> dict[str, Any]:
    """Load a JSON manifest that must contain a top-level object.

    Raises:
        ManifestReadError: If the file is missing, unreadable, not valid JSON,
            or its top level is not an object.
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ManifestReadError(file_path, "file not found") from None
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(file_path, str(exc)) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestReadError(file_path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ManifestReadError(file_path, "top level is not an object")
    return data


def write_manifest(path: str | Path, data: dict[str, Any]) -> None:
    """Atomically write *data* as 2-space indented JSON with a trailing newline.

    Raises:
        ManifestWriteError: If the temporary file cannot be created or moved
            over *path*.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".json",
            dir=file_path.parent,
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = Path(f.name)
            f.write(content)
        if file_path.exists():
            shutil.copymode(file_path, temp_path)
        temp_path.replace(file_path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise ManifestWriteError(file_path, str(exc)) from exc


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def expo_config(manifest: dict[str, Any], path: Path) -> dict[str, Any]:
    """Return the Expo config object of an ``app.json`` document.

    Expo accepts the config either nested under an ``expo`` key or at the top
    level; the nested form wins when present.
    """
    if "expo" not in manifest:
        return manifest
    config = manifest["expo"]
    if not isinstance(config, dict):
        raise ManifestReadError(path, "'expo' is not an object")
    return config


def _platform_section(config: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    section = config.setdefault(key, {})
    if not isinstance(section, dict):
        raise ManifestReadError(path, f"'{key}' is not an object")
    return section
