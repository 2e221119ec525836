"""Tests for manifest patching (package.json / app.json).

Covers:
- patch_dependencies: merge, overwrite, creation, key order, other fields intact
- patch_plugins: append order, duplicates kept, creation, root-level config
- rewrite_identity: fields written, idempotence, missing platform sections
- read/write failures: ManifestReadError / ManifestWriteError, atomicity
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from create_rn_app.errors import ManifestReadError, ManifestWriteError
from create_rn_app.scaffolder.identity import derive_identity
from create_rn_app.scaffolder.manifest import (
    DependencyPatch,
    IdentityPatch,
    PluginPatch,
    expo_config,
    patch_dependencies,
    patch_plugins,
    read_manifest,
    rewrite_identity,
    write_manifest,
)

pytestmark = pytest.mark.unit


def _load(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# patch_dependencies
# ---------------------------------------------------------------------------


class TestPatchDependencies:
    def test_adds_new_dependency(self, package_json: Path):
        patch_dependencies(package_json, {"@supabase/supabase-js": "^2.47.10"})
        deps = _load(package_json)["dependencies"]
        assert deps["@supabase/supabase-js"] == "^2.47.10"

    def test_existing_dependencies_preserved(self, package_json: Path):
        before = _load(package_json)["dependencies"]
        patch_dependencies(package_json, {"new-lib": "1.0.0"})
        after = _load(package_json)["dependencies"]
        for name, version in before.items():
            assert after[name] == version

    def test_overwrites_same_name(self, package_json: Path):
        patch_dependencies(package_json, {"axios": "^2.0.0"})
        assert _load(package_json)["dependencies"]["axios"] == "^2.0.0"

    def test_other_top_level_fields_untouched(self, package_json: Path):
        before = _load(package_json)
        patch_dependencies(package_json, {"new-lib": "1.0.0"})
        after = _load(package_json)
        for key in before:
            if key != "dependencies":
                assert after[key] == before[key]

    def test_key_order_preserved(self, package_json: Path):
        before = list(_load(package_json))
        patch_dependencies(package_json, {"new-lib": "1.0.0"})
        assert list(_load(package_json)) == before

    def test_new_keys_appended_after_existing(self, package_json: Path):
        existing = list(_load(package_json)["dependencies"])
        patch_dependencies(package_json, {"b-lib": "1", "a-lib": "2"})
        assert list(_load(package_json)["dependencies"]) == existing + ["b-lib", "a-lib"]

    def test_creates_dependencies_when_absent(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text('{"name": "x"}', encoding="utf-8")
        patch_dependencies(path, {"lib": "1.0.0"})
        assert _load(path) == {"name": "x", "dependencies": {"lib": "1.0.0"}}

    def test_two_space_indent_and_trailing_newline(self, package_json: Path):
        patch_dependencies(package_json, {"lib": "1.0.0"})
        text = package_json.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert '\n  "name": ' in text

    def test_empty_additions_leave_content_equal(self, package_json: Path):
        before = _load(package_json)
        patch_dependencies(package_json, {})
        assert _load(package_json) == before

    def test_returns_written_manifest(self, package_json: Path):
        result = patch_dependencies(package_json, {"lib": "1.0.0"})
        assert result == _load(package_json)


# ---------------------------------------------------------------------------
# patch_plugins
# ---------------------------------------------------------------------------


class TestPatchPlugins:
    def test_appends_in_order(self, tmp_path: Path):
        path = tmp_path / "app.json"
        path.write_text(json.dumps({"expo": {"plugins": ["X"]}}), encoding="utf-8")
        patch_plugins(path, ["Y", "Z"])
        assert _load(path)["expo"]["plugins"] == ["X", "Y", "Z"]

    def test_duplicates_are_kept(self, app_json: Path):
        patch_plugins(app_json, ["expo-router"])
        assert _load(app_json)["expo"]["plugins"] == [
            "expo-router",
            "expo-secure-store",
            "expo-router",
        ]

    def test_creates_plugins_when_absent(self, tmp_path: Path):
        path = tmp_path / "app.json"
        path.write_text(json.dumps({"expo": {"name": "x"}}), encoding="utf-8")
        patch_plugins(path, ["P"])
        assert _load(path) == {"expo": {"name": "x", "plugins": ["P"]}}

    def test_root_level_config(self, tmp_path: Path):
        path = tmp_path / "app.json"
        path.write_text(json.dumps({"name": "x", "plugins": ["A"]}), encoding="utf-8")
        patch_plugins(path, ["B"])
        assert _load(path) == {"name": "x", "plugins": ["A", "B"]}

    def test_other_fields_untouched(self, app_json: Path):
        before = _load(app_json)["expo"]
        patch_plugins(app_json, ["P"])
        after = _load(app_json)["expo"]
        for key in before:
            if key != "plugins":
                assert after[key] == before[key]

    def test_non_list_plugins_is_read_error(self, tmp_path: Path):
        path = tmp_path / "app.json"
        path.write_text(json.dumps({"expo": {"plugins": "nope"}}), encoding="utf-8")
        with pytest.raises(ManifestReadError, match="plugins"):
            patch_plugins(path, ["P"])
        assert _load(path) == {"expo": {"plugins": "nope"}}


# ---------------------------------------------------------------------------
# rewrite_identity
# ---------------------------------------------------------------------------


class TestRewriteIdentity:
    def test_sets_all_identity_fields(self, project_dir: Path):
        rewrite_identity(project_dir, derive_identity("demo-app"))
        pkg = _load(project_dir / "package.json")
        expo = _load(project_dir / "app.json")["expo"]
        assert pkg["name"] == "demo-app"
        assert expo["name"] == "demo-app"
        assert expo["slug"] == "demo-app"
        assert expo["scheme"] == "demo-app"
        assert expo["ios"]["bundleIdentifier"] == "com.yourcompany.demoapp"
        assert expo["android"]["package"] == "com.yourcompany.demoapp"

    def test_package_name_is_raw_name(self, project_dir: Path):
        rewrite_identity(project_dir, derive_identity("My_App"))
        assert _load(project_dir / "package.json")["name"] == "My_App"
        assert _load(project_dir / "app.json")["expo"]["slug"] == "my-app"

    def test_idempotent(self, project_dir: Path):
        identity = derive_identity("demo-app")
        rewrite_identity(project_dir, identity)
        once = (
            (project_dir / "package.json").read_text(),
            (project_dir / "app.json").read_text(),
        )
        rewrite_identity(project_dir, identity)
        twice = (
            (project_dir / "package.json").read_text(),
            (project_dir / "app.json").read_text(),
        )
        assert once == twice

    def test_platform_sections_created(self, tmp_path: Path):
        (tmp_path / "package.json").write_text('{"name": "x"}', encoding="utf-8")
        (tmp_path / "app.json").write_text('{"expo": {"name": "x"}}', encoding="utf-8")
        rewrite_identity(tmp_path, derive_identity("abc"))
        expo = _load(tmp_path / "app.json")["expo"]
        assert expo["ios"] == {"bundleIdentifier": "com.yourcompany.abc"}
        assert expo["android"] == {"package": "com.yourcompany.abc"}

    def test_other_ios_fields_kept(self, project_dir: Path):
        rewrite_identity(project_dir, derive_identity("demo-app"))
        assert _load(project_dir / "app.json")["expo"]["ios"]["supportsTablet"] is True

    def test_missing_app_json_leaves_package_json_untouched(self, project_dir: Path):
        (project_dir / "app.json").unlink()
        before = (project_dir / "package.json").read_text()
        with pytest.raises(ManifestReadError):
            rewrite_identity(project_dir, derive_identity("demo-app"))
        assert (project_dir / "package.json").read_text() == before


# ---------------------------------------------------------------------------
# Patch models
# ---------------------------------------------------------------------------


class TestPatchModels:
    def test_identity_patch_from_identity(self):
        patch_ = IdentityPatch.from_identity(derive_identity("My App"))
        assert patch_.package_name == "My App"
        assert patch_.app_name == "my-app"
        assert patch_.scheme == "my-app"
        assert patch_.bundle_identifier == patch_.android_package == "com.yourcompany.myapp"

    def test_dependency_patch_rejects_non_object(self, tmp_path: Path):
        with pytest.raises(ManifestReadError, match="dependencies"):
            DependencyPatch(dependencies={"a": "1"}).apply({"dependencies": []}, tmp_path)

    def test_plugin_patch_on_plain_dict(self, tmp_path: Path):
        manifest: dict[str, Any] = {"expo": {}}
        PluginPatch(plugins=["a", "b"]).apply(manifest, tmp_path)
        assert manifest == {"expo": {"plugins": ["a", "b"]}}

    def test_expo_config_rejects_non_object(self, tmp_path: Path):
        with pytest.raises(ManifestReadError, match="expo"):
            expo_config({"expo": []}, tmp_path)


# ---------------------------------------------------------------------------
# Read / write failures
# ---------------------------------------------------------------------------


class TestReadErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ManifestReadError, match="not found") as exc_info:
            patch_dependencies(tmp_path / "package.json", {"a": "1"})
        assert exc_info.value.path == tmp_path / "package.json"

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ManifestReadError, match="invalid JSON"):
            read_manifest(path)

    def test_top_level_array(self, tmp_path: Path):
        path = tmp_path / "app.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ManifestReadError, match="not an object"):
            patch_plugins(path, ["P"])

    def test_directory_instead_of_file(self, tmp_path: Path):
        (tmp_path / "package.json").mkdir()
        with pytest.raises(ManifestReadError):
            read_manifest(tmp_path / "package.json")


class TestWriteErrors:
    def test_temp_file_failure_raises_write_error(self, package_json: Path):
        before = package_json.read_text()
        with patch(
            "create_rn_app.scaffolder.manifest.tempfile.NamedTemporaryFile",
            side_effect=OSError("No space left on device"),
        ):
            with pytest.raises(ManifestWriteError, match="No space left"):
                patch_dependencies(package_json, {"lib": "1.0.0"})
        assert package_json.read_text() == before

    def test_replace_failure_keeps_original_and_cleans_up(self, package_json: Path):
        before = package_json.read_text()
        siblings = set(package_json.parent.iterdir())
        with patch.object(Path, "replace", side_effect=PermissionError("denied")):
            with pytest.raises(ManifestWriteError):
                patch_dependencies(package_json, {"lib": "1.0.0"})
        assert package_json.read_text() == before
        assert set(package_json.parent.iterdir()) == siblings

    def test_missing_parent_directory(self, tmp_path: Path):
        with pytest.raises(ManifestWriteError):
            write_manifest(tmp_path / "nope" / "package.json", {"name": "x"})

    def test_write_preserves_unicode(self, tmp_path: Path):
        path = tmp_path / "app.json"
        write_manifest(path, {"name": "Café"})
        assert '"Café"' in path.read_text(encoding="utf-8")
