"""Composition driver.

Applies the selected feature modules to a freshly acquired base template:

1. patch ``package.json`` dependencies,
2. append Expo config plugins in ``app.json``,
3. render the module's source files,

module by module in the fixed backend-then-paywall order, and finally rewrites
the identity fields of both manifests.  Every step is awaited before the next
one starts because each manifest patch reads what the previous one wrote.

Failures are never swallowed and nothing is rolled back: whatever was written
before the failing step stays on disk for the user to inspect.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .features import TOKEN_STORAGE_IMPORT, FeatureModule, FeatureSelection, resolve_modules
from .identity import DEFAULT_BUNDLE_PREFIX, ProjectIdentity, derive_identity
from .manifest import APP_JSON, PACKAGE_JSON, patch_dependencies, patch_plugins, rewrite_identity
from .templates import TemplateRenderer


class CompositionResult(BaseModel):
    """What a ``compose`` run changed in the project."""

    project_path: Path
    identity: ProjectIdentity
    modules: list[str] = Field(default_factory=list)
    dependencies: dict[str, str] = Field(default_factory=dict)
    plugins: list[str] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list)


class Composer:
    """Applies feature modules and the identity rewrite to a project directory."""

    def __init__(
        self,
        renderer: TemplateRenderer | None = None,
        bundle_id_prefix: str = DEFAULT_BUNDLE_PREFIX,
    ) -> None:
        self.renderer = renderer or TemplateRenderer()
        self.bundle_id_prefix = bundle_id_prefix

    # -- Public API --------------------------------------------------------

    async def compose(
        self,
        project_path: str | Path,
        project_name: str,
        selection: FeatureSelection,
    ) -> CompositionResult:
        """Compose *selection* into the project at *project_path*.

        Args:
            project_path: Root of the base template copy (holds
                ``package.json`` and ``app.json``).
            project_name: Raw project name as entered by the user.
            selection: Backend and paywall choices.

        Returns:
            A ``CompositionResult`` describing the applied changes.

        Raises:
            ManifestReadError: A manifest is missing or malformed.
            ManifestWriteError: A manifest could not be written back.
            FileWriteError: A generated source file could not be written.
        """
        root = Path(project_path)
        identity = derive_identity(project_name, self.bundle_id_prefix)
        result = CompositionResult(project_path=root, identity=identity)
        context = self._build_context(identity)

        for module in resolve_modules(selection):
            await self.apply_module(root, module, context, result)

        await asyncio.to_thread(rewrite_identity, root, identity)
        return result

    async def apply_module(
        self,
        root: Path,
        module: FeatureModule,
        context: dict[str, Any],
        result: CompositionResult,
    ) -> None:
        """Apply one module's dependencies, plugins and files, in that order."""
        if module.dependencies:
            await asyncio.to_thread(
                patch_dependencies, root / PACKAGE_JSON, dict(module.dependencies)
            )
            result.dependencies.update(module.dependencies)

        if module.plugins:
            await asyncio.to_thread(patch_plugins, root / APP_JSON, list(module.plugins))
            result.plugins.extend(module.plugins)

        for generated in module.files:
            out = await self.renderer.render_to_file(
                generated.template, root / generated.path, context
            )
            if out not in result.files:
                result.files.append(out)

        result.modules.append(module.name)

    # -- Context building --------------------------------------------------

    def _build_context(self, identity: ProjectIdentity) -> dict[str, Any]:
        """Build the Jinja2 template context for generated files."""
        return {
            "project_name": identity.raw_name,
            "slug": identity.slug,
            "bundle_id": identity.bundle_id,
            "token_storage_import": TOKEN_STORAGE_IMPORT,
        }
