"""create-rn-app scaffolder -- composes optional integrations into a base template.

Given a freshly acquired Expo template, the ``Composer`` merges each selected
feature module's npm dependencies into ``package.json``, its config plugins
into ``app.json``, renders its source files, and finally rewrites the project
identity (name, slug, bundle identifier).

Quick usage::

    from create_rn_app.scaffolder import Backend, Composer, FeatureSelection

    selection = FeatureSelection(backend=Backend.SUPABASE, paywall=True)
    result = await Composer().compose("./demo-app", "demo-app", selection)
"""

from create_rn_app.scaffolder.composer import Composer, CompositionResult
from create_rn_app.scaffolder.features import (
    Backend,
    FeatureModule,
    FeatureSelection,
    GeneratedFile,
    resolve_modules,
)
from create_rn_app.scaffolder.identity import ProjectIdentity, derive_identity, validate_project_name
from create_rn_app.scaffolder.manifest import patch_dependencies, patch_plugins, rewrite_identity
from create_rn_app.scaffolder.templates import TemplateRenderer

__all__ = [
    "Backend",
    "Composer",
    "CompositionResult",
    "FeatureModule",
    "FeatureSelection",
    "GeneratedFile",
    "ProjectIdentity",
    "TemplateRenderer",
    "derive_identity",
    "patch_dependencies",
    "patch_plugins",
    "resolve_modules",
    "rewrite_identity",
    "validate_project_name",
]
