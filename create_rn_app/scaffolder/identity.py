"""Project identity: slug and bundle identifier derived from the project name.

``derive_identity`` is a pure, total function -- it accepts any string and
never raises.  Deciding whether a name is *reasonable* is the job of
``validate_project_name``, which the CLI runs at the input boundary before any
file is touched.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from create_rn_app.errors import InvalidProjectName

DEFAULT_BUNDLE_PREFIX = "com.yourcompany"

_PROJECT_NAME_RE = re.compile(r"^[a-z0-9_-]+$", re.IGNORECASE)
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9-]")


class ProjectIdentity(BaseModel):
    """Identity fields written into the generated manifests."""

    model_config = ConfigDict(frozen=True)

    raw_name: str
    slug: str
    bundle_id: str


def slugify(raw_name: str) -> str:
    """Lowercase *raw_name* and replace every char outside ``[a-z0-9-]`` with ``-``.

    Unlike most slug helpers, runs of dashes are neither collapsed nor
    stripped: ``"My App!"`` becomes ``"my-app-"``.
    """
    return _SLUG_INVALID_RE.sub("-", raw_name.lower())


def derive_identity(raw_name: str, prefix: str = DEFAULT_BUNDLE_PREFIX) -> ProjectIdentity:
    """Derive ``{slug, bundle_id}`` for *raw_name*.

    The bundle id is ``<prefix>.<slug without dashes>``; a name with no
    usable characters yields the degenerate ``"com.yourcompany."``.
    """
    slug = slugify(raw_name)
    return ProjectIdentity(
        raw_name=raw_name,
        slug=slug,
        bundle_id=f"{prefix}.{slug.replace('-', '')}",
    )


def validate_project_name(name: str, parent_dir: str | Path | None = None) -> str:
    """Check a user-supplied project name and return it unchanged.

    Raises:
        InvalidProjectName: If the name is empty, contains characters other
            than letters, digits, dashes and underscores, or collides with an
            existing entry in *parent_dir*.
    """
    if not name:
        raise InvalidProjectName(name, "Project name is required")
    if not _PROJECT_NAME_RE.match(name):
        raise InvalidProjectName(
            name,
            "Project name can only contain letters, numbers, dashes and underscores",
        )
    if parent_dir is not None and (Path(parent_dir) / name).exists():
        raise InvalidProjectName(name, f'Directory "{name}" already exists')
    return name
