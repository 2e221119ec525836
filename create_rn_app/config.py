"""create-rn-app configuration.

Typed settings for a scaffolding run.  Uses a Pydantic v2 model so values are
validated at construction time and can be round-tripped through JSON or built
from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


DEFAULT_TEMPLATE = "itskritix/react-native-template"


class Config(BaseModel):
    """Global create-rn-app configuration.

    Created once by the CLI entry point and handed to the template fetcher,
    the composer and the installer.
    """

    template: str = Field(
        default=DEFAULT_TEMPLATE,
        description="GitHub 'owner/repo[#ref]' or a local directory holding the base template",
    )
    package_manager: str = Field(default="pnpm")
    install_timeout: int = Field(default=600, ge=10, description="Install timeout in seconds")
    download_timeout: float = Field(default=60.0, gt=0, description="Template download timeout in seconds")
    bundle_id_prefix: str = Field(default="com.yourcompany")
    output_dir: Path = Field(default=Path("."))

    def project_path(self, project_name: str) -> Path:
        """Directory the new project is created in."""
        return (self.output_dir / project_name).resolve()

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CREATE_RN_APP_TEMPLATE, CREATE_RN_APP_PACKAGE_MANAGER,
            CREATE_RN_APP_INSTALL_TIMEOUT, CREATE_RN_APP_DOWNLOAD_TIMEOUT,
            CREATE_RN_APP_BUNDLE_ID_PREFIX, CREATE_RN_APP_OUTPUT_DIR.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_RN_APP_TEMPLATE"):
            kwargs["template"] = os.environ["CREATE_RN_APP_TEMPLATE"]
        if os.environ.get("CREATE_RN_APP_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["CREATE_RN_APP_PACKAGE_MANAGER"]
        if os.environ.get("CREATE_RN_APP_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["CREATE_RN_APP_INSTALL_TIMEOUT"])
        if os.environ.get("CREATE_RN_APP_DOWNLOAD_TIMEOUT"):
            kwargs["download_timeout"] = float(os.environ["CREATE_RN_APP_DOWNLOAD_TIMEOUT"])
        if os.environ.get("CREATE_RN_APP_BUNDLE_ID_PREFIX"):
            kwargs["bundle_id_prefix"] = os.environ["CREATE_RN_APP_BUNDLE_ID_PREFIX"]
        if os.environ.get("CREATE_RN_APP_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["CREATE_RN_APP_OUTPUT_DIR"])
        return cls(**kwargs)
