"""Package-manager install step.

Runs ``<package_manager> install`` inside the generated project.  The install
reads the ``package.json`` the composer just wrote; a failure here never fails
the scaffold -- the caller downgrades it to a "run it manually" warning.
"""

from __future__ import annotations

from pathlib import Path

from create_rn_app.utils import run_command


async def install_dependencies(
    project_path: str | Path,
    package_manager: str = "pnpm",
    timeout: int = 600,
) -> tuple[bool, str]:
    """Install dependencies in *project_path*.

    Returns:
        ``(ok, detail)`` where *detail* is the tail of stderr on failure.
    """
    returncode, _stdout, stderr = await run_command(
        [package_manager, "install"], cwd=project_path, timeout=timeout
    )
    if returncode == 0:
        return True, ""
    detail = "\n".join(stderr.splitlines()[-5:]) if stderr else f"exit code {returncode}"
    return False, detail
