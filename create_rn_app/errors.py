"""Exception hierarchy for create-rn-app.

Every failure the scaffolder can surface derives from ``ScaffoldError`` so the
CLI can report it uniformly.  The composer never swallows these; whatever was
already written to disk before the failure stays there.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""


class InvalidProjectName(ScaffoldError):
    """Raised when a project name fails validation (before any I/O)."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(reason)


class TemplateAcquisitionFailure(ScaffoldError):
    """Raised when the base template cannot be downloaded or copied."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"Could not acquire template {source!r}: {message}")


class ManifestReadError(ScaffoldError):
    """Raised when a manifest is missing or is not a valid JSON object."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot read manifest {self.path}: {message}")


class ManifestWriteError(ScaffoldError):
    """Raised when a patched manifest cannot be written back."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot write manifest {self.path}: {message}")


class FileWriteError(ScaffoldError):
    """Raised when a generated source file cannot be written."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot write {self.path}: {message}")
