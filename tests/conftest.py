"""Shared pytest fixtures for the create-rn-app test suite.

Provides reusable fixtures for:
- A realistic base template (package.json, app.json, token storage)
- A fresh project directory copied from that template
- Mock subprocess helpers
- Rich console capture
"""

from __future__ import annotations

import io
import json
import shutil
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest


# ---------------------------------------------------------------------------
# Base template content
# ---------------------------------------------------------------------------

BASE_PACKAGE_JSON: dict[str, Any] = {
    "name": "react-native-template",
    "main": "expo-router/entry",
    "version": "1.0.0",
    "scripts": {
        "start": "expo start",
        "android": "expo run:android",
        "ios": "expo run:ios",
        "lint": "expo lint",
    },
    "dependencies": {
        "@react-native-async-storage/async-storage": "1.23.1",
        "axios": "^1.7.9",
        "expo": "~52.0.23",
        "expo-constants": "~17.0.3",
        "expo-router": "~4.0.15",
        "expo-secure-store": "~14.0.0",
        "react": "18.3.1",
        "react-native": "0.76.5",
        "zustand": "^5.0.2",
    },
    "devDependencies": {
        "@babel/core": "^7.25.2",
        "typescript": "^5.3.3",
    },
    "private": True,
}

BASE_APP_JSON: dict[str, Any] = {
    "expo": {
        "name": "my-first-app",
        "slug": "my-first-app",
        "version": "1.0.0",
        "orientation": "portrait",
        "icon": "./assets/images/icon.png",
        "scheme": "myfirstapp",
        "userInterfaceStyle": "automatic",
        "newArchEnabled": True,
        "ios": {
            "supportsTablet": True,
            "bundleIdentifier": "com.yourcompany.myfirstapp",
        },
        "android": {
            "adaptiveIcon": {
                "foregroundImage": "./assets/images/adaptive-icon.png",
                "backgroundColor": "#ffffff",
            },
            "package": "com.yourcompany.myfirstapp",
        },
        "plugins": ["expo-router", "expo-secure-store"],
        "experiments": {"typedRoutes": True},
    }
}

TOKEN_STORAGE_TS = """\
export async function getToken(): Promise<string | null> { return null; }
export async function setToken(token: string): Promise<void> {}
export async function deleteToken(): Promise<void> {}
"""


def write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def base_template(tmp_path: Path) -> Path:
    """A local base template directory mirroring the real Expo template."""
    root = tmp_path / "template"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "src" / "hooks").mkdir(parents=True)
    (root / "app").mkdir()
    write_json(root / "package.json", BASE_PACKAGE_JSON)
    write_json(root / "app.json", BASE_APP_JSON)
    (root / "src" / "lib" / "storage.ts").write_text(TOKEN_STORAGE_TS, encoding="utf-8")
    (root / "src" / "hooks" / "useAuth.ts").write_text(
        "export function useAuth() {}\n", encoding="utf-8"
    )
    (root / "app" / "index.tsx").write_text(
        "export default function Home() { return null; }\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def project_dir(tmp_path: Path, base_template: Path) -> Path:
    """A fresh project directory, as left behind by template acquisition."""
    dest = tmp_path / "projects" / "demo-app"
    shutil.copytree(base_template, dest)
    return dest


@pytest.fixture
def package_json(project_dir: Path) -> Path:
    return project_dir / "package.json"


@pytest.fixture
def app_json(project_dir: Path) -> Path:
    return project_dir / "app.json"


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Console capture
# ---------------------------------------------------------------------------

@pytest.fixture
def quiet_console(monkeypatch):
    """Route the shared Rich console to an in-memory buffer.

    Returns the console; call ``console.export_text()`` to inspect output.
    """
    from rich.console import Console

    from create_rn_app import cli, utils

    recording = Console(record=True, width=120, file=io.StringIO())
    monkeypatch.setattr(utils, "console", recording)
    monkeypatch.setattr(cli, "console", recording)
    return recording
