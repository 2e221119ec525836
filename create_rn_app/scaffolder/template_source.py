"""Acquisition of the base template.

A template reference is either a local directory (copied as-is) or a GitHub
``owner/repo[#ref]`` shorthand, fetched as a tarball from codeload and
extracted with its top-level ``<repo>-<sha>/`` directory stripped -- the same
thing ``degit`` does, without needing Node or git on the machine.
"""

from __future__ import annotations

import asyncio
import io
import re
import shutil
import tarfile
import zlib
from pathlib import Path, PurePosixPath

import httpx

from create_rn_app.errors import TemplateAcquisitionFailure

from .manifest import APP_JSON, PACKAGE_JSON

CODELOAD_URL = "https://codeload.github.com/{repo}/tar.gz/{ref}"

_GITHUB_REF_RE = re.compile(r"^(?P<repo>[\w.-]+/[\w.-]+)(?:#(?P<ref>[\w./-]+))?$")

# Never copied from a local template.
_IGNORED = (".git", "node_modules")


def tarball_url(reference: str) -> str:
    """Return the codeload tarball URL for a GitHub ``owner/repo[#ref]`` reference.

    Raises:
        TemplateAcquisitionFailure: If *reference* is not in that form.
    """
    match = _GITHUB_REF_RE.match(reference)
    if match is None:
        raise TemplateAcquisitionFailure(reference, "not a local directory or 'owner/repo[#ref]'")
    return CODELOAD_URL.format(repo=match["repo"], ref=match["ref"] or "HEAD")


async def acquire_template(
    source: str,
    destination: str | Path,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """Materialise the base template at *destination*.

    Args:
        source: Local directory or GitHub ``owner/repo[#ref]``.
        destination: Project directory to create; must not exist yet.
        timeout: HTTP timeout in seconds for the tarball download.
        client: Optional pre-configured ``httpx.AsyncClient`` (used by tests).

    Returns:
        The destination path.

    Raises:
        TemplateAcquisitionFailure: If the destination exists, the download
            or copy fails, or the result lacks ``package.json``/``app.json``.
            A partially created destination is removed first, since nothing in
            it belongs to the user yet.
    """
    dest = Path(destination)
    if dest.exists():
        raise TemplateAcquisitionFailure(source, f"destination {dest} already exists")

    try:
        local = Path(source).expanduser()
        if local.is_dir():
            await asyncio.to_thread(
                shutil.copytree, local, dest, ignore=shutil.ignore_patterns(*_IGNORED)
            )
        else:
            payload = await _download(source, timeout, client)
            await asyncio.to_thread(_extract_tarball, payload, dest)
        _check_template(source, dest)
    except TemplateAcquisitionFailure:
        shutil.rmtree(dest, ignore_errors=True)
        raise
    except (OSError, tarfile.TarError) as exc:
        shutil.rmtree(dest, ignore_errors=True)
        raise TemplateAcquisitionFailure(source, str(exc)) from exc

    return dest


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _download(
    reference: str, timeout: float, client: httpx.AsyncClient | None
) -> bytes:
    url = tarball_url(reference)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0))
    try:
        response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
        return response.content
    except httpx.HTTPStatusError as exc:
        raise TemplateAcquisitionFailure(
            reference, f"HTTP {exc.response.status_code} from {url}"
        ) from exc
    except httpx.HTTPError as exc:
        raise TemplateAcquisitionFailure(reference, f"download failed: {exc}") from exc
    finally:
        if owns_client:
            await client.aclose()


def _extract_tarball(payload: bytes, dest: Path) -> None:
    """Extract a GitHub tarball into *dest*, dropping the top-level directory."""
    dest.mkdir(parents=True)
    try:
        _extract_members(payload, dest)
    except (EOFError, zlib.error) as exc:
        raise tarfile.ReadError(f"truncated or corrupt archive: {exc}") from exc


def _extract_members(payload: bytes, dest: Path) -> None:
    with tarfile.open(fileobj=io.BytesIO(payload), mode="r:gz") as tf:
        for member in tf.getmembers():
            parts = PurePosixPath(member.name).parts
            if member.name.startswith("/") or ".." in parts:
                raise tarfile.TarError(f"unsafe path in archive: {member.name}")
            if len(parts) < 2 or member.issym() or member.islnk():
                continue
            target = dest.joinpath(*parts[1:])
            if member.isdir():
                target.mkdir(parents=True, exist_ok=True)
            elif member.isfile():
                extracted = tf.extractfile(member)
                if extracted is None:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(extracted.read())
                target.chmod(member.mode & 0o777 or 0o644)


def _check_template(source: str, dest: Path) -> None:
    for name in (PACKAGE_JSON, APP_JSON):
        if not (dest / name).is_file():
            raise TemplateAcquisitionFailure(source, f"template has no {name}")
