"""Conversion package download and preparation.

This module handles:
- Composing the package request form from a request and selected build
- Downloading the conversion package zip with checksum computation
- Safe extraction of the package
- Forcing conversion options in ConvertConfig.ini
"""

from __future__ import annotations

import configparser
import hashlib
import logging
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path

import httpx

from uup_iso.errors import ExtractionError, PackageDownloadError
from uup_iso.selection.result import SelectedBuild
from uup_iso.types import RequestConfig

logger = logging.getLogger(__name__)

# Timeout for the package request (seconds)
PACKAGE_TIMEOUT = 120

# Chunk size for downloads (bytes)
DOWNLOAD_CHUNK_SIZE = 64 * 1024  # 64 KB

CONVERT_CONFIG_NAME = "ConvertConfig.ini"
CONVERT_SECTION = "convert-UUP"

FILENAME_PATTERN = re.compile(r'filename="?([^";]+\.zip)"?')


@dataclass
class PackageResult:
    """Result of a conversion package download."""

    path: Path
    sha256: str
    size_bytes: int


def build_package_form(
    request: RequestConfig,
    selected: SelectedBuild,
) -> dict[str, str | list[str]]:
    """Compose the form posted to the package endpoint.

    Args:
        request: Validated request.
        selected: Selected build.

    Returns:
        Form fields for the POST request.
    """
    form: dict[str, str | list[str]] = {"updates": "1", "cleanup": "1"}
    if request.netfx3:
        form["dotnet"] = "1"
    if request.esd:
        form["esd"] = "1"

    if selected.virtual_edition:
        form["autodl"] = "3"
        form["virtualEditions[]"] = [selected.virtual_edition]
    else:
        form["autodl"] = "2"
    return form


def package_filename(response: httpx.Response, build_id: str) -> str:
    """Pick the package file name from Content-Disposition.

    Args:
        response: Package response.
        build_id: Build UUID used in the fallback name.

    Returns:
        Bare file name of the zip.
    """
    disposition = response.headers.get("Content-Disposition", "")
    match = FILENAME_PATTERN.search(disposition)
    if match:
        return Path(match.group(1)).name
    return f"uup-package-{build_id}.zip"


def download_package(
    client: httpx.Client,
    selected: SelectedBuild,
    request: RequestConfig,
    dest_dir: Path,
    timeout: float = PACKAGE_TIMEOUT,
) -> PackageResult:
    """Download the conversion package for a selected build.

    Args:
        client: HTTPX client instance.
        selected: Selected build.
        request: Validated request.
        dest_dir: Directory for the downloaded zip.
        timeout: Request timeout in seconds.

    Returns:
        PackageResult with path, checksum, and size.

    Raises:
        PackageDownloadError: If the download fails.
    """
    url = selected.download_package_url
    form = build_package_form(request, selected)
    logger.info("Downloading conversion package from %s", url)

    try:
        with client.stream("POST", url, data=form, timeout=timeout) as response:
            response.raise_for_status()

            dest_dir.mkdir(parents=True, exist_ok=True)
            dest_path = dest_dir / package_filename(response, selected.id)
            sha256 = hashlib.sha256()
            total_bytes = 0

            with dest_path.open("wb") as f:
                for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
                    sha256.update(chunk)
                    total_bytes += len(chunk)

    except httpx.HTTPStatusError as e:
        raise PackageDownloadError(
            f"HTTP error downloading {url}: {e.response.status_code} {e.response.reason_phrase}",
            code="http_error",
        ) from e
    except httpx.TimeoutException as e:
        raise PackageDownloadError(
            f"Timeout downloading {url}",
            code="timeout",
        ) from e
    except httpx.RequestError as e:
        raise PackageDownloadError(
            f"Network error downloading {url}: {e}",
            code="network_error",
        ) from e

    if not zipfile.is_zipfile(dest_path):
        dest_path.unlink(missing_ok=True)
        raise PackageDownloadError(
            f"Package from {url} is not a zip archive",
            code="bad_package",
        )

    logger.info(
        "Downloaded %s (%d bytes, checksum: %s)",
        dest_path.name,
        total_bytes,
        sha256.hexdigest()[:16] + "...",
    )
    return PackageResult(path=dest_path, sha256=sha256.hexdigest(), size_bytes=total_bytes)


def extract_package(zip_path: Path, dest_dir: Path) -> Path:
    """Extract the conversion package.

    Args:
        zip_path: Path to the package zip.
        dest_dir: Destination directory.

    Returns:
        The destination directory.

    Raises:
        ExtractionError: If the archive is invalid or unsafe.
    """
    logger.info("Extracting %s to %s", zip_path.name, dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    try:
        with zipfile.ZipFile(zip_path) as archive:
            names = archive.namelist()
            if not names:
                raise ExtractionError(f"Archive {zip_path} is empty", code="empty_archive")
            for name in names:
                member_path = Path(name)
                if member_path.is_absolute() or ".." in member_path.parts:
                    raise ExtractionError(
                        f"Refusing to extract {name}: path traversal detected",
                        code="path_traversal",
                    )
            archive.extractall(dest_dir)
    except zipfile.BadZipFile as e:
        raise ExtractionError(f"Failed to extract {zip_path}: {e}", code="bad_zip") from e
    except OSError as e:
        raise ExtractionError(f"OS error extracting {zip_path}: {e}", code="os_error") from e

    return dest_dir


def convert_options(request: RequestConfig) -> dict[str, str]:
    """Return the ConvertConfig.ini options forced for a request."""
    return {
        "AutoStart": "1",
        "AddUpdates": "1",
        "Cleanup": "1",
        "ResetBase": "0",
        "NetFx3": "1" if request.netfx3 else "0",
        "StartVirtual": "1" if request.virtual_edition else "0",
        "wim2esd": "1" if request.esd else "0",
        "SkipWinRE": "0",
        "AddDrivers": "1" if request.drivers else "0",
    }


def patch_convert_config(root: Path, request: RequestConfig) -> Path:
    """Force conversion options in the package's ConvertConfig.ini.

    Other sections and keys are preserved.

    Args:
        root: Extracted package directory.
        request: Validated request.

    Returns:
        Path to the written ConvertConfig.ini.
    """
    ini_path = root / CONVERT_CONFIG_NAME
    config = configparser.ConfigParser(interpolation=None)
    config.optionxform = str  # type: ignore[assignment,method-assign]
    if ini_path.exists():
        config.read(ini_path, encoding="utf-8")

    if not config.has_section(CONVERT_SECTION):
        config.add_section(CONVERT_SECTION)

    for key, value in convert_options(request).items():
        logger.debug("Setting %s %s=%s", CONVERT_CONFIG_NAME, key, value)
        config.set(CONVERT_SECTION, key, value)

    with ini_path.open("w", encoding="utf-8") as f:
        config.write(f, space_around_delimiters=False)
    return ini_path


__all__ = [
    "CONVERT_CONFIG_NAME",
    "CONVERT_SECTION",
    "PackageResult",
    "build_package_form",
    "convert_options",
    "download_package",
    "extract_package",
    "package_filename",
    "patch_convert_config",
]
