"""High-level resolution and ISO build API.

This module provides:
- resolve_build(): target catalog lookup, filter pipeline, result builder
- build_iso(): resolve, fetch the conversion package, convert, finalize

Resolution is all-or-nothing: either exactly one SelectedBuild is returned
or an error from uup_iso.errors is raised.
"""

from __future__ import annotations

import logging
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path

import httpx

from uup_iso.catalog.client import CatalogClient
from uup_iso.catalog.targets import TargetCatalog
from uup_iso.config import Settings, get_settings
from uup_iso.errors import ConversionError, NoMatchingBuildError
from uup_iso.packaging.artifacts import IsoArtifact, finalize_iso, find_iso
from uup_iso.packaging.fetch import (
    PackageResult,
    download_package,
    extract_package,
    patch_convert_config,
)
from uup_iso.packaging.runner import ConversionResult, run_conversion
from uup_iso.selection.pipeline import FilterPipeline
from uup_iso.selection.result import SelectedBuild, build_selected_build
from uup_iso.types import RequestConfig

logger = logging.getLogger(__name__)


@dataclass
class IsoBuildResult:
    """Outcome of a full ISO build.

    ``conversion`` and ``artifact`` are None when conversion was skipped.
    """

    selected: SelectedBuild
    package: PackageResult
    package_dir: Path
    conversion: ConversionResult | None = None
    artifact: IsoArtifact | None = None


def resolve_build(
    request: RequestConfig,
    client: CatalogClient,
    cancel_event: threading.Event | None = None,
    settings: Settings | None = None,
) -> SelectedBuild:
    """Resolve a request to exactly one catalog build.

    Args:
        request: Validated request.
        client: Catalog client.
        cancel_event: Optional cancellation signal.
        settings: Settings providing the URL bases (defaults loaded from env).

    Returns:
        The selected build.

    Raises:
        UnknownTargetError: If the target name is not in the catalog.
        CatalogUnavailableError: If a catalog call exhausts its retries.
        UnexpectedCatalogStateError: If the catalog contradicts itself.
        NoMatchingBuildError: If no candidate survives filtering.
        CancelledError: If the cancel event is set.
    """
    settings = settings or get_settings()
    target = TargetCatalog.for_request(request).lookup(request.target_name)

    logger.info(
        "Resolving %s (%s, %s, %s)",
        target.name,
        request.arch,
        target.required_edition.value,
        request.language,
    )

    candidate = FilterPipeline(client, cancel_event=cancel_event).run(target, request)
    if candidate is None:
        raise NoMatchingBuildError(
            search_term=target.search_term,
            language=request.language,
            edition=target.required_edition.value,
            ring=target.ring.value if target.ring else None,
        )

    return build_selected_build(
        candidate,
        target,
        request,
        api_base_url=settings.api_base_url,
        web_base_url=settings.web_base_url,
    )


def build_iso(
    request: RequestConfig,
    settings: Settings | None = None,
    client: CatalogClient | None = None,
    http_client: httpx.Client | None = None,
    cancel_event: threading.Event | None = None,
    skip_conversion: bool = False,
    keep_work_dir: bool = False,
) -> IsoBuildResult:
    """Resolve a build and turn it into an ISO.

    Args:
        request: Validated request.
        settings: Application settings (defaults loaded from env).
        client: Catalog client (created from settings if not provided).
        http_client: HTTPX client for the package download.
        cancel_event: Optional cancellation signal.
        skip_conversion: Stop after preparing the conversion package.
        keep_work_dir: Keep the package directory after a successful build.

    Returns:
        IsoBuildResult describing the produced files.

    Raises:
        UupIsoError: On any resolution, download or conversion failure.
    """
    settings = settings or get_settings()
    owns_client = client is None
    if client is None:
        client = CatalogClient.from_settings(settings, cancel_event=cancel_event)

    try:
        selected = resolve_build(request, client, cancel_event, settings)
    finally:
        if owns_client:
            client.close()

    logger.info("Selected %s: %s", selected.id, selected.title)

    work_dir = settings.work_dir / selected.id
    package_dir = work_dir / "package"

    owns_http = http_client is None
    if http_client is None:
        http_client = httpx.Client(headers={"User-Agent": settings.user_agent})
    try:
        package = download_package(http_client, selected, request, work_dir)
    finally:
        if owns_http:
            http_client.close()

    extract_package(package.path, package_dir)
    patch_convert_config(package_dir, request)

    if skip_conversion:
        logger.info("Conversion skipped; package prepared in %s", package_dir)
        return IsoBuildResult(selected=selected, package=package, package_dir=package_dir)

    conversion = run_conversion(
        package_dir,
        log_path=work_dir / "conversion.log",
        timeout=settings.conversion_timeout,
    )
    if not conversion.success:
        raise ConversionError(
            conversion.error_message or "Conversion failed",
            exit_code=conversion.exit_code,
        )

    iso_path = find_iso(package_dir)
    if iso_path is None:
        raise ConversionError(
            f"Conversion finished but no ISO was found in {package_dir}",
            exit_code=conversion.exit_code,
            code="iso_not_found",
        )

    artifact = finalize_iso(
        iso_path,
        Path(request.destination_directory),
        request.target_name,
        selected,
    )

    if not keep_work_dir:
        logger.info("Cleaning up %s", work_dir)
        shutil.rmtree(work_dir, ignore_errors=True)

    return IsoBuildResult(
        selected=selected,
        package=package,
        package_dir=package_dir,
        conversion=conversion,
        artifact=artifact,
    )


__all__ = ["IsoBuildResult", "build_iso", "resolve_build"]
