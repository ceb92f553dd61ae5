"""Selected build record and download URL construction.

The three URLs share id, language and edition but differ in path and in how
the language is named (``lang`` on the API host, ``pack`` on the web host).
The parameter order matches what the remote service produces itself.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from uup_iso.config import DEFAULT_API_BASE_URL, DEFAULT_WEB_BASE_URL
from uup_iso.types import (
    CandidateBuild,
    EditionChoice,
    Endpoint,
    RequestConfig,
    TargetDescriptor,
)

MULTI_EDITION_PARAM = "core;professional"


@dataclass(frozen=True)
class SelectedBuild:
    """The single build a request resolved to.

    Attributes:
        id: Catalog build UUID.
        title: Catalog title.
        build_number: Catalog build number.
        edition: Edition class the target required.
        virtual_edition: Sub-edition for the packaging stage, if any.
        api_url: API-host package URL.
        download_url: Interactive download page URL.
        download_package_url: Conversion package URL.
    """

    id: str
    title: str
    build_number: str
    edition: str
    virtual_edition: str | None
    api_url: str
    download_url: str
    download_package_url: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def edition_param(target: TargetDescriptor, request: RequestConfig) -> str:
    """Return the edition query value for the generated URLs."""
    if request.edition_choice is EditionChoice.MULTI:
        return MULTI_EDITION_PARAM
    return target.required_edition.value


def build_selected_build(
    candidate: CandidateBuild,
    target: TargetDescriptor,
    request: RequestConfig,
    api_base_url: str = DEFAULT_API_BASE_URL,
    web_base_url: str = DEFAULT_WEB_BASE_URL,
) -> SelectedBuild:
    """Promote a surviving candidate to a SelectedBuild.

    Args:
        candidate: Candidate that passed the filter pipeline.
        target: Target descriptor it was resolved for.
        request: Validated request.
        api_base_url: Base URL of the catalog API host.
        web_base_url: Base URL of the download site.

    Returns:
        SelectedBuild with all URLs populated.
    """
    build_id = candidate.uuid
    lang = request.language
    edition = edition_param(target, request)
    api = api_base_url.rstrip("/")
    web = web_base_url.rstrip("/")
    get = Endpoint.GET.value

    return SelectedBuild(
        id=build_id,
        title=candidate.title,
        build_number=candidate.build_number,
        edition=target.required_edition.value,
        virtual_edition=target.virtual_edition,
        api_url=f"{api}/{get}.php?id={build_id}&lang={lang}&edition={edition}",
        download_url=f"{web}/download.php?id={build_id}&edition={edition}&pack={lang}",
        download_package_url=f"{web}/{get}.php?id={build_id}&edition={edition}&pack={lang}",
    )


__all__ = [
    "MULTI_EDITION_PARAM",
    "SelectedBuild",
    "build_selected_build",
    "edition_param",
]
