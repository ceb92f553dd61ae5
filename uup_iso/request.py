"""Request resolution for uup_iso.

This module handles:
- Validating architecture, edition and language against the supported sets
- Mapping user-facing values to catalog values (x64 -> amd64, home -> Core)
- Detecting preview targets and their ring keyword from the target name

All validation happens before any network activity.
"""

from __future__ import annotations

from uup_iso.errors import InvalidParameterError
from uup_iso.types import (
    PREVIEW_KEYWORDS,
    SUPPORTED_LANGUAGES,
    Architecture,
    Edition,
    EditionChoice,
    RequestConfig,
)

VALID_ARCHITECTURES = tuple(a.value for a in Architecture)
VALID_EDITIONS = tuple(e.value for e in EditionChoice)


def edition_for_choice(choice: EditionChoice) -> Edition:
    """Map a user edition choice to the edition class required from the catalog.

    Args:
        choice: User edition choice.

    Returns:
        Core for core/home, Multi for multi, Professional otherwise.
    """
    if choice in (EditionChoice.CORE, EditionChoice.HOME):
        return Edition.CORE
    if choice is EditionChoice.MULTI:
        return Edition.MULTI
    return Edition.PROFESSIONAL


def detect_ring(target_name: str) -> tuple[bool, str]:
    """Detect whether a target name denotes a preview build.

    Args:
        target_name: Raw target name as given by the user.

    Returns:
        Tuple of (is_preview, ring keyword or empty string).
    """
    for keyword in PREVIEW_KEYWORDS:
        if keyword in target_name:
            return True, keyword
    return False, ""


def resolve_request(
    target_name: str,
    architecture: str = "x64",
    edition: str = "pro",
    language: str = "en-us",
    esd: bool = False,
    drivers: bool = False,
    netfx3: bool = False,
    destination_directory: str = "output",
    virtual_edition: str | None = None,
) -> RequestConfig:
    """Validate user parameters and build the canonical request.

    Args:
        target_name: Windows target name (e.g., 'windows-11').
        architecture: x64 or arm64.
        edition: pro, core, multi or home.
        language: Locale code from the supported set.
        esd: Produce an ESD-compressed install image.
        drivers: Add drivers during conversion.
        netfx3: Integrate .NET Framework 3.5.
        destination_directory: Directory receiving the ISO.
        virtual_edition: Optional virtual edition for the packaging stage.

    Returns:
        Immutable RequestConfig.

    Raises:
        InvalidParameterError: If any parameter is missing or unsupported.
    """
    if not target_name:
        raise InvalidParameterError("windows-target-name", target_name)

    if architecture not in VALID_ARCHITECTURES:
        raise InvalidParameterError("architecture", architecture, VALID_ARCHITECTURES)

    if edition not in VALID_EDITIONS:
        raise InvalidParameterError("edition", edition, VALID_EDITIONS)

    if language not in SUPPORTED_LANGUAGES:
        raise InvalidParameterError("language", language)

    edition_choice = EditionChoice(edition)
    is_preview, ring_lower = detect_ring(target_name)

    return RequestConfig(
        target_name=target_name,
        architecture=Architecture(architecture),
        edition_choice=edition_choice,
        required_edition=edition_for_choice(edition_choice),
        language=language,
        is_preview=is_preview,
        ring_lower=ring_lower,
        esd=esd,
        drivers=drivers,
        netfx3=netfx3,
        destination_directory=destination_directory,
        virtual_edition=virtual_edition or None,
    )


__all__ = [
    "VALID_ARCHITECTURES",
    "VALID_EDITIONS",
    "detect_ring",
    "edition_for_choice",
    "resolve_request",
]
