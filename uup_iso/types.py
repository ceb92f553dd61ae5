"""Shared type definitions for uup_iso.

This module contains enums, frozen records and constant sets shared across
subpackages to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum


class Architecture(str, Enum):
    """User-facing architecture names."""

    X64 = "x64"
    ARM64 = "arm64"

    @property
    def catalog_token(self) -> str:
        """Architecture token used by the catalog search."""
        return "amd64" if self is Architecture.X64 else "arm64"


class EditionChoice(str, Enum):
    """Edition names accepted from the user."""

    PRO = "pro"
    CORE = "core"
    MULTI = "multi"
    HOME = "home"


class Edition(str, Enum):
    """Edition class a target requires from the catalog."""

    PROFESSIONAL = "Professional"
    CORE = "Core"
    MULTI = "Multi"


class Ring(str, Enum):
    """Release ring a preview target is pinned to."""

    BETA = "Beta"
    WIF = "Wif"
    CANARY = "Canary"


class Endpoint(str, Enum):
    """Catalog API operations."""

    LIST_ID = "listid"
    LIST_LANGS = "listlangs"
    LIST_EDITIONS = "listeditions"
    GET = "get"


SUPPORTED_LANGUAGES: tuple[str, ...] = (
    "nb-no",
    "fr-ca",
    "fi-fi",
    "lv-lv",
    "es-es",
    "en-gb",
    "zh-tw",
    "th-th",
    "sv-se",
    "en-us",
    "es-mx",
    "bg-bg",
    "hr-hr",
    "pt-br",
    "el-gr",
    "cs-cz",
    "it-it",
    "sk-sk",
    "pl-pl",
    "sl-si",
    "neutral",
    "ja-jp",
    "et-ee",
    "ro-ro",
    "fr-fr",
    "pt-pt",
    "ar-sa",
    "lt-lt",
    "hu-hu",
    "da-dk",
    "zh-cn",
    "uk-ua",
    "tr-tr",
    "ru-ru",
    "nl-nl",
    "he-il",
    "ko-kr",
    "sr-latn-rs",
    "de-de",
)

# Tested in this order; the first keyword found in the target name wins.
PREVIEW_KEYWORDS: tuple[str, ...] = ("beta", "dev", "wif", "canary")


@dataclass(frozen=True)
class TargetDescriptor:
    """Catalog search parameters for one supported Windows release.

    Attributes:
        name: Unique target key (e.g., 'windows-11beta').
        search_term: Text sent verbatim to the catalog search.
        required_edition: Edition class the build must expose.
        ring: Release ring the build must report, None for retail.
        virtual_edition: Sub-edition forwarded to the packaging stage.
    """

    name: str
    search_term: str
    required_edition: Edition
    ring: Ring | None = None
    virtual_edition: str | None = None


@dataclass(frozen=True)
class RequestConfig:
    """Validated, normalized user request.

    Built once by the request resolver and read-only afterwards.
    """

    target_name: str
    architecture: Architecture
    edition_choice: EditionChoice
    required_edition: Edition
    language: str
    is_preview: bool = False
    ring_lower: str = ""
    esd: bool = False
    drivers: bool = False
    netfx3: bool = False
    destination_directory: str = "output"
    virtual_edition: str | None = None

    @property
    def arch(self) -> str:
        """Catalog architecture token (amd64 or arm64)."""
        return self.architecture.catalog_token


@dataclass
class CandidateBuild:
    """One build row returned by a catalog search.

    The availability fields are filled in by the enrichment stage of the
    filter pipeline.
    """

    uuid: str
    build_number: str
    title: str
    available_languages: frozenset[str] = field(default_factory=frozenset)
    release_ring: str | None = None
    available_editions: frozenset[str] = field(default_factory=frozenset)


__all__ = [
    "Architecture",
    "CandidateBuild",
    "Edition",
    "EditionChoice",
    "Endpoint",
    "PREVIEW_KEYWORDS",
    "RequestConfig",
    "Ring",
    "SUPPORTED_LANGUAGES",
    "TargetDescriptor",
]
