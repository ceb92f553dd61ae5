"""Error definitions for uup_iso.

Every failure surfaced to the user derives from UupIsoError and carries a
stable ``code`` for programmatic handling. Resolution errors are fatal for
the whole run; nothing here is retried by callers.
"""

from __future__ import annotations

# Error code constants
INVALID_PARAMETER = "invalid_parameter"
UNKNOWN_TARGET = "unknown_target"
CATALOG_UNAVAILABLE = "catalog_unavailable"
UNEXPECTED_CATALOG_STATE = "unexpected_catalog_state"
NO_MATCHING_BUILD = "no_matching_build"
CANCELLED = "cancelled"
PACKAGE_DOWNLOAD_ERROR = "package_download_error"
EXTRACTION_ERROR = "extraction_error"
CONVERSION_ERROR = "conversion_failed"


class UupIsoError(Exception):
    """Base class for all uup_iso errors."""

    default_code = "internal_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code or self.default_code


class InvalidParameterError(UupIsoError):
    """Raised when user input is malformed or unsupported."""

    default_code = INVALID_PARAMETER

    def __init__(self, name: str, value: object, allowed: tuple[str, ...] = ()) -> None:
        message = f"Invalid {name}: {value!r}"
        if allowed:
            message += f". Must be one of: {', '.join(allowed)}"
        super().__init__(message)
        self.name = name
        self.value = value


class UnknownTargetError(UupIsoError):
    """Raised when a target name is not in the target catalog."""

    default_code = UNKNOWN_TARGET

    def __init__(self, target_name: str, known: tuple[str, ...] = ()) -> None:
        message = f"Unknown Windows target: {target_name!r}"
        if known:
            message += f". Known targets: {', '.join(known)}"
        super().__init__(message)
        self.target_name = target_name


class CatalogUnavailableError(UupIsoError):
    """Raised when a catalog call fails on every allowed attempt."""

    default_code = CATALOG_UNAVAILABLE

    def __init__(self, endpoint: str, attempts: int, last_error: str) -> None:
        super().__init__(
            f"Catalog endpoint {endpoint!r} failed after {attempts} attempts: "
            f"{last_error}"
        )
        self.endpoint = endpoint
        self.attempts = attempts
        self.last_error = last_error


class UnexpectedCatalogStateError(UupIsoError):
    """Raised when the catalog returns internally inconsistent data."""

    default_code = UNEXPECTED_CATALOG_STATE


class NoMatchingBuildError(UupIsoError):
    """Raised when no candidate build survives filtering."""

    default_code = NO_MATCHING_BUILD

    def __init__(
        self,
        search_term: str,
        language: str,
        edition: str,
        ring: str | None = None,
    ) -> None:
        message = (
            f"No build found for search {search_term!r} "
            f"(language: {language}, edition: {edition}"
        )
        message += f", ring: {ring})" if ring else ")"
        super().__init__(message)
        self.search_term = search_term
        self.language = language
        self.edition = edition
        self.ring = ring


class CancelledError(UupIsoError):
    """Raised when a cancellation signal aborts an in-flight operation."""

    default_code = CANCELLED


class PackageDownloadError(UupIsoError):
    """Raised when the conversion package cannot be downloaded."""

    default_code = PACKAGE_DOWNLOAD_ERROR


class ExtractionError(UupIsoError):
    """Raised when the conversion package cannot be extracted."""

    default_code = EXTRACTION_ERROR


class ConversionError(UupIsoError):
    """Raised when the vendor conversion script fails to run."""

    default_code = CONVERSION_ERROR

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.exit_code = exit_code


__all__ = [
    "CANCELLED",
    "CATALOG_UNAVAILABLE",
    "CONVERSION_ERROR",
    "EXTRACTION_ERROR",
    "INVALID_PARAMETER",
    "NO_MATCHING_BUILD",
    "PACKAGE_DOWNLOAD_ERROR",
    "UNEXPECTED_CATALOG_STATE",
    "UNKNOWN_TARGET",
    "CancelledError",
    "CatalogUnavailableError",
    "ConversionError",
    "ExtractionError",
    "InvalidParameterError",
    "NoMatchingBuildError",
    "PackageDownloadError",
    "UnexpectedCatalogStateError",
    "UnknownTargetError",
    "UupIsoError",
]
