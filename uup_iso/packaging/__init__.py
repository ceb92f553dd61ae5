"""Packaging stage: conversion package, conversion script and ISO output.

This module handles:
- Downloading and preparing the vendor conversion package
- Running the conversion script
- Finalizing the ISO with checksum and metadata files
"""

from uup_iso.packaging.artifacts import (
    IsoArtifact,
    compute_file_hash,
    finalize_iso,
    find_iso,
)
from uup_iso.packaging.fetch import (
    PackageResult,
    download_package,
    extract_package,
    patch_convert_config,
)
from uup_iso.packaging.runner import (
    ConversionLogFilter,
    ConversionResult,
    run_conversion,
)

__all__ = [
    "ConversionLogFilter",
    "ConversionResult",
    "IsoArtifact",
    "PackageResult",
    "compute_file_hash",
    "download_package",
    "extract_package",
    "finalize_iso",
    "find_iso",
    "patch_convert_config",
    "run_conversion",
]
