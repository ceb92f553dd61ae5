"""UUP ISO - resolve Windows builds on UUP dump and assemble bootable ISOs.

This package resolves a friendly Windows target (release, architecture,
edition, language, ring) to exactly one catalog build and drives the vendor
conversion package that turns it into an ISO image.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
