"""UUP dump catalog access.

This module handles:
- Calling the catalog's JSON endpoints with bounded retry
- The static table of supported Windows targets
"""

from uup_iso.catalog.client import CatalogClient
from uup_iso.catalog.targets import TargetCatalog, target_names

__all__ = [
    "CatalogClient",
    "TargetCatalog",
    "target_names",
]
