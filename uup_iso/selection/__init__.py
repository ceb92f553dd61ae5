"""Build selection module.

This module handles:
- Filtering catalog candidates down to a single build
- Building the SelectedBuild record and its download URLs
"""

from uup_iso.selection.pipeline import FilterPipeline
from uup_iso.selection.result import SelectedBuild, build_selected_build

__all__ = [
    "FilterPipeline",
    "SelectedBuild",
    "build_selected_build",
]
