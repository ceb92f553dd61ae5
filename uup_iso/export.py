"""Request configuration export.

Writes the resolved request together with the full target table so other
tools in the ISO pipeline can consume the same parameters.
"""

import json
from pathlib import Path
from typing import Any, Literal

import yaml

from uup_iso.catalog.targets import TargetCatalog
from uup_iso.types import RequestConfig

DEFAULT_CONFIG_PATH = Path("windows-iso-config.json")


def request_to_dict(request: RequestConfig) -> dict[str, Any]:
    """Convert a request and its target table to a serializable dict.

    Args:
        request: Validated request.

    Returns:
        Dictionary with camelCase keys.
    """
    catalog = TargetCatalog.for_request(request)
    targets: dict[str, dict[str, str]] = {}
    for name, target in catalog.items():
        entry = {
            "search": target.search_term,
            "edition": target.required_edition.value,
        }
        if target.ring is not None:
            entry["ring"] = target.ring.value
        if target.virtual_edition:
            entry["virtualEdition"] = target.virtual_edition
        targets[name] = entry

    return {
        "windowsTargetName": request.target_name,
        "destinationDirectory": request.destination_directory,
        "architecture": request.architecture.value,
        "arch": request.arch,
        "edition": request.edition_choice.value,
        "lang": request.language,
        "esd": request.esd,
        "drivers": request.drivers,
        "netfx3": request.netfx3,
        "preview": request.is_preview,
        "ringLower": request.ring_lower,
        "targets": targets,
    }


def export_request_config(
    request: RequestConfig,
    path: Path = DEFAULT_CONFIG_PATH,
    output_format: Literal["json", "yaml"] = "json",
) -> Path:
    """Write the request configuration to a file.

    Args:
        request: Validated request.
        path: Output file path.
        output_format: Output format ('json' or 'yaml').

    Returns:
        The written path.

    Raises:
        ValueError: If the format is unsupported.
    """
    data = request_to_dict(request)
    if output_format == "json":
        content = json.dumps(data, indent=2) + "\n"
    elif output_format == "yaml":
        content = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    else:
        raise ValueError(f"Unsupported format: {output_format}. Use 'json' or 'yaml'")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


__all__ = ["DEFAULT_CONFIG_PATH", "export_request_config", "request_to_dict"]
