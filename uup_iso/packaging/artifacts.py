"""ISO artifact discovery and checksum files.

This module handles:
- Finding the ISO produced by the conversion script
- Computing its SHA-256 checksum
- Moving it to the destination directory with checksum and metadata files
"""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from uup_iso.selection.result import SelectedBuild

logger = logging.getLogger(__name__)

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


@dataclass
class IsoArtifact:
    """A finished ISO and its sidecar files."""

    iso_path: Path
    sha256: str
    size_bytes: int
    checksum_path: Path
    metadata_path: Path


def compute_file_hash(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def find_iso(root: Path) -> Path | None:
    """Find the ISO written by the conversion script.

    Args:
        root: Directory the script ran in.

    Returns:
        The ISO path (most recently modified if several), or None.
    """
    isos = [p for p in root.glob("*.iso") if p.is_file()]
    if not isos:
        return None
    if len(isos) > 1:
        logger.warning("Multiple ISOs found in %s: %s", root, [p.name for p in isos])
    return max(isos, key=lambda p: p.stat().st_mtime)


def finalize_iso(
    iso_path: Path,
    destination_dir: Path,
    target_name: str,
    selected: SelectedBuild,
) -> IsoArtifact:
    """Move the ISO to its destination and write sidecar files.

    Writes ``<target>.iso.sha256.txt`` in ``<hex>  <name>`` form and
    ``<target>.iso.json`` with the selected build and checksum.

    Args:
        iso_path: ISO produced by the conversion script.
        destination_dir: Output directory.
        target_name: Target name used for the file names.
        selected: Build the ISO was made from.

    Returns:
        IsoArtifact describing the written files.
    """
    destination_dir.mkdir(parents=True, exist_ok=True)
    final_path = destination_dir / f"{target_name}.iso"

    logger.info("Moving %s to %s", iso_path.name, final_path)
    shutil.move(str(iso_path), str(final_path))

    logger.info("Computing checksum of %s", final_path.name)
    checksum = compute_file_hash(final_path)
    size_bytes = final_path.stat().st_size

    checksum_path = destination_dir / f"{final_path.name}.sha256.txt"
    checksum_path.write_text(f"{checksum}  {final_path.name}\n", encoding="utf-8")

    metadata_path = destination_dir / f"{final_path.name}.json"
    metadata = {
        "name": target_name,
        "iso": final_path.name,
        "sha256": checksum,
        "size_bytes": size_bytes,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "build": selected.to_dict(),
    }
    metadata_path.write_text(json.dumps(metadata, indent=2) + "\n", encoding="utf-8")

    logger.info("ISO ready: %s (sha256 %s)", final_path, checksum)
    return IsoArtifact(
        iso_path=final_path,
        sha256=checksum,
        size_bytes=size_bytes,
        checksum_path=checksum_path,
        metadata_path=metadata_path,
    )


__all__ = [
    "IsoArtifact",
    "compute_file_hash",
    "finalize_iso",
    "find_iso",
]
