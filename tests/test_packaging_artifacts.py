"""Tests for packaging/artifacts.py module."""

import hashlib
import json
import os

from uup_iso.packaging.artifacts import (
    IsoArtifact,
    compute_file_hash,
    finalize_iso,
    find_iso,
)
from uup_iso.selection.result import SelectedBuild


def _selected() -> SelectedBuild:
    return SelectedBuild(
        id="abc-123",
        title="Windows 11, version 24H2",
        build_number="26100.1",
        edition="Professional",
        virtual_edition=None,
        api_url="https://api.uupdump.net/get.php?id=abc-123&lang=en-us&edition=Professional",
        download_url="https://uupdump.net/download.php?id=abc-123&edition=Professional&pack=en-us",
        download_package_url="https://uupdump.net/get.php?id=abc-123&edition=Professional&pack=en-us",
    )


class TestComputeFileHash:
    """Tests for compute_file_hash function."""

    def test_matches_hashlib(self, tmp_path):
        """Should match a one-shot SHA-256."""
        path = tmp_path / "data.bin"
        content = os.urandom(200_000)
        path.write_bytes(content)

        assert compute_file_hash(path, chunk_size=4096) == hashlib.sha256(content).hexdigest()


class TestFindIso:
    """Tests for find_iso function."""

    def test_no_iso(self, tmp_path):
        """Should return None when the script produced nothing."""
        (tmp_path / "ConvertConfig.ini").touch()
        assert find_iso(tmp_path) is None

    def test_single_iso(self, tmp_path):
        """Should return the only ISO."""
        iso = tmp_path / "26100.1_professional_x64_en-us.iso"
        iso.write_bytes(b"iso")
        assert find_iso(tmp_path) == iso

    def test_newest_wins(self, tmp_path):
        """Should prefer the most recently modified ISO."""
        old = tmp_path / "old.iso"
        new = tmp_path / "new.iso"
        old.write_bytes(b"old")
        new.write_bytes(b"new")
        os.utime(old, (1_000_000, 1_000_000))
        os.utime(new, (2_000_000, 2_000_000))

        assert find_iso(tmp_path) == new


class TestFinalizeIso:
    """Tests for finalize_iso function."""

    def test_moves_and_writes_sidecars(self, tmp_path):
        """Should rename to the target name and write checksum and metadata."""
        work = tmp_path / "work"
        work.mkdir()
        produced = work / "26100.1_PROFESSIONAL_X64_EN-US.iso"
        produced.write_bytes(b"ISO DATA")
        dest = tmp_path / "output"

        artifact = finalize_iso(produced, dest, "windows-11", _selected())

        assert isinstance(artifact, IsoArtifact)
        assert artifact.iso_path == dest / "windows-11.iso"
        assert artifact.iso_path.read_bytes() == b"ISO DATA"
        assert not produced.exists()

        expected = hashlib.sha256(b"ISO DATA").hexdigest()
        assert artifact.sha256 == expected
        assert artifact.size_bytes == 8
        assert artifact.checksum_path.read_text() == f"{expected}  windows-11.iso\n"

        metadata = json.loads(artifact.metadata_path.read_text())
        assert metadata["name"] == "windows-11"
        assert metadata["sha256"] == expected
        assert metadata["build"]["id"] == "abc-123"

    def test_overwrites_previous_iso(self, tmp_path):
        """An existing ISO for the same target should be replaced."""
        dest = tmp_path / "output"
        dest.mkdir()
        (dest / "windows-11.iso").write_bytes(b"stale")
        produced = tmp_path / "fresh.iso"
        produced.write_bytes(b"fresh")

        artifact = finalize_iso(produced, dest, "windows-11", _selected())

        assert artifact.iso_path.read_bytes() == b"fresh"
