"""Tests for request configuration export."""

import json

import pytest
import yaml

from uup_iso.export import export_request_config, request_to_dict
from uup_iso.request import resolve_request


class TestRequestToDict:
    """Tests for request_to_dict function."""

    def test_fields(self):
        """Should expose the resolved request with camelCase keys."""
        request = resolve_request(
            "windows-11beta",
            architecture="arm64",
            edition="multi",
            language="fr-fr",
            esd=True,
            destination_directory="isos",
        )

        data = request_to_dict(request)

        assert data["windowsTargetName"] == "windows-11beta"
        assert data["destinationDirectory"] == "isos"
        assert data["architecture"] == "arm64"
        assert data["arch"] == "arm64"
        assert data["edition"] == "multi"
        assert data["lang"] == "fr-fr"
        assert data["esd"] is True
        assert data["drivers"] is False
        assert data["preview"] is True
        assert data["ringLower"] == "beta"

    def test_target_table(self):
        """Should include every target with its search term."""
        data = request_to_dict(resolve_request("windows-11"))

        assert len(data["targets"]) == 7
        assert data["targets"]["windows-10"] == {
            "search": "windows 10 19045 amd64",
            "edition": "Professional",
        }
        assert data["targets"]["windows-11dev"]["ring"] == "Wif"

    def test_virtual_edition_in_targets(self):
        """A virtual edition should be listed on each target."""
        data = request_to_dict(resolve_request("windows-11", virtual_edition="Education"))
        assert data["targets"]["windows-11"]["virtualEdition"] == "Education"


class TestExportRequestConfig:
    """Tests for export_request_config function."""

    def test_json(self, tmp_path):
        """Should write JSON that reads back to the same dict."""
        request = resolve_request("windows-11")
        path = export_request_config(request, tmp_path / "sub" / "cfg.json")

        assert json.loads(path.read_text()) == request_to_dict(request)

    def test_yaml(self, tmp_path):
        """Should write YAML when asked."""
        request = resolve_request("windows-11canary", netfx3=True)
        path = export_request_config(request, tmp_path / "cfg.yaml", output_format="yaml")

        data = yaml.safe_load(path.read_text())
        assert data["netfx3"] is True
        assert data["targets"]["windows-11canary"]["ring"] == "Canary"

    def test_unsupported_format(self, tmp_path):
        """Unknown formats should raise ValueError."""
        with pytest.raises(ValueError):
            export_request_config(
                resolve_request("windows-11"), tmp_path / "cfg.toml", output_format="toml"  # type: ignore[arg-type]
            )
