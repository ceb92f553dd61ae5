"""Tests for the selected build record and URL construction."""

import pytest

from uup_iso.catalog.targets import TargetCatalog
from uup_iso.request import resolve_request
from uup_iso.selection.result import (
    MULTI_EDITION_PARAM,
    SelectedBuild,
    build_selected_build,
    edition_param,
)
from uup_iso.types import CandidateBuild

BUILD_ID = "0a1b2c3d-aaaa-bbbb-cccc-0123456789ab"


def _select(target_name: str = "windows-11", **kwargs) -> SelectedBuild:
    request = resolve_request(target_name, **kwargs)
    target = TargetCatalog.for_request(request).lookup(target_name)
    candidate = CandidateBuild(
        uuid=BUILD_ID,
        build_number="26100.2033",
        title="Windows 11, version 24H2 (26100.2033)",
    )
    return build_selected_build(candidate, target, request)


class TestBuildSelectedBuild:
    """Tests for build_selected_build function."""

    def test_professional_urls(self) -> None:
        """Should compose the three URLs for a single edition."""
        selected = _select()

        assert selected.id == BUILD_ID
        assert selected.edition == "Professional"
        assert selected.api_url == (
            f"https://api.uupdump.net/get.php?id={BUILD_ID}&lang=en-us&edition=Professional"
        )
        assert selected.download_url == (
            f"https://uupdump.net/download.php?id={BUILD_ID}&edition=Professional&pack=en-us"
        )
        assert selected.download_package_url == (
            f"https://uupdump.net/get.php?id={BUILD_ID}&edition=Professional&pack=en-us"
        )

    def test_download_url_contains_edition_and_pack(self) -> None:
        """The download page URL should carry edition and pack together."""
        selected = _select(language="de-de")
        assert "edition=Professional&pack=de-de" in selected.download_url

    def test_multi_uses_combined_edition(self) -> None:
        """Multi requests should ask for core;professional."""
        selected = _select(edition="multi")

        assert selected.edition == "Multi"
        for url in (selected.api_url, selected.download_url, selected.download_package_url):
            assert f"edition={MULTI_EDITION_PARAM}" in url

    def test_home_maps_to_core(self) -> None:
        """home should produce Core URLs."""
        selected = _select(edition="home")
        assert "edition=Core" in selected.api_url

    def test_custom_hosts(self) -> None:
        """Should honour custom base URLs without doubling slashes."""
        request = resolve_request("windows-11")
        target = TargetCatalog.for_request(request).lookup("windows-11")
        candidate = CandidateBuild(uuid="x", build_number="1", title="t")

        selected = build_selected_build(
            candidate,
            target,
            request,
            api_base_url="http://localhost:8080/api/",
            web_base_url="http://localhost:8080/",
        )

        assert selected.api_url.startswith("http://localhost:8080/api/get.php?id=x")
        assert selected.download_url.startswith("http://localhost:8080/download.php?")

    def test_virtual_edition_carried(self) -> None:
        """The virtual edition should be recorded on the result."""
        assert _select(virtual_edition="Education").virtual_edition == "Education"
        assert _select().virtual_edition is None

    def test_identical_inputs_give_identical_records(self) -> None:
        """Two builds from the same inputs should compare equal."""
        assert _select() == _select()

    def test_record_is_frozen(self) -> None:
        """SelectedBuild should be immutable."""
        selected = _select()
        with pytest.raises(AttributeError):
            selected.id = "other"  # type: ignore[misc]

    def test_to_dict(self) -> None:
        """to_dict should expose every field."""
        data = _select().to_dict()
        assert data["id"] == BUILD_ID
        assert data["build_number"] == "26100.2033"
        assert set(data) == {
            "id",
            "title",
            "build_number",
            "edition",
            "virtual_edition",
            "api_url",
            "download_url",
            "download_package_url",
        }


class TestEditionParam:
    """Tests for edition_param function."""

    @pytest.mark.parametrize(
        ("edition", "expected"),
        [("pro", "Professional"), ("core", "Core"), ("multi", MULTI_EDITION_PARAM)],
    )
    def test_values(self, edition: str, expected: str) -> None:
        """Should render the edition query value."""
        request = resolve_request("windows-11", edition=edition)
        target = TargetCatalog.for_request(request).lookup("windows-11")
        assert edition_param(target, request) == expected
