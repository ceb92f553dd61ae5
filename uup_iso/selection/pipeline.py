"""Candidate filter pipeline.

This module reduces the builds returned by one catalog search to exactly one
candidate, or none:

- Stage A: fetch candidates for the target's search term (catalog order)
- Stage B: drop preview builds unless the request or target asks for them
- Stage C: enrich each candidate with its languages, ring and editions
- Stage D: keep candidates whose ring, language and edition match

Every rejection is logged where it is decided, with the expected and actual
values, since the catalog inventory changes daily.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from uup_iso.catalog.client import CatalogClient
from uup_iso.errors import CancelledError, UnexpectedCatalogStateError
from uup_iso.types import CandidateBuild, Edition, RequestConfig, TargetDescriptor

logger = logging.getLogger(__name__)

PREVIEW_MARKER = "preview"

# Rings whose catalog labels drifted between WIF and WIS over time
TOLERANT_RINGS = frozenset({"dev", "beta"})
ALTERNATE_RING_LABELS = frozenset({"WIF", "WIS"})

MULTI_BASE_EDITIONS = (Edition.PROFESSIONAL.value, Edition.CORE.value)


def parse_candidates(response: Mapping[str, Any]) -> list[CandidateBuild]:
    """Parse the ``builds`` of a listid response, keeping catalog order.

    Args:
        response: The ``response`` object of a listid call.

    Returns:
        Candidate builds in the order the catalog returned them.
    """
    builds = response.get("builds") or {}
    rows: Iterable[Any] = builds.values() if isinstance(builds, Mapping) else builds

    candidates: list[CandidateBuild] = []
    for row in rows:
        if not isinstance(row, Mapping) or not row.get("uuid"):
            logger.warning("Ignoring malformed catalog row: %r", row)
            continue
        candidates.append(
            CandidateBuild(
                uuid=str(row["uuid"]),
                build_number=str(row.get("build", "")),
                title=str(row.get("title", "")),
            )
        )
    return candidates


def _names(response: Mapping[str, Any], fancy_key: str, list_key: str) -> frozenset[str]:
    fancy = response.get(fancy_key)
    if isinstance(fancy, Mapping):
        return frozenset(str(k) for k in fancy)
    plain = response.get(list_key)
    if isinstance(plain, list):
        return frozenset(str(v) for v in plain)
    return frozenset()


def passes_preview_gate(
    candidate: CandidateBuild,
    target: TargetDescriptor,
    request: RequestConfig,
) -> bool:
    """Stage B: decide whether a candidate survives the preview gate."""
    if request.is_preview:
        return True
    if PREVIEW_MARKER in target.search_term.lower():
        return True
    if PREVIEW_MARKER in candidate.title.lower():
        logger.info(
            "Skipping %s (%s): preview build but target %s is not a preview target",
            candidate.uuid,
            candidate.title,
            target.name,
        )
        return False
    return True


def ring_matches(
    candidate: CandidateBuild,
    target: TargetDescriptor,
    request: RequestConfig,
) -> bool:
    """Stage D: check the candidate's ring against the target's ring."""
    if target.ring is None:
        return True

    expected = target.ring.value.upper()
    actual = (candidate.release_ring or "").upper()

    if request.ring_lower in TOLERANT_RINGS:
        accepted = {expected} | ALTERNATE_RING_LABELS
    else:
        accepted = {expected}

    if actual in accepted:
        return True

    logger.info(
        "Skipping %s (%s): expected ring %s, got %s",
        candidate.uuid,
        candidate.title,
        " or ".join(sorted(accepted)),
        candidate.release_ring or "(none)",
    )
    return False


def _contains(names: frozenset[str], wanted: str) -> bool:
    return wanted.lower() in {n.lower() for n in names}


def language_matches(candidate: CandidateBuild, request: RequestConfig) -> bool:
    """Stage D: check that the configured language is available."""
    if _contains(candidate.available_languages, request.language):
        return True
    logger.info(
        "Skipping %s (%s): expected language %s, got %s",
        candidate.uuid,
        candidate.title,
        request.language,
        ", ".join(sorted(candidate.available_languages)) or "(none)",
    )
    return False


def edition_matches(candidate: CandidateBuild, target: TargetDescriptor) -> bool:
    """Stage D: check that the required edition is available.

    A Multi target accepts a build exposing either Professional or Core.
    Catalog edition keys are upper case, so names compare case-insensitively.
    """
    if target.required_edition is Edition.MULTI:
        expected = " or ".join(MULTI_BASE_EDITIONS)
        ok = any(_contains(candidate.available_editions, e) for e in MULTI_BASE_EDITIONS)
    else:
        expected = target.required_edition.value
        ok = _contains(candidate.available_editions, expected)

    if not ok:
        logger.info(
            "Skipping %s (%s): expected edition %s, got %s",
            candidate.uuid,
            candidate.title,
            expected,
            ", ".join(sorted(candidate.available_editions)) or "(none)",
        )
    return ok


def candidate_matches(
    candidate: CandidateBuild,
    target: TargetDescriptor,
    request: RequestConfig,
) -> bool:
    """Stage D: all of ring, language and edition must match."""
    return (
        ring_matches(candidate, target, request)
        and language_matches(candidate, request)
        and edition_matches(candidate, target)
    )


class FilterPipeline:
    """Runs the four pipeline stages for one target and request.

    Candidates are enriched and matched one at a time in catalog order, and
    the first match ends the run. Each catalog call completes, including its
    retries, before the next one starts.
    """

    def __init__(
        self,
        client: CatalogClient,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.client = client
        self.cancel_event = cancel_event

    def run(
        self,
        target: TargetDescriptor,
        request: RequestConfig,
    ) -> CandidateBuild | None:
        """Select the first matching candidate in catalog order.

        Args:
            target: Target descriptor being resolved.
            request: Validated request.

        Returns:
            The selected candidate, or None if no candidate matches.

        Raises:
            CatalogUnavailableError: If a catalog call exhausts its retries.
            UnexpectedCatalogStateError: If the catalog contradicts itself.
            CancelledError: If the cancel event is set.
        """
        candidates = self.fetch(target)
        logger.info(
            "Catalog returned %d candidate(s) for %r", len(candidates), target.search_term
        )

        for candidate in candidates:
            if not passes_preview_gate(candidate, target, request):
                continue
            self._raise_if_cancelled()
            self.enrich(candidate, request)
            if candidate_matches(candidate, target, request):
                logger.info(
                    "Selected %s (%s, build %s)",
                    candidate.uuid,
                    candidate.title,
                    candidate.build_number,
                )
                return candidate

        return None

    def fetch(self, target: TargetDescriptor) -> list[CandidateBuild]:
        """Stage A: list candidate builds for the target's search term."""
        logger.info("Searching catalog for %r", target.search_term)
        return parse_candidates(self.client.list_builds(target.search_term))

    def enrich(self, candidate: CandidateBuild, request: RequestConfig) -> None:
        """Stage C: attach languages, ring and editions to a candidate.

        Raises:
            UnexpectedCatalogStateError: If the language lookup reports a
                different build number than the search result.
        """
        langs = self.client.list_languages(candidate.uuid)
        update_info = langs.get("updateInfo") or {}
        reported_build = str(update_info.get("build", ""))

        if reported_build != candidate.build_number:
            raise UnexpectedCatalogStateError(
                f"Catalog build mismatch for {candidate.uuid}: search reported "
                f"{candidate.build_number!r}, language lookup reported "
                f"{reported_build!r}"
            )

        candidate.available_languages = _names(langs, "langFancyNames", "langList")
        ring = update_info.get("ring")
        candidate.release_ring = str(ring) if ring else None

        if not _contains(candidate.available_languages, request.language):
            candidate.available_editions = frozenset()
            return

        editions = self.client.list_editions(candidate.uuid, request.language)
        candidate.available_editions = _names(
            editions, "editionFancyNames", "editionList"
        )

    def _raise_if_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise CancelledError("Build resolution cancelled")


__all__ = [
    "ALTERNATE_RING_LABELS",
    "FilterPipeline",
    "candidate_matches",
    "edition_matches",
    "language_matches",
    "parse_candidates",
    "passes_preview_gate",
    "ring_matches",
]
