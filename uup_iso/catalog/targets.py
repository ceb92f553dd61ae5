"""Static catalog of supported Windows targets.

Each entry maps a friendly release name to the search text sent to the
catalog, the edition class the build must expose and, for preview rings,
the ring the catalog must report for it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from uup_iso.errors import UnknownTargetError
from uup_iso.types import Edition, RequestConfig, Ring, TargetDescriptor

# name -> (search template, ring)
TARGET_TABLE: tuple[tuple[str, str, Ring | None], ...] = (
    ("windows-10", "windows 10 19045 {arch}", None),
    ("windows-11old", "windows 11 22631 {arch}", None),
    ("windows-11", "windows 11 26100 {arch}", None),
    ("windows-11new", "windows 11 26200 {arch}", None),
    ("windows-11beta", "windows 11 26120 {arch}", Ring.BETA),
    ("windows-11dev", "windows 11 26220 {arch}", Ring.WIF),
    ("windows-11canary", "windows 11 {arch}", Ring.CANARY),
)


class TargetCatalog(Mapping[str, TargetDescriptor]):
    """Read-only mapping of target name to TargetDescriptor."""

    def __init__(
        self,
        arch: str,
        edition: Edition,
        virtual_edition: str | None = None,
    ) -> None:
        self._targets: Mapping[str, TargetDescriptor] = MappingProxyType(
            {
                name: TargetDescriptor(
                    name=name,
                    search_term=template.format(arch=arch),
                    required_edition=edition,
                    ring=ring,
                    virtual_edition=virtual_edition,
                )
                for name, template, ring in TARGET_TABLE
            }
        )

    @classmethod
    def for_request(cls, request: RequestConfig) -> TargetCatalog:
        """Build the catalog for a resolved request's architecture and edition."""
        return cls(
            arch=request.arch,
            edition=request.required_edition,
            virtual_edition=request.virtual_edition,
        )

    def lookup(self, name: str) -> TargetDescriptor:
        """Get the descriptor for a target name.

        Args:
            name: Target name.

        Returns:
            Matching TargetDescriptor.

        Raises:
            UnknownTargetError: If the name is not in the catalog.
        """
        try:
            return self._targets[name]
        except KeyError:
            raise UnknownTargetError(name, self.names()) from None

    def names(self) -> tuple[str, ...]:
        """Return target names in table order."""
        return tuple(self._targets)

    def __getitem__(self, name: str) -> TargetDescriptor:
        return self._targets[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)


def target_names() -> tuple[str, ...]:
    """Return every supported target name."""
    return tuple(name for name, _, _ in TARGET_TABLE)


__all__ = ["TARGET_TABLE", "TargetCatalog", "target_names"]
