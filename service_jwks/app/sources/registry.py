"""
Static registry of upstream key-set publishers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Tuple

from shared.config import SourceSettings
from shared.errors import ConfigurationError


@dataclass(frozen=True)
class SourceDescriptor:
    """Where and how to reach one publisher."""

    source_id: str
    name: str
    url: str


class SourceRegistry:
    """Ordered mapping of source id to descriptor, filled once at startup."""

    def __init__(self) -> None:
        self._sources: Dict[str, SourceDescriptor] = {}

    @classmethod
    def from_settings(cls, sources: Mapping[str, SourceSettings]) -> "SourceRegistry":
        """Build a registry from the configured `sources` mapping."""
        registry = cls()
        for source_id, settings in sources.items():
            registry.register(
                source_id,
                SourceDescriptor(source_id=source_id, name=settings.name, url=settings.url),
            )
        return registry

    def register(self, source_id: str, descriptor: SourceDescriptor) -> None:
        if not source_id:
            raise ConfigurationError("Source id must not be empty")
        if source_id in self._sources:
            raise ConfigurationError(
                f"Source '{source_id}' registered twice",
                details={"source": source_id},
            )
        if not descriptor.url:
            raise ConfigurationError(
                f"Source '{source_id}' has no fetch location",
                details={"source": source_id},
            )
        self._sources[source_id] = descriptor

    def all(self) -> List[Tuple[str, SourceDescriptor]]:
        """Registered sources in registration order."""
        return list(self._sources.items())

    def get(self, source_id: str) -> SourceDescriptor:
        try:
            return self._sources[source_id]
        except KeyError:
            raise ConfigurationError(
                f"Unknown source '{source_id}'", details={"source": source_id}
            ) from None

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    def __iter__(self) -> Iterator[SourceDescriptor]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)
