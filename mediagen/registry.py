"""Lookup from (media kind, model id) to the provider adapter serving it."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator

from mediagen.errors import UnknownModel
from mediagen.models import MediaKind
from mediagen.providers import ADAPTERS, ProviderAdapter


class AdapterRegistry:
    """Read-only table of provider adapters.

    Built once from a fixed set of adapters; ``resolve`` is a dictionary
    lookup with no I/O, so it is safe to share between concurrent tasks.
    """

    def __init__(self, adapters: Iterable[ProviderAdapter]) -> None:
        families: dict[str, ProviderAdapter] = {}
        routes: dict[tuple[MediaKind, str], ProviderAdapter] = {}
        for adapter in adapters:
            if adapter.family in families:
                raise ValueError(f"Duplicate provider family: {adapter.family}")
            families[adapter.family] = adapter
            for key in adapter.model_ids():
                if key in routes:
                    raise ValueError(
                        f"{key[0].value} model {key[1]!r} claimed by both "
                        f"{routes[key].family} and {adapter.family}"
                    )
                routes[key] = adapter
        self._families = MappingProxyType(families)
        self._routes = MappingProxyType(routes)

    def resolve(self, media_kind: MediaKind | str, model_id: str) -> ProviderAdapter:
        """Return the adapter for a model, or raise UnknownModel."""
        try:
            kind = MediaKind(media_kind)
        except ValueError:
            raise UnknownModel(str(media_kind), model_id) from None
        adapter = self._routes.get((kind, model_id))
        if adapter is None:
            raise UnknownModel(kind.value, model_id)
        return adapter

    def family(self, name: str) -> ProviderAdapter:
        try:
            return self._families[name]
        except KeyError:
            raise KeyError(f"Unknown provider family: {name}") from None

    def families(self) -> list[str]:
        return list(self._families)

    def models(self, media_kind: MediaKind | None = None) -> Iterator[tuple[MediaKind, str, str]]:
        """Yield (media kind, model id, family) for every registered model."""
        for (kind, model_id), adapter in self._routes.items():
            if media_kind is None or kind is media_kind:
                yield kind, model_id, adapter.family

    def __len__(self) -> int:
        return len(self._families)


DEFAULT_REGISTRY = AdapterRegistry(ADAPTERS)
