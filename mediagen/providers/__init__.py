"""Provider families known to the orchestrator."""

from mediagen.providers import (
    heygen,
    hailuo,
    kie_flux,
    kie_gpt4o,
    kie_jobs,
    kie_mj,
    kie_runway,
    kie_suno,
    kie_veo,
    pixazo,
    presenton,
    xai,
)
from mediagen.providers.base import ProviderAdapter, StatusRequest

ADAPTERS: tuple[ProviderAdapter, ...] = (
    kie_flux.ADAPTER,
    kie_gpt4o.ADAPTER,
    kie_mj.ADAPTER,
    kie_jobs.ADAPTER,
    kie_veo.ADAPTER,
    kie_runway.ADAPTER,
    kie_suno.ADAPTER,
    hailuo.ADAPTER,
    pixazo.ADAPTER,
    presenton.ADAPTER,
    heygen.ADAPTER,
    xai.ADAPTER,
)

__all__ = ["ADAPTERS", "ProviderAdapter", "StatusRequest"]
