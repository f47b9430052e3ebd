"""Geocoder library — tiered reverse geocoding and postal verification.

Public API:
    - BaseGeocoder: Abstract provider interface
    - ReverseGeocodeResult / VerifiedAddress: Result dataclasses
    - GeocodingProviderError: Provider transport/service failure
    - CensusGeocoder, NominatimGeocoder, PhotonGeocoder: HTTP providers
    - CanvassGeocoder: Fallback chain over configured providers
    - get_geocoder: Provider factory/registry
    - get_configured_geocoder: Build the fallback chain from settings
    - one_line_address: Format address parts for a verification query
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from canvass_api.lib.geocoder.address import one_line_address
from canvass_api.lib.geocoder.base import (
    BaseGeocoder,
    GeocodingProviderError,
    ReverseGeocodeResult,
    VerifiedAddress,
)
from canvass_api.lib.geocoder.census import CensusGeocoder
from canvass_api.lib.geocoder.nominatim import NominatimGeocoder
from canvass_api.lib.geocoder.photon import PhotonGeocoder

if TYPE_CHECKING:
    from canvass_api.core.config import Settings

# Provider registry: all known providers
_PROVIDERS: dict[str, type[BaseGeocoder]] = {
    "census": CensusGeocoder,
    "nominatim": NominatimGeocoder,
    "photon": PhotonGeocoder,
}


def get_available_providers() -> list[str]:
    """Return the names of all registered geocoder providers, sorted."""
    return sorted(_PROVIDERS.keys())


def get_geocoder(provider: str, **kwargs: Any) -> BaseGeocoder:
    """Get a geocoder instance by provider name.

    Args:
        provider: Provider name (e.g., "nominatim").
        **kwargs: Forwarded to the provider constructor (e.g., ``timeout=2.0``).

    Raises:
        ValueError: If the provider is not registered.
    """
    cls = _PROVIDERS.get(provider)
    if cls is None:
        msg = f"Unknown geocoder provider: {provider!r}. Available: {list(_PROVIDERS.keys())}"
        raise ValueError(msg)
    return cls(**kwargs)


class CanvassGeocoder:
    """Tries providers in order until one answers.

    A provider that returns no match or fails with ``GeocodingProviderError``
    hands over to the next one. When every provider failed with an error the
    last error is raised; when at least one answered "no match" and none
    matched, the result is ``None``.
    """

    def __init__(self, reverse_providers: list[BaseGeocoder], verify_providers: list[BaseGeocoder]) -> None:
        self.reverse_providers = reverse_providers
        self.verify_providers = verify_providers

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        """Reverse geocode through the reverse tier."""
        last_error: GeocodingProviderError | None = None
        answered = False
        for provider in self.reverse_providers:
            try:
                result = await provider.reverse_geocode(latitude, longitude)
            except GeocodingProviderError as e:
                logger.warning(f"Reverse geocode via {provider.provider_name} failed, trying next tier: {e.message}")
                last_error = e
                continue
            answered = True
            if result is not None:
                logger.debug(f"Reverse geocode resolved by {provider.provider_name}")
                return result
        if last_error is not None and not answered:
            raise last_error
        return None

    async def forward_verify(self, street_address: str) -> VerifiedAddress | None:
        """Verify an address through the verification tier."""
        last_error: GeocodingProviderError | None = None
        answered = False
        for provider in self.verify_providers:
            try:
                result = await provider.forward_verify(street_address)
            except GeocodingProviderError as e:
                logger.warning(f"Address verification via {provider.provider_name} failed: {e.message}")
                last_error = e
                continue
            answered = True
            if result is not None:
                return result
        if last_error is not None and not answered:
            raise last_error
        return None


def _provider_kwargs(settings: Settings) -> dict[str, dict[str, Any]]:
    return {
        "census": {"timeout": settings.geocoder_census_timeout},
        "nominatim": {
            "timeout": settings.geocoder_nominatim_timeout,
            "email": settings.geocoder_nominatim_email,
        },
        "photon": {
            "timeout": settings.geocoder_photon_timeout,
            "base_url": settings.geocoder_photon_base_url,
        },
    }


def _build_tier(names: list[str], kwargs: dict[str, dict[str, Any]], capability: str) -> list[BaseGeocoder]:
    providers: list[BaseGeocoder] = []
    seen: set[str] = set()
    for name in names:
        if name in seen:
            continue
        if name not in _PROVIDERS:
            logger.warning(f"Ignoring unknown geocoder provider {name!r}")
            continue
        seen.add(name)
        geocoder = get_geocoder(name, **kwargs.get(name, {}))
        if getattr(geocoder, capability):
            providers.append(geocoder)
        else:
            logger.warning(f"Geocoder provider {name!r} cannot serve this tier; skipping")
    return providers


def get_configured_geocoder(settings: Settings) -> CanvassGeocoder:
    """Build the reverse and verification tiers from settings, in fallback order."""
    kwargs = _provider_kwargs(settings)
    return CanvassGeocoder(
        reverse_providers=_build_tier(settings.geocoder_reverse_order_list, kwargs, "supports_reverse"),
        verify_providers=_build_tier(settings.geocoder_verify_order_list, kwargs, "supports_verify"),
    )


__all__ = [
    "BaseGeocoder",
    "CanvassGeocoder",
    "CensusGeocoder",
    "GeocodingProviderError",
    "NominatimGeocoder",
    "PhotonGeocoder",
    "ReverseGeocodeResult",
    "VerifiedAddress",
    "get_available_providers",
    "get_configured_geocoder",
    "get_geocoder",
    "one_line_address",
]
