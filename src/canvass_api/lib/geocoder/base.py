"""Abstract geocoder interface for pluggable provider support.

Canvassing needs two capabilities from a provider: reverse geocoding a
device-reported coordinate to the canonical coordinate of the nearest place,
and forward verification of a street address to postal-normalized fields.
A provider may implement either or both.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger


@dataclass
class ReverseGeocodeResult:
    """Canonical place returned by a reverse geocode."""

    latitude: float
    longitude: float
    matched_address: str | None = None
    raw_response: dict | None = None

    def __post_init__(self) -> None:
        if not (-90 <= self.latitude <= 90):
            msg = f"latitude must be between -90 and 90, got {self.latitude}"
            raise ValueError(msg)
        if not (-180 <= self.longitude <= 180):
            msg = f"longitude must be between -180 and 180, got {self.longitude}"
            raise ValueError(msg)


@dataclass
class VerifiedAddress:
    """Postal-normalized address fields (upper-cased, USPS style)."""

    street_1: str
    street_2: str = ""
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    raw_response: dict | None = None


class GeocodingProviderError(Exception):
    """Raised when a geocoding provider experiences a transport or service error.

    Distinguishes provider failures (timeout, HTTP error, connection error)
    from a successful response with no match (which returns None).

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


class BaseGeocoder(ABC):
    """Abstract geocoder interface. All providers must implement this."""

    def __init__(self, timeout: float) -> None:
        self._timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this geocoder provider."""

    @property
    def supports_reverse(self) -> bool:
        """Whether this provider implements reverse_geocode()."""
        return False

    @property
    def supports_verify(self) -> bool:
        """Whether this provider implements forward_verify()."""
        return False

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        """Resolve coordinates to the nearest canonical place.

        Returns:
            ReverseGeocodeResult or None if the provider found nothing.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        msg = f"{self.provider_name} does not support reverse geocoding"
        raise NotImplementedError(msg)

    async def forward_verify(self, street_address: str) -> VerifiedAddress | None:
        """Normalize a freeform street address against postal data.

        Returns:
            VerifiedAddress or None if the provider found no match.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        msg = f"{self.provider_name} does not support address verification"
        raise NotImplementedError(msg)

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET ``url`` and decode JSON, mapping transport failures to GeocodingProviderError."""
        name = self.provider_name
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.warning(f"{name} geocoder timeout (request redacted)")
            raise GeocodingProviderError(name, "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"{name} geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                name, f"Provider returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.ConnectError as e:
            logger.warning(f"{name} geocoder connection error")
            raise GeocodingProviderError(name, "Connection to geocoding provider failed") from e
        except Exception as e:
            logger.exception(f"{name} geocoder unexpected error")
            raise GeocodingProviderError(name, f"Unexpected error: {e}") from e
